# quotation/domain.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from quotation.constants import (
    ASSET_CUSTOMER,
    ASSET_UTILITY,
    INVESTMENT_CUSTOMER,
    INVESTMENT_UTILITY,
    SCHEMA_VERSION,
)


@dataclass(frozen=True)
class EquipmentItem:
    """
    Catalog entry. ``parent_id`` marks a sub-item that is shown to the
    customer under its parent.
    """
    id: str
    name: str
    price: float
    unit: str
    department: str
    code: str = ""
    parent_id: Optional[str] = None

    @property
    def is_child(self) -> bool:
        return bool(self.parent_id)

    def to_dict(self) -> dict:
        d = dict(
            id=self.id,
            code=self.code,
            name=self.name,
            price=self.price,
            unit=self.unit,
            department=self.department,
        )
        if self.parent_id:
            d["parentId"] = self.parent_id
        return d

    @staticmethod
    def from_dict(d: dict) -> "EquipmentItem":
        return EquipmentItem(
            id=str(d["id"]),
            code=d.get("code") or "",
            name=d["name"],
            price=float(d.get("price") or 0),
            unit=d.get("unit") or "",
            department=d.get("department") or "",
            parent_id=d.get("parentId") or None,
        )


@dataclass(frozen=True)
class ItemQuantities:
    install: int = 0
    remove: int = 0
    reuse: int = 0

    @property
    def is_empty(self) -> bool:
        return self.install <= 0 and self.remove <= 0 and self.reuse <= 0

    def to_dict(self) -> dict:
        # zero counts are left out, like the saved blobs do
        return {k: v for k, v in (("install", self.install), ("remove", self.remove), ("reuse", self.reuse)) if v}

    @staticmethod
    def from_dict(d: dict) -> "ItemQuantities":
        return ItemQuantities(
            install=int(d.get("install") or 0),
            remove=int(d.get("remove") or 0),
            reuse=int(d.get("reuse") or 0),
        )


@dataclass(frozen=True)
class Job:
    """A unit of work inside one department."""
    id: str
    name: str
    department: str
    investment: str
    asset: str
    profit_margin: Optional[float] = None
    items: Dict[str, ItemQuantities] = field(default_factory=dict)

    @property
    def is_chargeable(self) -> bool:
        return self.investment != INVESTMENT_UTILITY

    @property
    def is_profit_eligible(self) -> bool:
        return self.investment == INVESTMENT_CUSTOMER and self.asset == ASSET_CUSTOMER

    @property
    def is_donated(self) -> bool:
        return self.investment == INVESTMENT_UTILITY and self.asset == ASSET_UTILITY

    def to_dict(self) -> dict:
        return dict(
            id=self.id,
            name=self.name,
            department=self.department,
            investment=self.investment,
            asset=self.asset,
            profitMargin=self.profit_margin,
            items={item_id: q.to_dict() for item_id, q in self.items.items()},
        )

    @staticmethod
    def from_dict(d: dict) -> "Job":
        margin = d.get("profitMargin")
        return Job(
            id=str(d["id"]),
            name=d.get("name") or "",
            department=d.get("department") or "",
            investment=d.get("investment") or INVESTMENT_CUSTOMER,
            asset=d.get("asset") or ASSET_CUSTOMER,
            profit_margin=float(margin) if margin is not None else None,
            items={str(k): ItemQuantities.from_dict(v) for k, v in (d.get("items") or {}).items()},
        )


@dataclass(frozen=True)
class CompanyInfo:
    name: str = ""
    address: str = ""
    phone: str = ""

    def to_dict(self) -> dict:
        return dict(name=self.name, address=self.address, phone=self.phone)


@dataclass(frozen=True)
class ClientInfo:
    name: str = ""
    project: str = ""

    def to_dict(self) -> dict:
        return dict(name=self.name, project=self.project)


@dataclass(frozen=True)
class ProjectData:
    equipment: List[EquipmentItem] = field(default_factory=list)
    jobs: List[Job] = field(default_factory=list)
    company_info: CompanyInfo = field(default_factory=CompanyInfo)
    client_info: ClientInfo = field(default_factory=ClientInfo)

    def catalog(self) -> Dict[str, EquipmentItem]:
        return {e.id: e for e in self.equipment}

    def find_job(self, job_id: str) -> Optional[Job]:
        return next((j for j in self.jobs if j.id == job_id), None)

    def to_dict(self) -> dict:
        return dict(
            equipment=[e.to_dict() for e in self.equipment],
            jobs=[j.to_dict() for j in self.jobs],
            companyInfo=self.company_info.to_dict(),
            clientInfo=self.client_info.to_dict(),
            schemaVersion=SCHEMA_VERSION,
        )

    @staticmethod
    def from_dict(d: dict) -> "ProjectData":
        company = d.get("companyInfo") or {}
        client = d.get("clientInfo") or {}
        return ProjectData(
            equipment=[EquipmentItem.from_dict(e) for e in d.get("equipment") or []],
            jobs=[Job.from_dict(j) for j in d.get("jobs") or []],
            company_info=CompanyInfo(
                name=company.get("name") or "",
                address=company.get("address") or "",
                phone=company.get("phone") or "",
            ),
            client_info=ClientInfo(name=client.get("name") or "", project=client.get("project") or ""),
        )


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    last_modified: str
    data: ProjectData

    def to_dict(self) -> dict:
        return dict(id=self.id, name=self.name, lastModified=self.last_modified, data=self.data.to_dict())

    def summary(self) -> dict:
        return dict(id=self.id, name=self.name, lastModified=self.last_modified)


@dataclass(frozen=True)
class ProjectStore:
    """The persisted blob: every saved project plus the last active one."""
    projects: List[Project] = field(default_factory=list)
    last_project_id: Optional[str] = None

    def find(self, project_id: Optional[str]) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def to_dict(self) -> dict:
        return dict(projects=[p.to_dict() for p in self.projects], lastProjectId=self.last_project_id)
