from __future__ import annotations

from dataclasses import replace
from typing import Mapping, Optional

from quotation.domain import ClientInfo, CompanyInfo, ProjectData
from quotation.services.errors import ValidationError
from quotation.utils.validators import clean_str, normalize_phone


def update_info(project: ProjectData, company: Optional[Mapping] = None, client: Optional[Mapping] = None) -> ProjectData:
    """Replace the header blocks printed on the quotation. Omitted blocks stay as they are."""
    if company is not None:
        raw_phone = clean_str(company.get("phone"))
        phone = normalize_phone(raw_phone) if raw_phone else ""
        if phone is None:
            raise ValidationError("Invalid phone number.", {"phone": "expected 9-12 digits"})
        project = replace(project, company_info=CompanyInfo(
            name=clean_str(company.get("name")) or "",
            address=clean_str(company.get("address"), max_len=1000) or "",
            phone=phone,
        ))
    if client is not None:
        project = replace(project, client_info=ClientInfo(
            name=clean_str(client.get("name")) or "",
            project=clean_str(client.get("project")) or "",
        ))
    return project
