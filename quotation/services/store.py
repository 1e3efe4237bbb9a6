"""
Project store on top of the ``app_state`` key/value table.

Two blobs are kept:
  * ``projects``: every saved project plus the last active id
  * ``workspace``: the working copy being edited and which project it came from

Writes are whole-blob replacements committed together; a failed commit rolls
back and leaves the previous blobs in place.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from quotation.domain import Project, ProjectData, ProjectStore
from quotation.extensions import db
from quotation.models.app_state import AppState
from quotation.services.catalog import initial_catalog
from quotation.services.errors import NotFoundError, StoreError, ValidationError
from quotation.services.migration import migrate_project_data, migrate_store
from quotation.utils.validators import clean_str

logger = logging.getLogger(__name__)

PROJECTS_KEY = "projects"
WORKSPACE_KEY = "workspace"


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _read(key: str):
    try:
        row = db.session.get(AppState, key)
    except SQLAlchemyError as e:
        db.session.rollback()
        raise StoreError(f"Could not read {key!r}") from e
    return row.payload if row is not None else None


def _put(key: str, payload: dict) -> None:
    row = db.session.get(AppState, key)
    if row is None:
        db.session.add(AppState(key=key, payload=payload))
    else:
        row.payload = payload


def _write(*pairs: Tuple[str, dict]) -> None:
    try:
        for key, payload in pairs:
            _put(key, payload)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("store write failed")
        raise StoreError("Could not save project data") from e


def blank_project(keep_company_from: Optional[ProjectData] = None) -> ProjectData:
    data = ProjectData(equipment=initial_catalog())
    if keep_company_from is not None:
        data = replace(data, company_info=keep_company_from.company_info)
    return data


# ---- projects blob --------------------------------------------------------

def load_store() -> ProjectStore:
    return migrate_store(_read(PROJECTS_KEY) or {})


def list_projects() -> List[dict]:
    store = load_store()
    rows = sorted(store.projects, key=lambda p: p.last_modified or "", reverse=True)
    return [p.summary() for p in rows]


# ---- workspace blob -------------------------------------------------------

def load_workspace() -> Tuple[ProjectData, Optional[str]]:
    """
    Current working copy. Falls back to the last active saved project, then to
    a blank project with the built-in catalog.
    """
    raw = _read(WORKSPACE_KEY)
    if isinstance(raw, dict) and isinstance(raw.get("data"), dict):
        return migrate_project_data(raw["data"]), raw.get("currentProjectId")

    store = load_store()
    last = store.find(store.last_project_id)
    if last is not None:
        return last.data, last.id
    return blank_project(), None


def save_workspace(data: ProjectData, current_project_id: Optional[str]) -> None:
    _write((WORKSPACE_KEY, {"currentProjectId": current_project_id, "data": data.to_dict()}))


def update_workspace(fn: Callable[[ProjectData], ProjectData]) -> ProjectData:
    """Apply a copy-on-write mutation to the working copy and persist it."""
    data, current_id = load_workspace()
    updated = fn(data)
    save_workspace(updated, current_id)
    return updated


def current_project_name() -> Optional[str]:
    _, current_id = load_workspace()
    project = load_store().find(current_id)
    return project.name if project else None


# ---- project manager operations ------------------------------------------

def save_current() -> Project:
    data, current_id = load_workspace()
    store = load_store()
    project = store.find(current_id)
    if project is None:
        raise ValidationError("This is a new project; give it a name to save.", {"name": "required"})

    saved = replace(project, data=data, last_modified=_utcnow_iso())
    store = replace(store, projects=[saved if p.id == saved.id else p for p in store.projects], last_project_id=saved.id)
    _write((PROJECTS_KEY, store.to_dict()))
    logger.info("project saved", extra={"project_id": saved.id})
    return saved


def save_new(name: str) -> Project:
    name = clean_str(name)
    if not name:
        raise ValidationError("Project name is required.", {"name": "required"})

    data, _ = load_workspace()
    store = load_store()
    project = Project(id=uuid.uuid4().hex, name=name, last_modified=_utcnow_iso(), data=data)
    store = replace(store, projects=[*store.projects, project], last_project_id=project.id)
    _write(
        (PROJECTS_KEY, store.to_dict()),
        (WORKSPACE_KEY, {"currentProjectId": project.id, "data": data.to_dict()}),
    )
    logger.info("project created", extra={"project_id": project.id})
    return project


def load_project(project_id: str) -> Project:
    store = load_store()
    project = store.find(project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")
    store = replace(store, last_project_id=project.id)
    _write(
        (PROJECTS_KEY, store.to_dict()),
        (WORKSPACE_KEY, {"currentProjectId": project.id, "data": project.data.to_dict()}),
    )
    return project


def rename_project(project_id: str, name: str) -> Project:
    name = clean_str(name)
    if not name:
        raise ValidationError("Project name is required.", {"name": "required"})
    store = load_store()
    project = store.find(project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")
    renamed = replace(project, name=name)
    store = replace(store, projects=[renamed if p.id == project_id else p for p in store.projects])
    _write((PROJECTS_KEY, store.to_dict()))
    return renamed


def delete_project(project_id: str) -> None:
    """Deleting the active project resets the workspace to a blank one (company info kept)."""
    store = load_store()
    if store.find(project_id) is None:
        raise NotFoundError(f"Project {project_id} not found")

    data, current_id = load_workspace()
    remaining = [p for p in store.projects if p.id != project_id]
    if current_id == project_id:
        store = replace(store, projects=remaining, last_project_id=None)
        _write(
            (PROJECTS_KEY, store.to_dict()),
            (WORKSPACE_KEY, {"currentProjectId": None, "data": blank_project(data).to_dict()}),
        )
    else:
        _write((PROJECTS_KEY, replace(store, projects=remaining).to_dict()))
    logger.info("project deleted", extra={"project_id": project_id})


def new_blank() -> ProjectData:
    data, _ = load_workspace()
    blank = blank_project(data)
    store = replace(load_store(), last_project_id=None)
    _write(
        (PROJECTS_KEY, store.to_dict()),
        (WORKSPACE_KEY, {"currentProjectId": None, "data": blank.to_dict()}),
    )
    return blank
