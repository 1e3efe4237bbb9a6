from flask import jsonify, request

from quotation.services import store
from . import bp

@bp.get("/")
def list_json():
    _, current_id = store.load_workspace()
    return jsonify(ok=True, rows=store.list_projects(), current_project_id=current_id)

@bp.get("/current.json")
def current_json():
    data, current_id = store.load_workspace()
    return jsonify(ok=True, current_project_id=current_id, data=data.to_dict())

@bp.post("/save")
def save():
    """Overwrite the active saved project with the working copy."""
    project = store.save_current()
    return jsonify(ok=True, project=project.summary())

@bp.post("/")
def save_as_new():
    payload = request.get_json(silent=True) or {}
    project = store.save_new(payload.get("name"))
    return jsonify(ok=True, project=project.summary()), 201

@bp.post("/<project_id>/load")
def load(project_id: str):
    project = store.load_project(project_id)
    return jsonify(ok=True, project=project.summary())

@bp.put("/<project_id>")
def rename(project_id: str):
    payload = request.get_json(silent=True) or {}
    project = store.rename_project(project_id, payload.get("name"))
    return jsonify(ok=True, project=project.summary())

@bp.delete("/<project_id>")
def delete(project_id: str):
    store.delete_project(project_id)
    return jsonify(ok=True, id=project_id)

@bp.post("/new")
def new_blank():
    """Fresh workspace with the built-in catalog; company details carry over."""
    data = store.new_blank()
    return jsonify(ok=True, data=data.to_dict())
