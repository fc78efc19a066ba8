"""
routers/boq.py — BOQ projects, versions and items

All endpoints require a signed-in user. Creates return the bare row;
listings are wrapped ({projects}, {versions}, {items}).

Called by: main.py (router mount)
Depends on: services/boq_service, schemas/boq, serializers
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import User
from ..schemas.boq import (
    ItemCreate,
    ItemUpdate,
    ProjectCreate,
    ProjectUpdate,
    VersionCreate,
    VersionEdits,
    VersionUpdate,
)
from ..serializers import item_to_dict, project_to_dict, version_to_dict
from ..services import boq_service as svc

router = APIRouter(tags=["boq"])


# ── Projects ─────────────────────────────────────────────────────────


@router.get("/api/boq-projects")
async def list_projects(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return {"projects": [project_to_dict(p) for p in svc.list_projects(db)]}


@router.post("/api/boq-projects", status_code=201)
async def create_project(
    body: ProjectCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    project = svc.create_project(db, body.name, body.client, body.budget, body.location, user)
    return project_to_dict(project)


@router.get("/api/boq-projects/{project_id}")
async def get_project(
    project_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return project_to_dict(svc.get_project(db, project_id))


@router.put("/api/boq-projects/{project_id}")
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    project = svc.update_project(db, project_id, body.model_dump(exclude_none=True))
    return project_to_dict(project)


@router.delete("/api/boq-projects/{project_id}")
async def delete_project(
    project_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    summary = svc.delete_project(db, project_id)
    logger.info("Project {} deleted by user {}", project_id, user.id)
    return {"message": "Project deleted", "deleted": summary}


# ── Versions ─────────────────────────────────────────────────────────


@router.post("/api/boq-versions", status_code=201)
async def create_version(
    body: VersionCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    version = svc.create_version(db, body.project_id, body.copy_from_version)
    return version_to_dict(version)


@router.get("/api/boq-versions/{project_id}")
async def list_versions(
    project_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return {"versions": [version_to_dict(v) for v in svc.list_versions(db, project_id)]}


@router.put("/api/boq-versions/{version_id}")
async def update_version(
    version_id: int,
    body: VersionUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    return version_to_dict(svc.update_version(db, version_id, body.status))


@router.delete("/api/boq-versions/{version_id}")
async def delete_version(
    version_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    items = svc.delete_version(db, version_id)
    return {"message": "Version deleted", "deleted_items": items}


@router.get("/api/boq-versions/{version_id}/edits")
async def get_version_edits(
    version_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return {"editedFields": svc.get_version_edits(db, version_id)}


@router.post("/api/boq-versions/{version_id}/save-edits")
async def save_version_edits(
    version_id: int,
    body: VersionEdits,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    version = svc.save_version_edits(db, version_id, body.edited_fields)
    return {"message": "Edits saved", "editedFields": version.edited_fields or {}}


# ── Items ────────────────────────────────────────────────────────────


@router.post("/api/boq-items", status_code=201)
async def add_item(
    body: ItemCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    item = svc.add_item(
        db, body.project_id, body.estimator, body.table_data, version_id=body.version_id
    )
    return item_to_dict(item)


@router.get("/api/boq-items/version/{version_id}")
async def list_version_items(
    version_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return {"items": [item_to_dict(i) for i in svc.list_items_for_version(db, version_id)]}


@router.get("/api/boq-items/project/{project_id}")
async def list_project_items(
    project_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    return {"items": [item_to_dict(i) for i in svc.list_items_for_project(db, project_id)]}


@router.put("/api/boq-items/{item_id}")
async def update_item(
    item_id: int,
    body: ItemUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    return item_to_dict(svc.update_item(db, item_id, body.table_data))


@router.delete("/api/boq-items/{item_id}")
async def delete_item(
    item_id: int, user: User = Depends(require_user), db: Session = Depends(get_db)
):
    svc.delete_item(db, item_id)
    return {"message": "Item deleted"}
