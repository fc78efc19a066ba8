"""
boq_service.py — BOQ projects, versions and line items

A project owns an ordered list of versions; a version owns the line items
estimators added to it, plus the per-cell overrides the editor saved.

Business Rules:
- Version numbers are monotonic per project: max(existing) + 1, starting
  at 1. Numbers are never reused while a higher one exists. The number is
  computed inside the create transaction; the (project_id, version_number)
  unique constraint turns a lost race into Conflict.
- A version snapshots the project's name and client at creation time
- Copy-on-version: every item of the source version is duplicated into the
  new version with estimator and table_data preserved. The source must
  belong to the same project.
- Status moves forward only: project draft → submitted → finalized,
  version draft → submitted. Re-setting the current status is a no-op.
- Item listings only return user_added rows
- Project delete removes items, versions, then the project; version delete
  removes its items, then the version. One transaction each.

Called by: routers/boq.py
Depends on: models, database.unit_of_work
"""

import copy
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..exceptions import InvalidState, MissingField, NotFound
from ..models import PROJECT_STATUSES, VERSION_STATUSES, BoqItem, BoqProject, BoqVersion, User

log = logging.getLogger(__name__)

PROJECT_FIELDS = ("name", "client", "budget", "location", "status")


def _check_forward(current: str, new: str, order: tuple[str, ...], label: str) -> None:
    if new not in order:
        raise InvalidState(f"Unknown {label} status: {new}")
    if order.index(new) < order.index(current):
        raise InvalidState(f"{label} cannot move from {current} back to {new}")


# ── Projects ─────────────────────────────────────────────────────────


def list_projects(db: Session) -> list[BoqProject]:
    return db.query(BoqProject).order_by(BoqProject.created_at.desc()).all()


def get_project(db: Session, project_id: int) -> BoqProject:
    project = db.get(BoqProject, project_id)
    if not project:
        raise NotFound("Project not found")
    return project


def create_project(
    db: Session,
    name: str | None,
    client: str | None = None,
    budget: str | None = None,
    location: str | None = None,
    user: User | None = None,
) -> BoqProject:
    name = (name or "").strip()
    if not name:
        raise MissingField("Project name is required")
    project = BoqProject(
        name=name,
        client=client,
        budget=budget,
        location=location,
        status="draft",
        created_by_id=user.id if user else None,
    )
    with unit_of_work(db):
        db.add(project)
    db.refresh(project)
    log.info("Project %s (%r) created", project.id, name)
    return project


def update_project(db: Session, project_id: int, data: dict) -> BoqProject:
    project = get_project(db, project_id)
    fields = {k: v for k, v in data.items() if k in PROJECT_FIELDS and v is not None}
    if not fields:
        raise MissingField("No fields to update")
    if "name" in fields and not fields["name"].strip():
        raise MissingField("Project name is required")
    if "status" in fields:
        _check_forward(project.status, fields["status"], PROJECT_STATUSES, "Project")
    with unit_of_work(db):
        for key, value in fields.items():
            setattr(project, key, value)
    db.refresh(project)
    return project


def delete_project(db: Session, project_id: int) -> dict:
    project = get_project(db, project_id)
    with unit_of_work(db):
        items = (
            db.query(BoqItem)
            .filter(BoqItem.project_id == project.id)
            .delete(synchronize_session="fetch")
        )
        versions = (
            db.query(BoqVersion)
            .filter(BoqVersion.project_id == project.id)
            .delete(synchronize_session="fetch")
        )
        db.query(BoqProject).filter(BoqProject.id == project.id).delete(
            synchronize_session="fetch"
        )
    log.info("Project %s deleted (%d versions, %d items)", project_id, versions, items)
    return {"versions": versions, "items": items}


# ── Versions ─────────────────────────────────────────────────────────


def list_versions(db: Session, project_id: int) -> list[BoqVersion]:
    """Newest first. Raises NotFound for an unknown project."""
    project = get_project(db, project_id)
    return (
        db.query(BoqVersion)
        .filter(BoqVersion.project_id == project.id)
        .order_by(BoqVersion.version_number.desc())
        .all()
    )


def get_version(db: Session, version_id: int) -> BoqVersion:
    version = db.get(BoqVersion, version_id)
    if not version:
        raise NotFound("Version not found")
    return version


def create_version(
    db: Session, project_id: int | None, copy_from_version_id: int | None = None
) -> BoqVersion:
    """Open the next version of a project, optionally seeded from an earlier one."""
    if not project_id:
        raise MissingField("project_id is required")
    project = get_project(db, project_id)
    source = None
    if copy_from_version_id is not None:
        source = db.get(BoqVersion, copy_from_version_id)
        if source is None or source.project_id != project.id:
            raise NotFound("Source version not found for this project")

    with unit_of_work(db):
        current = (
            db.query(func.max(BoqVersion.version_number))
            .filter(BoqVersion.project_id == project.id)
            .scalar()
        )
        version = BoqVersion(
            project_id=project.id,
            version_number=(current or 0) + 1,
            status="draft",
            project_name=project.name,
            project_client=project.client,
            edited_fields={},
        )
        db.add(version)
        db.flush()

        copied = 0
        if source is not None:
            items = (
                db.query(BoqItem)
                .filter(BoqItem.version_id == source.id)
                .order_by(BoqItem.id)
                .all()
            )
            for item in items:
                db.add(
                    BoqItem(
                        project_id=project.id,
                        version_id=version.id,
                        estimator=item.estimator,
                        table_data=copy.deepcopy(item.table_data),
                        user_added=item.user_added,
                    )
                )
            copied = len(items)

    db.refresh(version)
    log.info(
        "Project %s version %d created (id=%s, copied %d items from %s)",
        project.id,
        version.version_number,
        version.id,
        copied,
        copy_from_version_id,
    )
    return version


def update_version(db: Session, version_id: int, status: str | None) -> BoqVersion:
    version = get_version(db, version_id)
    if not status:
        raise MissingField("status is required")
    _check_forward(version.status, status, VERSION_STATUSES, "Version")
    if status != version.status:
        with unit_of_work(db):
            version.status = status
        db.refresh(version)
        log.info("Version %s moved to %s", version_id, status)
    return version


def delete_version(db: Session, version_id: int) -> int:
    """Delete a version and its items. Returns the number of items removed."""
    version = get_version(db, version_id)
    with unit_of_work(db):
        items = (
            db.query(BoqItem)
            .filter(BoqItem.version_id == version.id)
            .delete(synchronize_session="fetch")
        )
        db.query(BoqVersion).filter(BoqVersion.id == version.id).delete(
            synchronize_session="fetch"
        )
    log.info("Version %s deleted with %d items", version_id, items)
    return items


def get_version_edits(db: Session, version_id: int) -> dict:
    return get_version(db, version_id).edited_fields or {}


def save_version_edits(db: Session, version_id: int, edited_fields: dict | None) -> BoqVersion:
    version = get_version(db, version_id)
    with unit_of_work(db):
        version.edited_fields = dict(edited_fields or {})
    db.refresh(version)
    return version


# ── Items ────────────────────────────────────────────────────────────


def add_item(
    db: Session,
    project_id: int | None,
    estimator: str | None,
    table_data: dict | None,
    version_id: int | None = None,
) -> BoqItem:
    if not project_id:
        raise MissingField("project_id is required")
    estimator = (estimator or "").strip()
    if not estimator:
        raise MissingField("estimator is required")
    if table_data is None:
        raise MissingField("table_data is required")
    project = get_project(db, project_id)
    if version_id is not None:
        version = get_version(db, version_id)
        if version.project_id != project.id:
            raise NotFound("Version not found for this project")

    item = BoqItem(
        project_id=project.id,
        version_id=version_id,
        estimator=estimator,
        table_data=table_data,
        user_added=True,
    )
    with unit_of_work(db):
        db.add(item)
    db.refresh(item)
    return item


def get_item(db: Session, item_id: int) -> BoqItem:
    item = db.get(BoqItem, item_id)
    if not item:
        raise NotFound("BOQ item not found")
    return item


def list_items_for_version(db: Session, version_id: int) -> list[BoqItem]:
    version = get_version(db, version_id)
    return (
        db.query(BoqItem)
        .filter(BoqItem.version_id == version.id, BoqItem.user_added.is_(True))
        .order_by(BoqItem.created_at, BoqItem.id)
        .all()
    )


def list_items_for_project(db: Session, project_id: int) -> list[BoqItem]:
    project = get_project(db, project_id)
    return (
        db.query(BoqItem)
        .filter(BoqItem.project_id == project.id, BoqItem.user_added.is_(True))
        .order_by(BoqItem.created_at, BoqItem.id)
        .all()
    )


def update_item(db: Session, item_id: int, table_data: dict | None) -> BoqItem:
    item = get_item(db, item_id)
    if table_data is None:
        raise MissingField("table_data is required")
    with unit_of_work(db):
        item.table_data = table_data
    db.refresh(item)
    return item


def delete_item(db: Session, item_id: int) -> None:
    item = get_item(db, item_id)
    with unit_of_work(db):
        db.query(BoqItem).filter(BoqItem.id == item.id).delete(synchronize_session="fetch")
