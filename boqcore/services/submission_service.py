"""
submission_service.py — Material templates and supplier submissions

Staff author templates (name + code). Suppliers file detailed submissions
against a template for one of their shops. Approving a submission
materializes it into a catalog Material.

Business Rules:
- Template name and code are each unique (Conflict)
- Renaming a template or changing its code only affects future
  materializations; existing Materials are snapshots and keep their values
- Template delete removes its submissions and materials, then the template,
  in one transaction
- A submission needs template_id and shop_id (MissingField, 400) that both
  exist (NotFound)
- approve: one transaction flips approved NULL → TRUE and inserts the
  Material (approved, source="submission", template_id set). A second
  approve fails with InvalidState and creates nothing.
- reject: reason required; no Material is created

Called by: routers/templates.py
Depends on: services/approval_service (SUBMISSION_GATE), models, database
"""

import logging

from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..exceptions import Conflict, MissingField, NotFound
from ..models import (
    Category,
    Material,
    MaterialSubmission,
    MaterialTemplate,
    Shop,
    Subcategory,
    User,
)
from .approval_service import SUBMISSION_GATE

log = logging.getLogger(__name__)

SUBMISSION_FIELDS = (
    "rate",
    "unit",
    "brand_name",
    "model_number",
    "subcategory",
    "technical_specification",
)


# ── Templates ────────────────────────────────────────────────────────


def list_templates(db: Session) -> list[MaterialTemplate]:
    return db.query(MaterialTemplate).order_by(MaterialTemplate.created_at.desc()).all()


def get_template(db: Session, template_id: int) -> MaterialTemplate:
    template = db.get(MaterialTemplate, template_id)
    if not template:
        raise NotFound("Template not found")
    return template


def _category_id(db: Session, category: str | None) -> int | None:
    category = (category or "").strip()
    if not category:
        return None
    cat = db.query(Category).filter(Category.name == category).first()
    if not cat:
        raise NotFound("Category not found")
    return cat.id


def _check_unique(db: Session, name: str | None, code: str | None, exclude_id: int | None = None):
    if name is not None:
        q = db.query(MaterialTemplate.id).filter(MaterialTemplate.name == name)
        if exclude_id is not None:
            q = q.filter(MaterialTemplate.id != exclude_id)
        if q.first():
            raise Conflict("Material name already exists")
    if code is not None:
        q = db.query(MaterialTemplate.id).filter(MaterialTemplate.code == code)
        if exclude_id is not None:
            q = q.filter(MaterialTemplate.id != exclude_id)
        if q.first():
            raise Conflict("Material code already exists")


def create_template(
    db: Session, name: str | None, code: str | None, category: str | None = None
) -> MaterialTemplate:
    name = (name or "").strip()
    code = (code or "").strip()
    if not name or not code:
        raise MissingField("Name and code are required")
    category_id = _category_id(db, category)
    _check_unique(db, name, code)
    template = MaterialTemplate(name=name, code=code, category_id=category_id)
    with unit_of_work(db):
        db.add(template)
    db.refresh(template)
    log.info("Template %s created: %s / %s", template.id, name, code)
    return template


def update_template(
    db: Session,
    template_id: int,
    name: str | None = None,
    code: str | None = None,
    category: str | None = None,
) -> MaterialTemplate:
    template = get_template(db, template_id)
    if name is not None:
        name = name.strip()
        if not name:
            raise MissingField("Material name is required")
    if code is not None:
        code = code.strip()
        if not code:
            raise MissingField("Material code is required")
    if name is None and code is None and category is None:
        raise MissingField("No fields to update")
    category_id = _category_id(db, category) if category is not None else template.category_id
    _check_unique(db, name, code, exclude_id=template.id)
    with unit_of_work(db):
        if name is not None:
            template.name = name
        if code is not None:
            template.code = code
        template.category_id = category_id
    db.refresh(template)
    return template


def delete_template(db: Session, template_id: int) -> dict:
    template = get_template(db, template_id)
    with unit_of_work(db):
        submissions = (
            db.query(MaterialSubmission)
            .filter(MaterialSubmission.template_id == template.id)
            .delete(synchronize_session="fetch")
        )
        materials = (
            db.query(Material)
            .filter(Material.template_id == template.id)
            .delete(synchronize_session="fetch")
        )
        db.query(MaterialTemplate).filter(MaterialTemplate.id == template.id).delete(
            synchronize_session="fetch"
        )
    log.info(
        "Template %s deleted (%d submissions, %d materials)", template_id, submissions, materials
    )
    return {"submissions": submissions, "materials": materials}


# ── Submissions ──────────────────────────────────────────────────────


def create_submission(db: Session, data: dict, user: User) -> MaterialSubmission:
    template_id = data.get("template_id")
    shop_id = data.get("shop_id")
    if not template_id or not shop_id:
        raise MissingField("template_id and shop_id are required")
    get_template(db, template_id)
    if db.get(Shop, shop_id) is None:
        raise NotFound("Shop not found")

    fields = {k: data[k] for k in SUBMISSION_FIELDS if data.get(k) is not None}
    submission = MaterialSubmission(
        template_id=template_id,
        shop_id=shop_id,
        submitted_by_id=user.id,
        approved=None,
        **fields,
    )
    with unit_of_work(db):
        db.add(submission)
    db.refresh(submission)
    log.info(
        "Submission %s filed by user %s for template %s / shop %s",
        submission.id,
        user.id,
        template_id,
        shop_id,
    )
    return submission


def get_submission(db: Session, submission_id: int) -> MaterialSubmission:
    submission = db.get(MaterialSubmission, submission_id)
    if not submission:
        raise NotFound("Submission not found")
    return submission


def list_pending_submissions(db: Session) -> list[MaterialSubmission]:
    return SUBMISSION_GATE.pending(db).all()


def list_supplier_submissions(db: Session, user: User) -> list[MaterialSubmission]:
    return (
        db.query(MaterialSubmission)
        .join(Shop, MaterialSubmission.shop_id == Shop.id)
        .filter(Shop.owner_id == user.id)
        .order_by(MaterialSubmission.submitted_at.desc())
        .all()
    )


def _materialize(db: Session, submission: MaterialSubmission) -> Material:
    """Copy template identity and submission detail into a new Material."""
    template = db.get(MaterialTemplate, submission.template_id)
    if template is None:
        raise NotFound("Template not found")

    subcategory_id = None
    if submission.subcategory and template.category_id:
        sub = (
            db.query(Subcategory.id)
            .filter(
                Subcategory.name == submission.subcategory,
                Subcategory.category_id == template.category_id,
            )
            .first()
        )
        subcategory_id = sub[0] if sub else None

    material = Material(
        name=template.name,
        code=template.code,
        rate=submission.rate if submission.rate is not None else 0,
        shop_id=submission.shop_id,
        unit=submission.unit,
        category_id=template.category_id,
        subcategory_id=subcategory_id,
        brand_name=submission.brand_name,
        model_number=submission.model_number,
        technical_specification=submission.technical_specification,
        template_id=template.id,
        source="submission",
        approved=True,
        reviewed_at=submission.reviewed_at,
        reviewed_by_id=submission.reviewed_by_id,
    )
    db.add(material)
    db.flush()
    return material


def approve_submission(
    db: Session, submission_id: int, user: User
) -> tuple[MaterialSubmission, Material]:
    submission, material = SUBMISSION_GATE.approve(db, submission_id, user, on_approve=_materialize)
    log.info("Submission %s materialized as material %s", submission_id, material.id)
    return submission, material


def reject_submission(
    db: Session, submission_id: int, reason: str | None, user: User
) -> MaterialSubmission:
    return SUBMISSION_GATE.reject(db, submission_id, reason, user)
