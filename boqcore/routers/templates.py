"""
routers/templates.py — Material templates, supplier submissions, supplier views

Staff author templates; suppliers (and purchase/admin on their behalf)
submit against them; staff approve, which creates the catalog Material.

Called by: main.py (router mount)
Depends on: services/submission_service, services/catalog_service, serializers
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_staff, require_submitter, require_supplier
from ..models import User
from ..schemas.catalog import RejectRequest, SubmissionCreate, TemplateCreate, TemplateUpdate
from ..serializers import shop_to_dict, submission_to_dict, template_to_dict
from ..services import catalog_service
from ..services import submission_service as svc

router = APIRouter(tags=["templates"])


# ── Templates ────────────────────────────────────────────────────────


@router.get("/api/material-templates")
async def list_templates(db: Session = Depends(get_db)):
    return {"templates": [template_to_dict(t) for t in svc.list_templates(db)]}


@router.post("/api/material-templates", status_code=201)
async def create_template(
    body: TemplateCreate,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    template = svc.create_template(db, body.name, body.code, body.category)
    return {"template": template_to_dict(template)}


@router.put("/api/material-templates/{template_id}")
async def update_template(
    template_id: int,
    body: TemplateUpdate,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    template = svc.update_template(db, template_id, body.name, body.code, body.category)
    return {"template": template_to_dict(template)}


@router.delete("/api/material-templates/{template_id}")
async def delete_template(
    template_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    summary = svc.delete_template(db, template_id)
    logger.info("Template {} deleted by user {}", template_id, user.id)
    return {"message": "Template deleted", "deleted": summary}


# ── Submissions ──────────────────────────────────────────────────────


@router.post("/api/material-submissions", status_code=201)
async def create_submission(
    body: SubmissionCreate,
    user: User = Depends(require_submitter),
    db: Session = Depends(get_db),
):
    submission = svc.create_submission(db, body.model_dump(exclude_none=True), user)
    return {"submission": submission_to_dict(submission)}


@router.get("/api/material-submissions-pending-approval")
async def list_pending_submissions(
    user: User = Depends(require_staff), db: Session = Depends(get_db)
):
    subs = svc.list_pending_submissions(db)
    return {
        "submissions": [
            {"id": s.id, "status": "pending", "submission": submission_to_dict(s)} for s in subs
        ]
    }


@router.post("/api/material-submissions/{submission_id}/approve")
async def approve_submission(
    submission_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    submission, material = svc.approve_submission(db, submission_id, user)
    return {"submission": submission_to_dict(submission), "material": {"id": material.id}}


@router.post("/api/material-submissions/{submission_id}/reject")
async def reject_submission(
    submission_id: int,
    body: RejectRequest | None = None,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    reason = body.reason if body else None
    submission = svc.reject_submission(db, submission_id, reason, user)
    return {"submission": submission_to_dict(submission)}


# ── Supplier views ───────────────────────────────────────────────────


@router.get("/api/supplier/my-submissions")
async def my_submissions(user: User = Depends(require_supplier), db: Session = Depends(get_db)):
    subs = svc.list_supplier_submissions(db, user)
    return {"submissions": [submission_to_dict(s) for s in subs]}


@router.get("/api/supplier/my-shops")
async def my_shops(user: User = Depends(require_supplier), db: Session = Depends(get_db)):
    shops = catalog_service.list_owner_shops(db, user)
    return {"shops": [shop_to_dict(s) for s in shops]}
