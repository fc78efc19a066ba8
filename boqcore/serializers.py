"""
serializers.py — ORM row → JSON dict helpers

Shared by the catalog, templates, taxonomy and BOQ routers so every
endpoint returns the same row shape for the same entity.

Business Rules:
- Datetimes are ISO strings, Numerics are floats, missing values are None
- Taxonomy references are rendered by name alongside their ids
- Submission status is derived: NULL pending, True approved, False rejected

Called by: routers/*.py
Depends on: models
"""

from datetime import datetime
from decimal import Decimal

from .models import (
    BoqItem,
    BoqProject,
    BoqVersion,
    Category,
    Material,
    MaterialSubmission,
    MaterialTemplate,
    Product,
    Shop,
    Subcategory,
)


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def _num(v: Decimal | float | None) -> float | None:
    return float(v) if v is not None else None


def submission_status(approved: bool | None) -> str:
    if approved is None:
        return "pending"
    return "approved" if approved else "rejected"


# ── Taxonomy ──────────────────────────────────────────────────────────


def category_to_dict(c: Category) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "created_by": c.created_by_id,
        "created_at": _iso(c.created_at),
    }


def subcategory_to_dict(s: Subcategory) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "category_id": s.category_id,
        "category": s.category.name if s.category else None,
        "created_by": s.created_by_id,
        "created_at": _iso(s.created_at),
    }


def product_to_dict(p: Product) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "subcategory_id": p.subcategory_id,
        "subcategory": p.subcategory.name if p.subcategory else None,
        "category": p.subcategory.category.name if p.subcategory and p.subcategory.category else None,
        "created_by": p.created_by_id,
        "created_at": _iso(p.created_at),
    }


# ── Catalog ───────────────────────────────────────────────────────────


def shop_to_dict(s: Shop) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "location": s.location,
        "phone_country_code": s.phone_country_code,
        "contact_number": s.contact_number,
        "city": s.city,
        "state": s.state,
        "country": s.country,
        "pincode": s.pincode,
        "image": s.image,
        "rating": _num(s.rating),
        "categories": s.categories or [],
        "gst_no": s.gst_no,
        "owner_id": s.owner_id,
        "approved": s.approved,
        "approval_reason": s.approval_reason,
        "reviewed_by": s.reviewed_by_id,
        "reviewed_at": _iso(s.reviewed_at),
        "created_at": _iso(s.created_at),
    }


def material_to_dict(m: Material) -> dict:
    return {
        "id": m.id,
        "name": m.name,
        "code": m.code,
        "rate": _num(m.rate),
        "shop_id": m.shop_id,
        "unit": m.unit,
        "category_id": m.category_id,
        "category": m.category.name if m.category else None,
        "subcategory_id": m.subcategory_id,
        "subcategory": m.subcategory.name if m.subcategory else None,
        "product_id": m.product_id,
        "product": m.product.name if m.product else None,
        "brand_name": m.brand_name,
        "model_number": m.model_number,
        "technical_specification": m.technical_specification,
        "image": m.image,
        "attributes": m.attributes or {},
        "template_id": m.template_id,
        "source": m.source,
        "approved": m.approved,
        "approval_reason": m.approval_reason,
        "reviewed_by": m.reviewed_by_id,
        "reviewed_at": _iso(m.reviewed_at),
        "created_at": _iso(m.created_at),
    }


def template_to_dict(t: MaterialTemplate) -> dict:
    return {
        "id": t.id,
        "name": t.name,
        "code": t.code,
        "category_id": t.category_id,
        "category": t.category.name if t.category else None,
        "created_at": _iso(t.created_at),
        "updated_at": _iso(t.updated_at),
    }


def submission_to_dict(s: MaterialSubmission) -> dict:
    return {
        "id": s.id,
        "template_id": s.template_id,
        "template_name": s.template.name if s.template else None,
        "template_code": s.template.code if s.template else None,
        "shop_id": s.shop_id,
        "shop_name": s.shop.name if s.shop else None,
        "rate": _num(s.rate),
        "unit": s.unit,
        "brand_name": s.brand_name,
        "model_number": s.model_number,
        "subcategory": s.subcategory,
        "technical_specification": s.technical_specification,
        "submitted_by": s.submitted_by_id,
        "submitted_at": _iso(s.submitted_at),
        "approved": s.approved,
        "status": submission_status(s.approved),
        "approval_reason": s.approval_reason,
        "reviewed_by": s.reviewed_by_id,
        "reviewed_at": _iso(s.reviewed_at),
    }


# ── BOQ ───────────────────────────────────────────────────────────────


def project_to_dict(p: BoqProject) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "client": p.client,
        "budget": p.budget,
        "location": p.location,
        "status": p.status,
        "created_by": p.created_by_id,
        "created_at": _iso(p.created_at),
        "updated_at": _iso(p.updated_at),
    }


def version_to_dict(v: BoqVersion) -> dict:
    return {
        "id": v.id,
        "project_id": v.project_id,
        "version_number": v.version_number,
        "status": v.status,
        "project_name": v.project_name,
        "project_client": v.project_client,
        "created_at": _iso(v.created_at),
        "updated_at": _iso(v.updated_at),
    }


def item_to_dict(i: BoqItem) -> dict:
    return {
        "id": i.id,
        "project_id": i.project_id,
        "version_id": i.version_id,
        "estimator": i.estimator,
        "table_data": i.table_data or {},
        "user_added": i.user_added,
        "created_at": _iso(i.created_at),
        "updated_at": _iso(i.updated_at),
    }
