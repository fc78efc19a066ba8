"""
catalog_service.py — Shops and directly entered materials

Business Rules:
- New shops and materials always start pending (approved = False),
  whoever creates them; only the approval gate can publish them
- Updates never touch approval columns; those move only through the gate
- An update with no recognised fields is rejected (MissingField)
- Shop delete removes the shop's submissions and materials first, then the
  shop, in one transaction
- Taxonomy references on a material must exist

Called by: routers/catalog.py, routers/templates.py (supplier views)
Depends on: models, database.unit_of_work, services/approval_service
"""

import logging

from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..exceptions import MissingField, NotFound
from ..models import (
    Category,
    Material,
    MaterialSubmission,
    Product,
    Shop,
    Subcategory,
    User,
)
from .approval_service import MATERIAL_GATE, SHOP_GATE

log = logging.getLogger(__name__)

SHOP_FIELDS = (
    "name",
    "location",
    "phone_country_code",
    "contact_number",
    "city",
    "state",
    "country",
    "pincode",
    "image",
    "rating",
    "categories",
    "gst_no",
)

MATERIAL_FIELDS = (
    "name",
    "code",
    "rate",
    "shop_id",
    "unit",
    "category_id",
    "subcategory_id",
    "product_id",
    "brand_name",
    "model_number",
    "technical_specification",
    "image",
    "attributes",
)

_MATERIAL_REFS = {
    "shop_id": (Shop, "Shop"),
    "category_id": (Category, "Category"),
    "subcategory_id": (Subcategory, "Subcategory"),
    "product_id": (Product, "Product"),
}


def _pick(data: dict, allowed: tuple[str, ...]) -> dict:
    return {k: v for k, v in data.items() if k in allowed and v is not None}


def _require_name(fields: dict, label: str) -> None:
    if not (fields.get("name") or "").strip():
        raise MissingField(f"{label} name is required")


def _check_material_refs(db: Session, fields: dict) -> None:
    for key, (model, label) in _MATERIAL_REFS.items():
        ref = fields.get(key)
        if ref is not None and db.get(model, ref) is None:
            raise NotFound(f"{label} not found")


# ── Shops ────────────────────────────────────────────────────────────


def list_public_shops(db: Session) -> list[Shop]:
    return SHOP_GATE.public(db).all()


def list_pending_shops(db: Session) -> list[Shop]:
    return SHOP_GATE.pending(db).all()


def list_owner_shops(db: Session, user: User) -> list[Shop]:
    return (
        db.query(Shop)
        .filter(Shop.owner_id == user.id)
        .order_by(Shop.created_at.desc())
        .all()
    )


def get_shop(db: Session, shop_id: int) -> Shop:
    shop = db.get(Shop, shop_id)
    if not shop:
        raise NotFound("Shop not found")
    return shop


def create_shop(db: Session, data: dict, user: User) -> Shop:
    fields = _pick(data, SHOP_FIELDS)
    _require_name(fields, "Shop")
    shop = Shop(**fields, owner_id=user.id, approved=False)
    with unit_of_work(db):
        db.add(shop)
    db.refresh(shop)
    log.info("Shop %s (%r) submitted by user %s", shop.id, shop.name, user.id)
    return shop


def update_shop(db: Session, shop_id: int, data: dict) -> Shop:
    shop = get_shop(db, shop_id)
    fields = _pick(data, SHOP_FIELDS)
    if not fields:
        raise MissingField("No fields to update")
    if "name" in fields:
        _require_name(fields, "Shop")
    with unit_of_work(db):
        for key, value in fields.items():
            setattr(shop, key, value)
    db.refresh(shop)
    return shop


def delete_shop(db: Session, shop_id: int) -> None:
    shop = get_shop(db, shop_id)
    with unit_of_work(db):
        db.query(MaterialSubmission).filter(MaterialSubmission.shop_id == shop.id).delete(
            synchronize_session="fetch"
        )
        db.query(Material).filter(Material.shop_id == shop.id).delete(synchronize_session="fetch")
        db.query(Shop).filter(Shop.id == shop.id).delete(synchronize_session="fetch")
    log.info("Shop %s deleted with its materials and submissions", shop_id)


def approve_shop(db: Session, shop_id: int, user: User) -> Shop:
    shop, _ = SHOP_GATE.approve(db, shop_id, user)
    return shop


def reject_shop(db: Session, shop_id: int, reason: str | None, user: User) -> Shop:
    return SHOP_GATE.reject(db, shop_id, reason, user)


# ── Materials ────────────────────────────────────────────────────────


def list_public_materials(db: Session) -> list[Material]:
    return MATERIAL_GATE.public(db).all()


def list_pending_materials(db: Session) -> list[Material]:
    return MATERIAL_GATE.pending(db).all()


def get_material(db: Session, material_id: int) -> Material:
    material = db.get(Material, material_id)
    if not material:
        raise NotFound("Material not found")
    return material


def create_material(db: Session, data: dict, user: User) -> Material:
    fields = _pick(data, MATERIAL_FIELDS)
    _require_name(fields, "Material")
    _check_material_refs(db, fields)
    fields.setdefault("rate", 0)
    material = Material(**fields, source="direct", approved=False)
    with unit_of_work(db):
        db.add(material)
    db.refresh(material)
    log.info("Material %s (%r) submitted by user %s", material.id, material.name, user.id)
    return material


def update_material(db: Session, material_id: int, data: dict) -> Material:
    material = get_material(db, material_id)
    fields = _pick(data, MATERIAL_FIELDS)
    if not fields:
        raise MissingField("No fields to update")
    if "name" in fields:
        _require_name(fields, "Material")
    _check_material_refs(db, fields)
    with unit_of_work(db):
        for key, value in fields.items():
            setattr(material, key, value)
    db.refresh(material)
    return material


def delete_material(db: Session, material_id: int) -> None:
    material = get_material(db, material_id)
    with unit_of_work(db):
        db.query(Material).filter(Material.id == material.id).delete(synchronize_session="fetch")
    log.info("Material %s deleted", material_id)


def approve_material(db: Session, material_id: int, user: User) -> Material:
    material, _ = MATERIAL_GATE.approve(db, material_id, user)
    return material


def reject_material(db: Session, material_id: int, reason: str | None, user: User) -> Material:
    return MATERIAL_GATE.reject(db, material_id, reason, user)
