"""
routers/catalog.py — Shops and directly entered materials

Public listings only ever show approved rows. Anyone signed in may submit a
shop or material; it lands in the pending queue until staff review it.

Called by: main.py (router mount)
Depends on: services/catalog_service, schemas/catalog, serializers
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_staff, require_user
from ..models import User
from ..schemas.catalog import (
    MaterialCreate,
    MaterialUpdate,
    RejectRequest,
    ShopCreate,
    ShopUpdate,
)
from ..serializers import material_to_dict, shop_to_dict
from ..services import catalog_service as svc

router = APIRouter(tags=["catalog"])


# ── Shops ────────────────────────────────────────────────────────────


@router.get("/api/shops")
async def list_shops(db: Session = Depends(get_db)):
    return {"shops": [shop_to_dict(s) for s in svc.list_public_shops(db)]}


@router.get("/api/shops-pending-approval")
async def list_pending_shops(user: User = Depends(require_staff), db: Session = Depends(get_db)):
    shops = svc.list_pending_shops(db)
    return {"shops": [{"id": s.id, "status": "pending", "shop": shop_to_dict(s)} for s in shops]}


@router.post("/api/shops", status_code=201)
async def create_shop(
    body: ShopCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    shop = svc.create_shop(db, body.model_dump(exclude_none=True), user)
    return {"shop": shop_to_dict(shop)}


@router.get("/api/shops/{shop_id}")
async def get_shop(shop_id: int, db: Session = Depends(get_db)):
    return {"shop": shop_to_dict(svc.get_shop(db, shop_id))}


@router.put("/api/shops/{shop_id}")
async def update_shop(
    shop_id: int,
    body: ShopUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    shop = svc.update_shop(db, shop_id, body.model_dump(exclude_none=True))
    return {"shop": shop_to_dict(shop)}


@router.delete("/api/shops/{shop_id}")
async def delete_shop(
    shop_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    svc.delete_shop(db, shop_id)
    logger.info("Shop {} deleted by user {}", shop_id, user.id)
    return {"message": "Shop deleted"}


@router.post("/api/shops/{shop_id}/approve")
async def approve_shop(
    shop_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return {"shop": shop_to_dict(svc.approve_shop(db, shop_id, user))}


@router.post("/api/shops/{shop_id}/reject")
async def reject_shop(
    shop_id: int,
    body: RejectRequest | None = None,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    reason = body.reason if body else None
    return {"shop": shop_to_dict(svc.reject_shop(db, shop_id, reason, user))}


# ── Materials ────────────────────────────────────────────────────────


@router.get("/api/materials")
async def list_materials(db: Session = Depends(get_db)):
    return {"materials": [material_to_dict(m) for m in svc.list_public_materials(db)]}


@router.get("/api/materials-pending-approval")
async def list_pending_materials(
    user: User = Depends(require_staff), db: Session = Depends(get_db)
):
    materials = svc.list_pending_materials(db)
    return {
        "materials": [
            {"id": m.id, "status": "pending", "material": material_to_dict(m)} for m in materials
        ]
    }


@router.post("/api/materials", status_code=201)
async def create_material(
    body: MaterialCreate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    material = svc.create_material(db, body.model_dump(exclude_none=True), user)
    return {"material": material_to_dict(material)}


@router.get("/api/materials/{material_id}")
async def get_material(material_id: int, db: Session = Depends(get_db)):
    return {"material": material_to_dict(svc.get_material(db, material_id))}


@router.put("/api/materials/{material_id}")
async def update_material(
    material_id: int,
    body: MaterialUpdate,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    material = svc.update_material(db, material_id, body.model_dump(exclude_none=True))
    return {"material": material_to_dict(material)}


@router.delete("/api/materials/{material_id}")
async def delete_material(
    material_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    svc.delete_material(db, material_id)
    return {"message": "Material deleted"}


@router.post("/api/materials/{material_id}/approve")
async def approve_material(
    material_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    return {"material": material_to_dict(svc.approve_material(db, material_id, user))}


@router.post("/api/materials/{material_id}/reject")
async def reject_material(
    material_id: int,
    body: RejectRequest | None = None,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    reason = body.reason if body else None
    return {"material": material_to_dict(svc.reject_material(db, material_id, reason, user))}
