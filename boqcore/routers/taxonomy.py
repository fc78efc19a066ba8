"""
routers/taxonomy.py — Category / Subcategory / Product API

Reads are open to any caller; writes require a staff role.

Called by: main.py (router mount)
Depends on: services/taxonomy_service, schemas/taxonomy, serializers
"""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_staff
from ..models import User
from ..schemas.taxonomy import (
    CategoryCreate,
    CategoryRename,
    ProductCreate,
    ProductUpdate,
    SubcategoryCreate,
    SubcategoryRename,
)
from ..serializers import category_to_dict, product_to_dict, subcategory_to_dict
from ..services import taxonomy_service as svc

router = APIRouter(tags=["taxonomy"])


# ── Categories ───────────────────────────────────────────────────────


@router.get("/api/material-categories")
@router.get("/api/categories")
async def list_categories(db: Session = Depends(get_db)):
    return {"categories": [c.name for c in svc.list_categories(db)]}


@router.post("/api/categories", status_code=201)
async def create_category(
    body: CategoryCreate,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    cat = svc.create_category(db, body.name, user)
    return {"category": category_to_dict(cat)}


@router.put("/api/categories/{name}")
async def rename_category(
    name: str,
    body: CategoryRename,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    cat = svc.rename_category(db, name, body.name)
    return {"category": category_to_dict(cat)}


@router.delete("/api/categories/{name}")
async def delete_category(
    name: str,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    summary = svc.delete_category(db, name)
    logger.info("Category {!r} deleted by user {}", name, user.id)
    return {"message": "Category deleted", "deleted": summary}


# ── Subcategories ────────────────────────────────────────────────────


@router.get("/api/subcategories")
@router.get("/api/subcategories-admin")
async def list_subcategories(db: Session = Depends(get_db)):
    return {"subcategories": [subcategory_to_dict(s) for s in svc.list_subcategories(db)]}


@router.get("/api/material-subcategories/{category}")
async def list_category_subcategories(category: str, db: Session = Depends(get_db)):
    subs = svc.list_subcategories(db, category=category)
    return {"subcategories": [s.name for s in subs]}


@router.post("/api/subcategories", status_code=201)
async def create_subcategory(
    body: SubcategoryCreate,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    sub = svc.create_subcategory(db, body.name, body.category, user)
    return {"subcategory": subcategory_to_dict(sub)}


@router.put("/api/subcategories/{subcategory_id}")
async def rename_subcategory(
    subcategory_id: int,
    body: SubcategoryRename,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    sub = svc.rename_subcategory(db, subcategory_id, body.name)
    return {"subcategory": subcategory_to_dict(sub)}


@router.delete("/api/subcategories/{subcategory_id}")
async def delete_subcategory(
    subcategory_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    orphaned = svc.delete_subcategory(db, subcategory_id)
    return {"message": "Subcategory deleted", "orphaned_products": orphaned}


# ── Products ─────────────────────────────────────────────────────────


@router.get("/api/products")
async def list_products(subcategory_id: int | None = None, db: Session = Depends(get_db)):
    return {"products": [product_to_dict(p) for p in svc.list_products(db, subcategory_id)]}


@router.get("/api/products/{product_id}")
async def get_product(product_id: int, db: Session = Depends(get_db)):
    return product_to_dict(svc.get_product(db, product_id))


@router.post("/api/products", status_code=201)
async def create_product(
    body: ProductCreate,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    product = svc.create_product(
        db,
        body.name,
        subcategory_id=body.subcategory_id,
        subcategory=body.subcategory,
        category=body.category,
        user=user,
    )
    return product_to_dict(product)


@router.put("/api/products/{product_id}")
async def update_product(
    product_id: int,
    body: ProductUpdate,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    product = svc.update_product(db, product_id, name=body.name, subcategory_id=body.subcategory_id)
    return product_to_dict(product)


@router.delete("/api/products/{product_id}")
async def delete_product(
    product_id: int,
    user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    svc.delete_product(db, product_id)
    return {"message": "Product deleted"}
