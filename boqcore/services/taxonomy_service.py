"""
taxonomy_service.py — Category / Subcategory / Product registry

Three-level naming tree that templates and materials are classified under.

Business Rules:
- Category names are unique; subcategory names are unique per category;
  product names are unique
- Duplicate names are rejected with Conflict before any write
- References between levels are surrogate ids, so a rename touches one row
- Category delete cascades, in order: materials under the category's
  templates (or classified directly under it), those templates'
  submissions, the templates, product links to its subcategories, the
  subcategories, then the category. One transaction, all-or-nothing.
- Subcategory delete soft-orphans products (subcategory_id = NULL)

Called by: routers/taxonomy.py
Depends on: models, database.unit_of_work, exceptions
"""

import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..exceptions import Conflict, MissingField, NotFound
from ..models import (
    Category,
    Material,
    MaterialSubmission,
    MaterialTemplate,
    Product,
    Subcategory,
    User,
)

log = logging.getLogger(__name__)


def _clean(value: str | None, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise MissingField(f"{label} is required")
    return cleaned


# ── Categories ───────────────────────────────────────────────────────


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.name).all()


def get_category_by_name(db: Session, name: str) -> Category:
    cat = db.query(Category).filter(Category.name == name).first()
    if not cat:
        raise NotFound("Category not found")
    return cat


def create_category(db: Session, name: str | None, user: User | None = None) -> Category:
    name = _clean(name, "Category name")
    if db.query(Category.id).filter(Category.name == name).first():
        raise Conflict("Category already exists")
    cat = Category(name=name, created_by_id=user.id if user else None)
    with unit_of_work(db):
        db.add(cat)
    db.refresh(cat)
    log.info("Category %r created (id=%s)", cat.name, cat.id)
    return cat


def rename_category(db: Session, old_name: str, new_name: str | None) -> Category:
    new_name = _clean(new_name, "Category name")
    cat = get_category_by_name(db, old_name)
    if new_name == cat.name:
        return cat
    if db.query(Category.id).filter(Category.name == new_name).first():
        raise Conflict("Category already exists")
    with unit_of_work(db):
        cat.name = new_name
    log.info("Category %r renamed to %r", old_name, new_name)
    return cat


def delete_category(db: Session, name: str) -> dict:
    """Delete a category and everything classified under it.

    Returns a summary of the removed row counts per table.
    """
    cat = get_category_by_name(db, name)
    cat_id = cat.id
    template_ids = select(MaterialTemplate.id).where(MaterialTemplate.category_id == cat_id)
    subcategory_ids = select(Subcategory.id).where(Subcategory.category_id == cat_id)

    with unit_of_work(db):
        materials = (
            db.query(Material)
            .filter(or_(Material.template_id.in_(template_ids), Material.category_id == cat_id))
            .delete(synchronize_session="fetch")
        )
        db.query(Material).filter(Material.subcategory_id.in_(subcategory_ids)).update(
            {Material.subcategory_id: None}, synchronize_session="fetch"
        )
        submissions = (
            db.query(MaterialSubmission)
            .filter(MaterialSubmission.template_id.in_(template_ids))
            .delete(synchronize_session="fetch")
        )
        templates = (
            db.query(MaterialTemplate)
            .filter(MaterialTemplate.category_id == cat_id)
            .delete(synchronize_session="fetch")
        )
        db.query(Product).filter(Product.subcategory_id.in_(subcategory_ids)).update(
            {Product.subcategory_id: None}, synchronize_session="fetch"
        )
        subcategories = (
            db.query(Subcategory)
            .filter(Subcategory.category_id == cat_id)
            .delete(synchronize_session="fetch")
        )
        db.query(Category).filter(Category.id == cat_id).delete(synchronize_session="fetch")

    summary = {
        "materials": materials,
        "submissions": submissions,
        "templates": templates,
        "subcategories": subcategories,
    }
    log.info("Category %r deleted with cascade %s", name, summary)
    return summary


# ── Subcategories ────────────────────────────────────────────────────


def list_subcategories(db: Session, category: str | None = None) -> list[Subcategory]:
    q = db.query(Subcategory).join(Category, Subcategory.category_id == Category.id)
    if category is not None:
        q = q.filter(Category.name == category)
    return q.order_by(Category.name, Subcategory.name).all()


def get_subcategory(db: Session, subcategory_id: int) -> Subcategory:
    sub = db.get(Subcategory, subcategory_id)
    if not sub:
        raise NotFound("Subcategory not found")
    return sub


def create_subcategory(
    db: Session, name: str | None, category: str | None, user: User | None = None
) -> Subcategory:
    name = _clean(name, "Subcategory name")
    category = _clean(category, "Parent category")
    cat = get_category_by_name(db, category)
    exists = (
        db.query(Subcategory.id)
        .filter(Subcategory.name == name, Subcategory.category_id == cat.id)
        .first()
    )
    if exists:
        raise Conflict("Subcategory already exists for this category")
    sub = Subcategory(name=name, category_id=cat.id, created_by_id=user.id if user else None)
    with unit_of_work(db):
        db.add(sub)
    db.refresh(sub)
    log.info("Subcategory %r created under %r (id=%s)", name, cat.name, sub.id)
    return sub


def rename_subcategory(db: Session, subcategory_id: int, name: str | None) -> Subcategory:
    name = _clean(name, "Subcategory name")
    sub = get_subcategory(db, subcategory_id)
    if name == sub.name:
        return sub
    clash = (
        db.query(Subcategory.id)
        .filter(
            Subcategory.name == name,
            Subcategory.category_id == sub.category_id,
            Subcategory.id != sub.id,
        )
        .first()
    )
    if clash:
        raise Conflict("Subcategory already exists for this category")
    with unit_of_work(db):
        sub.name = name
    return sub


def delete_subcategory(db: Session, subcategory_id: int) -> int:
    """Delete a subcategory. Products under it are orphaned, not deleted.

    Returns the number of orphaned products.
    """
    sub = get_subcategory(db, subcategory_id)
    with unit_of_work(db):
        orphaned = db.query(Product).filter(Product.subcategory_id == sub.id).update(
            {Product.subcategory_id: None}, synchronize_session="fetch"
        )
        db.query(Material).filter(Material.subcategory_id == sub.id).update(
            {Material.subcategory_id: None}, synchronize_session="fetch"
        )
        db.query(Subcategory).filter(Subcategory.id == sub.id).delete(synchronize_session="fetch")
    log.info("Subcategory %s deleted, %d products orphaned", subcategory_id, orphaned)
    return orphaned


# ── Products ─────────────────────────────────────────────────────────


def _resolve_subcategory(
    db: Session,
    subcategory_id: int | None,
    subcategory: str | None,
    category: str | None,
) -> Subcategory:
    """Find the parent subcategory by id, or by name (plus category when ambiguous)."""
    if subcategory_id is not None:
        return get_subcategory(db, subcategory_id)
    name = _clean(subcategory, "Subcategory")
    q = db.query(Subcategory).filter(Subcategory.name == name)
    if category:
        q = q.join(Category, Subcategory.category_id == Category.id).filter(Category.name == category)
    matches = q.all()
    if not matches:
        raise NotFound("Subcategory not found")
    if len(matches) > 1:
        raise MissingField("Subcategory name is ambiguous; category is required")
    return matches[0]


def list_products(db: Session, subcategory_id: int | None = None) -> list[Product]:
    q = db.query(Product)
    if subcategory_id is not None:
        q = q.filter(Product.subcategory_id == subcategory_id)
    return q.order_by(Product.name).all()


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFound("Product not found")
    return product


def create_product(
    db: Session,
    name: str | None,
    subcategory_id: int | None = None,
    subcategory: str | None = None,
    category: str | None = None,
    user: User | None = None,
) -> Product:
    name = _clean(name, "Product name")
    sub = _resolve_subcategory(db, subcategory_id, subcategory, category)
    if db.query(Product.id).filter(Product.name == name).first():
        raise Conflict("Product already exists")
    product = Product(name=name, subcategory_id=sub.id, created_by_id=user.id if user else None)
    with unit_of_work(db):
        db.add(product)
    db.refresh(product)
    log.info("Product %r created under subcategory %s", name, sub.id)
    return product


def update_product(
    db: Session,
    product_id: int,
    name: str | None = None,
    subcategory_id: int | None = None,
) -> Product:
    product = get_product(db, product_id)
    if name is not None:
        name = _clean(name, "Product name")
        clash = db.query(Product.id).filter(Product.name == name, Product.id != product.id).first()
        if clash:
            raise Conflict("Product already exists")
    if subcategory_id is not None:
        get_subcategory(db, subcategory_id)
    with unit_of_work(db):
        if name is not None:
            product.name = name
        if subcategory_id is not None:
            product.subcategory_id = subcategory_id
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)
    with unit_of_work(db):
        db.query(Material).filter(Material.product_id == product.id).update(
            {Material.product_id: None}, synchronize_session="fetch"
        )
        db.query(Product).filter(Product.id == product.id).delete(synchronize_session="fetch")
    log.info("Product %s deleted", product_id)
