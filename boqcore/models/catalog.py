"""Catalog models — shops, templates, supplier submissions, materials.

Shop, Material and MaterialSubmission share the ApprovableMixin review
columns; the approval state machine itself lives in
services/approval_service.py.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declared_attr, relationship

from .base import Base


class ApprovableMixin:
    """Review columns shared by every row that passes the approval gate."""

    approval_reason = Column(Text)
    reviewed_at = Column(DateTime)

    @declared_attr
    def reviewed_by_id(cls):
        return Column(Integer, ForeignKey("users.id"))


class Shop(ApprovableMixin, Base):
    __tablename__ = "shops"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    location = Column(String(500))
    phone_country_code = Column(String(10))
    contact_number = Column(String(50))
    city = Column(String(100))
    state = Column(String(100))
    country = Column(String(100))
    pincode = Column(String(20))
    image = Column(Text)
    rating = Column(Numeric(3, 1))
    categories = Column(JSON, default=list)
    gst_no = Column(String(50))
    owner_id = Column(Integer, ForeignKey("users.id"))
    approved = Column(Boolean, default=False)  # legacy rows may hold NULL
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    owner = relationship("User", foreign_keys=[owner_id])

    __table_args__ = (
        Index("ix_shops_owner", "owner_id"),
        Index("ix_shops_approved", "approved"),
    )


class MaterialTemplate(Base):
    """Staff-authored master entry (name + code) that suppliers specialize."""

    __tablename__ = "material_templates"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    code = Column(String(100), nullable=False, unique=True)
    category_id = Column(Integer, ForeignKey("material_categories.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    category = relationship("Category", foreign_keys=[category_id])

    __table_args__ = (Index("ix_templates_category", "category_id"),)


class MaterialSubmission(ApprovableMixin, Base):
    """Supplier proposal against a template. approved: NULL pending, then terminal."""

    __tablename__ = "material_submissions"
    id = Column(Integer, primary_key=True)
    template_id = Column(Integer, ForeignKey("material_templates.id"), nullable=False)
    shop_id = Column(Integer, ForeignKey("shops.id"), nullable=False)
    rate = Column(Numeric(12, 2))
    unit = Column(String(50))
    brand_name = Column(String(255))
    model_number = Column(String(255))
    subcategory = Column(String(255))
    technical_specification = Column(Text)
    submitted_by_id = Column(Integer, ForeignKey("users.id"))
    submitted_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    approved = Column(Boolean, nullable=True, default=None)

    template = relationship("MaterialTemplate", foreign_keys=[template_id])
    shop = relationship("Shop", foreign_keys=[shop_id])

    __table_args__ = (
        Index("ix_submissions_template", "template_id"),
        Index("ix_submissions_shop", "shop_id"),
        Index("ix_submissions_approved", "approved"),
    )


class Material(ApprovableMixin, Base):
    """Catalog material. source: direct | submission."""

    __tablename__ = "materials"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    code = Column(String(100))
    rate = Column(Numeric(12, 2), default=0)
    shop_id = Column(Integer, ForeignKey("shops.id"))
    unit = Column(String(50))
    category_id = Column(Integer, ForeignKey("material_categories.id"))
    subcategory_id = Column(Integer, ForeignKey("material_subcategories.id"))
    product_id = Column(Integer, ForeignKey("products.id"))
    brand_name = Column(String(255))
    model_number = Column(String(255))
    technical_specification = Column(Text)
    image = Column(Text)
    attributes = Column(JSON, default=dict)
    template_id = Column(Integer, ForeignKey("material_templates.id"))
    source = Column(String(20), nullable=False, default="direct")
    approved = Column(Boolean, default=False)  # legacy rows may hold NULL
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    shop = relationship("Shop", foreign_keys=[shop_id])
    category = relationship("Category", foreign_keys=[category_id])
    subcategory = relationship("Subcategory", foreign_keys=[subcategory_id])
    product = relationship("Product", foreign_keys=[product_id])
    template = relationship("MaterialTemplate", foreign_keys=[template_id])

    __table_args__ = (
        Index("ix_materials_shop", "shop_id"),
        Index("ix_materials_template", "template_id"),
        Index("ix_materials_category", "category_id"),
        Index("ix_materials_approved", "approved"),
    )
