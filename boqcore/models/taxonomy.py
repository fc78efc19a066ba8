"""Taxonomy models — Category → Subcategory → Product.

References between levels are surrogate-id foreign keys; names are
separate unique attributes so a rename never has to fan out.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class Category(Base):
    __tablename__ = "material_categories"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    created_by_id = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    subcategories = relationship("Subcategory", back_populates="category")


class Subcategory(Base):
    __tablename__ = "material_subcategories"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    category_id = Column(Integer, ForeignKey("material_categories.id"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    category = relationship("Category", back_populates="subcategories")
    products = relationship("Product", back_populates="subcategory")

    __table_args__ = (
        UniqueConstraint("name", "category_id", name="uq_subcategory_name_category"),
        Index("ix_subcategories_category", "category_id"),
    )


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    subcategory_id = Column(Integer, ForeignKey("material_subcategories.id"))  # NULL = orphaned
    created_by_id = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    subcategory = relationship("Subcategory", back_populates="products")

    __table_args__ = (Index("ix_products_subcategory", "subcategory_id"),)
