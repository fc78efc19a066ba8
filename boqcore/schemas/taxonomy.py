"""
schemas/taxonomy.py — Pydantic models for Category / Subcategory / Product endpoints

Business Rules:
- Blank names are reported by the service as 400, not by validation
- Products may name their subcategory by id or by name (+ category)

Called by: routers/taxonomy.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class CategoryCreate(BaseModel):
    name: str | None = None


class CategoryRename(BaseModel):
    name: str | None = Field(None, validation_alias=AliasChoices("name", "newName", "new_name"))


class SubcategoryCreate(BaseModel):
    name: str | None = None
    category: str | None = None


class SubcategoryRename(BaseModel):
    name: str | None = None


class ProductCreate(BaseModel):
    name: str | None = None
    subcategory_id: int | None = Field(
        None, validation_alias=AliasChoices("subcategory_id", "subcategoryId")
    )
    subcategory: str | None = None
    category: str | None = None


class ProductUpdate(BaseModel):
    name: str | None = None
    subcategory_id: int | None = Field(
        None, validation_alias=AliasChoices("subcategory_id", "subcategoryId")
    )
