"""
schemas/catalog.py — Pydantic models for shops, materials, templates and submissions

Field names are snake_case; the camelCase spellings the web client sends
are accepted as aliases.

Business Rules:
- Approval columns are never accepted from a request body
- Rating clamped 0-5
- template_id / shop_id are optional here so a missing id is a 400 from
  the service rather than a 422

Called by: routers/catalog.py, routers/templates.py
Depends on: pydantic
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field, field_validator


def _alias(*names: str):
    return Field(None, validation_alias=AliasChoices(*names))


class ShopBase(BaseModel):
    name: str | None = None
    location: str | None = None
    phone_country_code: str | None = _alias("phone_country_code", "phoneCountryCode")
    contact_number: str | None = _alias("contact_number", "contactNumber")
    city: str | None = None
    state: str | None = None
    country: str | None = None
    pincode: str | None = None
    image: str | None = None
    rating: Decimal | None = None
    categories: list[str] | None = None
    gst_no: str | None = _alias("gst_no", "gstNo")

    @field_validator("rating")
    @classmethod
    def clamp_rating(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        return max(Decimal(0), min(Decimal(5), v))


class ShopCreate(ShopBase):
    pass


class ShopUpdate(ShopBase):
    pass


class MaterialBase(BaseModel):
    name: str | None = None
    code: str | None = None
    rate: Decimal | None = None
    shop_id: int | None = _alias("shop_id", "shopId")
    unit: str | None = None
    category_id: int | None = _alias("category_id", "categoryId")
    subcategory_id: int | None = _alias("subcategory_id", "subcategoryId")
    product_id: int | None = _alias("product_id", "productId")
    brand_name: str | None = _alias("brand_name", "brandName")
    model_number: str | None = _alias("model_number", "modelNumber")
    technical_specification: str | None = _alias(
        "technical_specification", "technicalSpecification"
    )
    image: str | None = None
    attributes: dict | None = None


class MaterialCreate(MaterialBase):
    pass


class MaterialUpdate(MaterialBase):
    pass


class RejectRequest(BaseModel):
    reason: str | None = None


class TemplateCreate(BaseModel):
    name: str | None = None
    code: str | None = None
    category: str | None = None


class TemplateUpdate(BaseModel):
    name: str | None = None
    code: str | None = None
    category: str | None = None


class SubmissionCreate(BaseModel):
    template_id: int | None = _alias("template_id", "templateId")
    shop_id: int | None = _alias("shop_id", "shopId")
    rate: Decimal | None = None
    unit: str | None = None
    brand_name: str | None = _alias("brand_name", "brandName")
    model_number: str | None = _alias("model_number", "modelNumber")
    subcategory: str | None = None
    technical_specification: str | None = _alias(
        "technical_specification", "technicalSpecification"
    )
