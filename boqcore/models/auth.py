"""Auth & user models."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from .base import Base

ROLES = (
    "user",
    "admin",
    "supplier",
    "software_team",
    "purchase_team",
    "contractor",
    "pre_sales",
)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String(255), unique=True, nullable=False)
    name = Column(String(255))
    role = Column(String(20), nullable=False, default="user")  # see ROLES
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
