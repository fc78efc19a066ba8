"""BOQ models — projects own ordered versions; versions own line items."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base

PROJECT_STATUSES = ("draft", "submitted", "finalized")
VERSION_STATUSES = ("draft", "submitted")


class BoqProject(Base):
    __tablename__ = "boq_projects"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    client = Column(String(255))
    budget = Column(String(100))
    location = Column(String(500))
    status = Column(String(20), nullable=False, default="draft")
    created_by_id = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    versions = relationship(
        "BoqVersion", back_populates="project", order_by="BoqVersion.version_number"
    )

    __table_args__ = (Index("ix_boq_projects_status", "status"),)


class BoqVersion(Base):
    __tablename__ = "boq_versions"
    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("boq_projects.id"), nullable=False)
    version_number = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="draft")
    # Snapshot of the project at version creation, kept for historical display
    project_name = Column(String(255))
    project_client = Column(String(255))
    edited_fields = Column(JSON, default=dict)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    project = relationship("BoqProject", back_populates="versions")

    __table_args__ = (
        UniqueConstraint("project_id", "version_number", name="uq_boq_version_number"),
        Index("ix_boq_versions_project", "project_id"),
    )


class BoqItem(Base):
    __tablename__ = "boq_items"
    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("boq_projects.id"), nullable=False)
    version_id = Column(Integer, ForeignKey("boq_versions.id"))  # NULL = legacy unversioned
    estimator = Column(String(100), nullable=False)
    table_data = Column(JSON, nullable=False, default=dict)
    user_added = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_boq_items_project", "project_id"),
        Index("ix_boq_items_version", "version_id"),
    )
