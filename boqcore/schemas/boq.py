"""
schemas/boq.py — Pydantic models for BOQ project / version / item endpoints

Business Rules:
- Status values are restricted to the known state names (422 otherwise);
  whether a move is allowed is decided by the service
- table_data and edited fields are opaque JSON objects

Called by: routers/boq.py
Depends on: pydantic
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field


class ProjectCreate(BaseModel):
    name: str | None = None
    client: str | None = None
    budget: str | None = None
    location: str | None = None


class ProjectUpdate(BaseModel):
    name: str | None = None
    client: str | None = None
    budget: str | None = None
    location: str | None = None
    status: Literal["draft", "submitted", "finalized"] | None = None


class VersionCreate(BaseModel):
    project_id: int | None = Field(None, validation_alias=AliasChoices("project_id", "projectId"))
    copy_from_version: int | None = Field(
        None, validation_alias=AliasChoices("copy_from_version", "copyFromVersion")
    )


class VersionUpdate(BaseModel):
    status: Literal["draft", "submitted"] | None = None


class VersionEdits(BaseModel):
    edited_fields: dict = Field(
        default_factory=dict, validation_alias=AliasChoices("editedFields", "edited_fields")
    )


class ItemCreate(BaseModel):
    project_id: int | None = Field(None, validation_alias=AliasChoices("project_id", "projectId"))
    version_id: int | None = Field(None, validation_alias=AliasChoices("version_id", "versionId"))
    estimator: str | None = None
    table_data: dict | None = Field(
        None, validation_alias=AliasChoices("table_data", "tableData")
    )


class ItemUpdate(BaseModel):
    table_data: dict | None = Field(
        None, validation_alias=AliasChoices("table_data", "tableData")
    )
