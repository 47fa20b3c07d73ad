"""Project and membership Pydantic schemas.

Contains request and response models for project and member endpoints.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from photoreview.schemas.base import PatchRequest

WorkStatusValue = Literal["active", "processing", "completed"]

__all__ = [
    "WorkStatusValue",
    "CreateProjectRequest",
    "UpdateProjectRequest",
    "AddMemberRequest",
    "UpdateMemberRequest",
    "ProjectOut",
    "ProjectMemberOut",
]

# =============================================================================
# Request Schemas
# =============================================================================


class CreateProjectRequest(BaseModel):
    """Request body for creating a project."""

    name: str = Field(..., min_length=1, max_length=255, description="Project name")
    root_path: str = Field(..., min_length=1, description="Root folder of the project's photos")


class UpdateProjectRequest(PatchRequest):
    """Request body for updating a project. Omitted fields are unchanged."""

    non_nullable = ("name", "status", "is_active", "root_path")

    name: str | None = Field(None, min_length=1, max_length=255)
    status: WorkStatusValue | None = Field(None)
    is_active: bool | None = Field(None)
    root_path: str | None = Field(None, min_length=1)


class AddMemberRequest(BaseModel):
    """Request body for adding a member to a project."""

    user_id: UUID = Field(..., description="User to add")
    is_owner: bool = Field(False, description="Grant ownership")


class UpdateMemberRequest(BaseModel):
    """Request body for promoting or demoting a member."""

    is_owner: bool = Field(..., description="New ownership flag")


# =============================================================================
# Response Schemas
# =============================================================================


class ProjectOut(BaseModel):
    """Response schema for a project.

    is_owner reflects the viewer's own membership row.
    """

    id: UUID
    name: str
    status: WorkStatusValue
    is_active: bool
    root_path: str
    created_by: UUID
    created_at: datetime
    is_owner: bool

    model_config = ConfigDict(from_attributes=True)


class ProjectMemberOut(BaseModel):
    """Response schema for a project member, with the user's display fields."""

    project_id: UUID
    user_id: UUID
    name: str
    email: str
    is_owner: bool
    created_at: datetime
