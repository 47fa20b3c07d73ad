"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from photoreview.schemas.library import CreateLibraryRequest, LibraryOut, UpdateLibraryRequest
from photoreview.schemas.pagination import Page
from photoreview.schemas.photo import CreatePhotoRequest, PhotoOut, UpdatePhotoRequest
from photoreview.schemas.project import (
    AddMemberRequest,
    CreateProjectRequest,
    ProjectMemberOut,
    ProjectOut,
    UpdateMemberRequest,
    UpdateProjectRequest,
)
from photoreview.schemas.review import ReviewOut, UpsertReviewRequest

__all__ = [
    "Page",
    # Projects
    "CreateProjectRequest",
    "UpdateProjectRequest",
    "ProjectOut",
    # Members
    "AddMemberRequest",
    "UpdateMemberRequest",
    "ProjectMemberOut",
    # Libraries
    "CreateLibraryRequest",
    "UpdateLibraryRequest",
    "LibraryOut",
    # Photos
    "CreatePhotoRequest",
    "UpdatePhotoRequest",
    "PhotoOut",
    # Reviews
    "UpsertReviewRequest",
    "ReviewOut",
]
