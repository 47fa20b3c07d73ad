"""Project and membership routes.

Routes are transport-only:
- Extract viewer_user_id from request.state
- Call exactly one service function
- Return success(...) or raise ApiError (via unwrap_result)

No domain logic or raw DB access in routes.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from photoreview.api.deps import PageQuery, PageSizeQuery, get_db
from photoreview.auth.middleware import Viewer, get_viewer
from photoreview.errors import ApiErrorCode
from photoreview.responses import success_response, unwrap_result
from photoreview.schemas.project import (
    AddMemberRequest,
    CreateProjectRequest,
    UpdateMemberRequest,
    UpdateProjectRequest,
    WorkStatusValue,
)
from photoreview.services import members as members_service
from photoreview.services import projects as projects_service
from photoreview.services.patch import ProjectPatch

router = APIRouter()


# =============================================================================
# Projects
# =============================================================================


@router.get("/projects")
def list_projects(
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
    page: PageQuery = None,
    page_size: PageSizeQuery = None,
    status: Annotated[WorkStatusValue | None, Query(description="Filter by status")] = None,
    is_active: Annotated[bool | None, Query(description="Filter by active flag")] = None,
) -> dict:
    """List projects the viewer is a member of.

    Returns projects ordered by created_at ASC, id ASC.
    """
    result = projects_service.list_projects(
        db, viewer.user_id, status=status, is_active=is_active, page=page, page_size=page_size
    )
    return success_response(result.model_dump(mode="json"))


@router.post("/projects", status_code=201)
def create_project(
    body: CreateProjectRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a project. The viewer becomes its first owner."""
    result = projects_service.create_project(db, viewer.user_id, body.name, body.root_path)
    return success_response(result.model_dump(mode="json"))


@router.get("/projects/{project_id}")
def get_project(
    project_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Get a project by ID. Non-members get 404."""
    result = projects_service.get_project(db, viewer.user_id, project_id)
    project = unwrap_result(result, ApiErrorCode.E_PROJECT_NOT_FOUND)
    return success_response(project.model_dump(mode="json"))


@router.patch("/projects/{project_id}")
def update_project(
    project_id: UUID,
    body: UpdateProjectRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Update project fields. Owner only; omitted fields are unchanged."""
    result = projects_service.update_project(
        db, viewer.user_id, project_id, ProjectPatch.from_model(body)
    )
    project = unwrap_result(result, ApiErrorCode.E_PROJECT_NOT_FOUND)
    return success_response(project.model_dump(mode="json"))


@router.post("/projects/{project_id}/archive")
def archive_project(
    project_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Archive a project (inactive, completed). Owner only."""
    result = projects_service.archive_project(db, viewer.user_id, project_id)
    archived = unwrap_result(result, ApiErrorCode.E_PROJECT_NOT_FOUND)
    return success_response({"archived": archived})


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(
    project_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Delete a project and everything under it. Owner only."""
    result = projects_service.delete_project(db, viewer.user_id, project_id)
    unwrap_result(result, ApiErrorCode.E_PROJECT_NOT_FOUND)
    return Response(status_code=204)


# =============================================================================
# Members (owner only)
# =============================================================================


@router.get("/projects/{project_id}/members")
def list_members(
    project_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """List project members, owners first."""
    result = members_service.list_members(db, viewer.user_id, project_id)
    members = unwrap_result(result, ApiErrorCode.E_PROJECT_NOT_FOUND)
    return success_response([m.model_dump(mode="json") for m in members])


@router.post("/projects/{project_id}/members", status_code=201)
def add_member(
    project_id: UUID,
    body: AddMemberRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Add a member. Idempotent: an existing member is returned unchanged."""
    result = members_service.add_member(
        db, viewer.user_id, project_id, body.user_id, is_owner=body.is_owner
    )
    member = unwrap_result(result, ApiErrorCode.E_NOT_FOUND)
    return success_response(member.model_dump(mode="json"))


@router.patch("/projects/{project_id}/members/{user_id}")
def update_member(
    project_id: UUID,
    user_id: UUID,
    body: UpdateMemberRequest,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Promote or demote a member. Demoting the last owner is refused."""
    result = members_service.update_member(
        db, viewer.user_id, project_id, user_id, is_owner=body.is_owner
    )
    member = unwrap_result(result, ApiErrorCode.E_MEMBER_NOT_FOUND)
    return success_response(member.model_dump(mode="json"))


@router.delete("/projects/{project_id}/members/{user_id}", status_code=204)
def remove_member(
    project_id: UUID,
    user_id: UUID,
    viewer: Annotated[Viewer, Depends(get_viewer)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Remove a member. Removing the last owner is refused."""
    result = members_service.remove_member(db, viewer.user_id, project_id, user_id)
    unwrap_result(result, ApiErrorCode.E_MEMBER_NOT_FOUND)
    return Response(status_code=204)
