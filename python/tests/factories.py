"""Test data factories.

Centralizes helper functions that create database rows for tests.
Each factory knows the full schema requirements for its table,
so individual tests don't need to track NOT NULL constraints.

Factories write through the ORM and flush; they never commit, so rows
disappear with the test's savepoint.
"""

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from photoreview.db.models import Library, Photo, Project, ProjectMember, User


def create_user(session: Session, name: str = "Test User", user_id: UUID | None = None) -> UUID:
    """Create a user with a unique email and return its id."""
    user_id = user_id or uuid4()
    session.add(
        User(
            id=user_id,
            name=name,
            email=f"{user_id.hex}@example.test",
            password_hash="not-a-real-hash",
        )
    )
    session.flush()
    return user_id


def create_project_with_owner(
    session: Session, owner_id: UUID, name: str = "Test Project", root_path: str = "/photos"
) -> UUID:
    """Create a project and an owner membership for owner_id."""
    project = Project(name=name, root_path=root_path, created_by=owner_id)
    session.add(project)
    session.flush()
    session.add(ProjectMember(project_id=project.id, user_id=owner_id, is_owner=True))
    session.flush()
    return project.id


def add_member(session: Session, project_id: UUID, user_id: UUID, is_owner: bool = False) -> None:
    """Add a membership row directly (bypasses the owner check)."""
    session.add(ProjectMember(project_id=project_id, user_id=user_id, is_owner=is_owner))
    session.flush()


def create_library(
    session: Session, project_id: UUID, created_by: UUID, name: str = "Test Library"
) -> UUID:
    """Create a library in a project."""
    library = Library(
        name=name,
        absolute_path=f"/photos/{uuid4().hex}",
        project_id=project_id,
        created_by=created_by,
    )
    session.add(library)
    session.flush()
    return library.id


def create_photo(
    session: Session,
    library_id: UUID,
    filename: str = "IMG_0001.jpg",
    metadata: dict[str, Any] | None = None,
) -> UUID:
    """Create a photo in a library; its project is taken from the library."""
    library = session.get(Library, library_id)
    photo = Photo(
        project_id=library.project_id,
        library_id=library_id,
        filename=filename,
        absolute_path=f"/photos/{uuid4().hex}/{filename}",
        metadata_=metadata,
    )
    session.add(photo)
    session.flush()
    return photo.id


def create_project_tree(session: Session, owner_id: UUID) -> tuple[UUID, UUID, UUID]:
    """Create project -> library -> photo owned by owner_id.

    Returns (project_id, library_id, photo_id).
    """
    project_id = create_project_with_owner(session, owner_id)
    library_id = create_library(session, project_id, owner_id)
    photo_id = create_photo(session, library_id)
    return project_id, library_id, photo_id
