"""Tests for membership-scoped queries.

Tests cover:
- Every factory returns only rows reachable through the viewer's membership
- Caller filters narrow, never widen
- page(): total is independent of page/page_size, including past the end
- Reviews stay hidden once the reviewer leaves the project
"""

from sqlalchemy import delete
from sqlalchemy.orm import Session

from photoreview.db.models import Photo, PhotoReview, Project, ProjectMember
from photoreview.services.scoping import (
    libraries_for,
    my_reviews_for,
    photo_reviews_for,
    photos_for,
    projects_for,
)
from tests.factories import (
    add_member,
    create_library,
    create_photo,
    create_project_tree,
    create_project_with_owner,
    create_user,
)


def _add_review(db: Session, photo_id, user_id, decision=None) -> None:
    photo = db.get(Photo, photo_id)
    db.add(
        PhotoReview(photo_id=photo_id, user_id=user_id, library_id=photo.library_id, decision=decision)
    )
    db.flush()


class TestProjectsFor:
    """Tests for projects_for."""

    def test_only_member_projects_with_owner_flag(self, db_session: Session):
        alice = create_user(db_session)
        bob = create_user(db_session)
        owned = create_project_with_owner(db_session, alice, name="Owned")
        joined = create_project_with_owner(db_session, bob, name="Joined")
        create_project_with_owner(db_session, bob, name="Hidden")
        add_member(db_session, joined, alice)

        rows, total, _ = projects_for(alice).page(db_session, None, None)

        assert total == 2
        flags = {project.id: is_owner for project, is_owner in rows}
        assert flags == {owned: True, joined: False}

    def test_first_is_none_for_non_member(self, db_session: Session):
        alice = create_user(db_session)
        bob = create_user(db_session)
        project_id = create_project_with_owner(db_session, bob)

        assert projects_for(alice).where(Project.id == project_id).first(db_session) is None

    def test_filters_narrow_within_scope(self, db_session: Session):
        alice = create_user(db_session)
        bob = create_user(db_session)
        mine = create_project_with_owner(db_session, alice)
        theirs = create_project_with_owner(db_session, bob)
        db_session.get(Project, mine).is_active = False
        db_session.get(Project, theirs).is_active = False
        db_session.flush()

        query = projects_for(alice).where(Project.is_active == False)  # noqa: E712

        assert query.count(db_session) == 1


class TestPage:
    """Tests for ScopedQuery.page totals."""

    def test_total_independent_of_page_size(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        library_id = create_library(db_session, project_id, owner)
        for i in range(7):
            create_photo(db_session, library_id, filename=f"IMG_{i:04d}.jpg")

        rows, total, params = photos_for(owner).page(db_session, 2, 3)

        assert total == 7
        assert len(rows) == 3
        assert params.offset == 3
        assert [photo.filename for (photo,) in rows] == [
            "IMG_0003.jpg",
            "IMG_0004.jpg",
            "IMG_0005.jpg",
        ]

    def test_total_reported_past_the_end(self, db_session: Session):
        owner = create_user(db_session)
        _, library_id, _ = create_project_tree(db_session, owner)
        create_photo(db_session, library_id, filename="second.jpg")

        rows, total, params = photos_for(owner).page(db_session, 10, 25)

        assert rows == []
        assert total == 2
        assert params.page == 10

    def test_empty_scope_has_zero_total(self, db_session: Session):
        owner = create_user(db_session)
        outsider = create_user(db_session)
        create_project_tree(db_session, owner)

        rows, total, _ = photos_for(outsider).page(db_session, 1, 25)

        assert rows == []
        assert total == 0

    def test_page_size_clamped(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        _, _, params = libraries_for(owner).where(
            ProjectMember.project_id == project_id
        ).page(db_session, 1, 1000)

        assert params.page_size == 100


class TestReviewScopes:
    """Tests for my_reviews_for and photo_reviews_for."""

    def test_my_reviews_exclude_projects_left(self, db_session: Session):
        owner = create_user(db_session)
        reviewer = create_user(db_session)
        project_id, _, photo_id = create_project_tree(db_session, owner)
        add_member(db_session, project_id, reviewer)
        _add_review(db_session, photo_id, reviewer, decision=1)
        assert my_reviews_for(reviewer).count(db_session) == 1

        db_session.execute(
            delete(ProjectMember).where(
                ProjectMember.project_id == project_id, ProjectMember.user_id == reviewer
            )
        )

        assert my_reviews_for(reviewer).count(db_session) == 0

    def test_my_reviews_only_own(self, db_session: Session):
        owner = create_user(db_session)
        reviewer = create_user(db_session)
        project_id, _, photo_id = create_project_tree(db_session, owner)
        add_member(db_session, project_id, reviewer)
        _add_review(db_session, photo_id, owner)
        _add_review(db_session, photo_id, reviewer)

        rows, total, _ = my_reviews_for(reviewer).page(db_session, None, None)

        assert total == 1
        assert rows[0][0].user_id == reviewer

    def test_photo_reviews_visible_to_members(self, db_session: Session):
        owner = create_user(db_session)
        reviewer = create_user(db_session)
        project_id, _, photo_id = create_project_tree(db_session, owner)
        add_member(db_session, project_id, reviewer)
        _add_review(db_session, photo_id, owner)
        _add_review(db_session, photo_id, reviewer)

        assert photo_reviews_for(reviewer, photo_id).count(db_session) == 2

    def test_photo_reviews_empty_for_non_member(self, db_session: Session):
        owner = create_user(db_session)
        outsider = create_user(db_session)
        _, _, photo_id = create_project_tree(db_session, owner)
        _add_review(db_session, photo_id, owner)

        rows, total, _ = photo_reviews_for(outsider, photo_id).page(db_session, None, None)

        assert rows == []
        assert total == 0
