"""Tests for membership management and the last-owner guard.

Tests cover:
- Owner-only list/add/remove/update
- Idempotent add
- Governance: the last owner can be neither removed nor demoted
- The owner invariant holds across a sequence of membership operations
- Concurrent demotion of the last two owners (PostgreSQL only)
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from photoreview.db.models import Project, ProjectMember, User
from photoreview.services import members as members_service
from photoreview.services.governance import guard_owner_retained
from photoreview.services.results import Outcome
from tests.factories import add_member, create_library, create_project_with_owner, create_user
from tests.utils.db import DirectSessionManager


def _owner_count(db: Session, project_id) -> int:
    return db.scalar(
        select(func.count())
        .select_from(ProjectMember)
        .where(ProjectMember.project_id == project_id, ProjectMember.is_owner == True)  # noqa: E712
    )


def _memberships(db: Session, project_id) -> set[tuple]:
    rows = db.execute(
        select(ProjectMember.user_id, ProjectMember.is_owner).where(
            ProjectMember.project_id == project_id
        )
    ).all()
    return {tuple(r) for r in rows}


# =============================================================================
# Governance guard
# =============================================================================


class TestGuardOwnerRetained:
    """Tests for guard_owner_retained."""

    def test_refuses_sole_owner(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        result = guard_owner_retained(db_session, project_id, owner)

        assert result.outcome is Outcome.INVARIANT_VIOLATION

    def test_allows_one_of_two_owners(self, db_session: Session):
        owner = create_user(db_session)
        co_owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, co_owner, is_owner=True)

        result = guard_owner_retained(db_session, project_id, owner)

        assert result.is_ok
        assert result.value.user_id == owner

    def test_allows_non_owner_target(self, db_session: Session):
        owner = create_user(db_session)
        member = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)

        assert guard_owner_retained(db_session, project_id, member).is_ok

    def test_absent_target(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        assert guard_owner_retained(db_session, project_id, uuid4()).is_not_found


# =============================================================================
# Listing and adding
# =============================================================================


class TestListMembers:
    """Tests for list_members."""

    def test_owner_sees_members_with_user_fields(self, db_session: Session):
        owner = create_user(db_session, name="Olive")
        member = create_user(db_session, name="Max")
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)

        result = members_service.list_members(db_session, owner, project_id)

        assert result.is_ok
        assert [m.user_id for m in result.value] == [owner, member]
        assert result.value[0].name == "Olive"
        assert result.value[1].email == db_session.get(User, member).email

    def test_non_owner_denied(self, db_session: Session):
        owner = create_user(db_session)
        member = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)

        assert members_service.list_members(db_session, member, project_id).is_access_denied


class TestAddMember:
    """Tests for add_member."""

    def test_owner_adds_member(self, db_session: Session):
        owner = create_user(db_session)
        newcomer = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        result = members_service.add_member(db_session, owner, project_id, newcomer)

        assert result.is_ok
        assert result.value.is_owner is False
        assert (newcomer, False) in _memberships(db_session, project_id)

    def test_add_is_idempotent(self, db_session: Session):
        """Re-adding returns the existing row unchanged, even with a different flag."""
        owner = create_user(db_session)
        newcomer = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        first = members_service.add_member(db_session, owner, project_id, newcomer)

        second = members_service.add_member(
            db_session, owner, project_id, newcomer, is_owner=True
        )

        assert second.is_ok
        assert second.value == first.value
        assert _owner_count(db_session, project_id) == 1

    def test_unknown_user_not_found(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        assert members_service.add_member(db_session, owner, project_id, uuid4()).is_not_found

    def test_member_cannot_add(self, db_session: Session):
        owner = create_user(db_session)
        member = create_user(db_session)
        newcomer = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)

        result = members_service.add_member(db_session, member, project_id, newcomer)

        assert result.is_access_denied
        assert db_session.get(ProjectMember, (project_id, newcomer)) is None

    def test_stranger_denied_on_hidden_project(self, db_session: Session):
        owner = create_user(db_session)
        stranger = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        result = members_service.add_member(db_session, stranger, project_id, stranger)

        assert result.is_access_denied


# =============================================================================
# Removing and updating
# =============================================================================


class TestRemoveMember:
    """Tests for remove_member."""

    def test_owner_removes_member(self, db_session: Session):
        owner = create_user(db_session)
        member = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)

        result = members_service.remove_member(db_session, owner, project_id, member)

        assert result.is_ok
        assert _memberships(db_session, project_id) == {(owner, True)}

    def test_sole_owner_cannot_remove_self(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        result = members_service.remove_member(db_session, owner, project_id, owner)

        assert result.is_invariant_violation
        assert _memberships(db_session, project_id) == {(owner, True)}

    def test_one_of_two_owners_can_leave(self, db_session: Session):
        owner = create_user(db_session)
        co_owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, co_owner, is_owner=True)

        assert members_service.remove_member(db_session, owner, project_id, owner).is_ok
        assert _memberships(db_session, project_id) == {(co_owner, True)}

    def test_absent_target_not_found(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        assert members_service.remove_member(db_session, owner, project_id, uuid4()).is_not_found


class TestMembershipLocks:
    """Only owners lock a project's membership rows."""

    def _spy_on_locks(self, monkeypatch) -> list:
        locked = []
        monkeypatch.setattr(
            members_service,
            "lock_memberships",
            lambda db, project_id: locked.append(project_id) or [],
        )
        return locked

    def test_non_owners_are_refused_without_locking(self, db_session: Session, monkeypatch):
        owner = create_user(db_session)
        member = create_user(db_session)
        stranger = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)
        locked = self._spy_on_locks(monkeypatch)

        for viewer in (member, stranger):
            assert members_service.remove_member(
                db_session, viewer, project_id, owner
            ).is_access_denied
            assert members_service.update_member(
                db_session, viewer, project_id, owner, is_owner=False
            ).is_access_denied

        assert locked == []
        assert _memberships(db_session, project_id) == {(owner, True), (member, False)}

    def test_owner_locks_before_mutating(self, db_session: Session, monkeypatch):
        owner = create_user(db_session)
        member = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)
        locked = self._spy_on_locks(monkeypatch)

        result = members_service.update_member(
            db_session, owner, project_id, member, is_owner=True
        )

        assert result.is_ok
        assert locked == [project_id]


class TestUpdateMember:
    """Tests for update_member."""

    def test_promote_then_demote(self, db_session: Session):
        owner = create_user(db_session)
        member = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)
        add_member(db_session, project_id, member)

        promoted = members_service.update_member(db_session, owner, project_id, member, True)
        assert promoted.is_ok and promoted.value.is_owner is True

        demoted = members_service.update_member(db_session, member, project_id, owner, False)
        assert demoted.is_ok and demoted.value.is_owner is False
        assert _memberships(db_session, project_id) == {(owner, False), (member, True)}

    def test_demoting_last_owner_refused(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        result = members_service.update_member(db_session, owner, project_id, owner, False)

        assert result.is_invariant_violation
        assert _owner_count(db_session, project_id) == 1

    def test_no_op_update(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        result = members_service.update_member(db_session, owner, project_id, owner, True)

        assert result.is_ok
        assert result.value.is_owner is True

    def test_absent_target_not_found(self, db_session: Session):
        owner = create_user(db_session)
        project_id = create_project_with_owner(db_session, owner)

        result = members_service.update_member(db_session, owner, project_id, uuid4(), True)

        assert result.is_not_found


# =============================================================================
# Owner invariant across sequences
# =============================================================================


class TestOwnerInvariant:
    """At every point where a project has members, it has an owner."""

    def test_sequence_never_leaves_project_ownerless(self, db_session: Session):
        a = create_user(db_session)
        b = create_user(db_session)
        c = create_user(db_session)
        project_id = create_project_with_owner(db_session, a)

        steps = [
            lambda: members_service.add_member(db_session, a, project_id, b),
            lambda: members_service.add_member(db_session, a, project_id, c, is_owner=True),
            lambda: members_service.update_member(db_session, c, project_id, a, False),
            lambda: members_service.remove_member(db_session, c, project_id, c),
            lambda: members_service.update_member(db_session, c, project_id, c, False),
            lambda: members_service.update_member(db_session, c, project_id, b, True),
            lambda: members_service.remove_member(db_session, b, project_id, c),
            lambda: members_service.update_member(db_session, b, project_id, b, False),
            lambda: members_service.remove_member(db_session, b, project_id, b),
        ]

        for step in steps:
            before = _memberships(db_session, project_id)
            result = step()
            after = _memberships(db_session, project_id)

            assert _owner_count(db_session, project_id) >= 1
            if result.is_invariant_violation:
                assert after == before

        assert _memberships(db_session, project_id) == {(a, False), (b, True)}

    def test_scenario_member_cannot_remove_sole_owner(self, db_session: Session):
        """Owner X adds Y; Y can read libraries; Y removing X is refused."""
        from photoreview.services.libraries import list_libraries

        x = create_user(db_session)
        y = create_user(db_session)
        project_id = create_project_with_owner(db_session, x)
        create_library(db_session, project_id, x)

        assert members_service.add_member(db_session, x, project_id, y).is_ok
        assert list_libraries(db_session, y, project_id=project_id).total == 1

        result = members_service.remove_member(db_session, y, project_id, x)

        assert result.outcome in (Outcome.ACCESS_DENIED, Outcome.INVARIANT_VIOLATION)
        assert (x, True) in _memberships(db_session, project_id)


# =============================================================================
# Concurrency (PostgreSQL only)
# =============================================================================


class TestConcurrentDemotion:
    """Two owners demoting each other at once must not both succeed."""

    def test_last_two_owners_demoted_concurrently(self, direct_db: DirectSessionManager):
        with direct_db.session() as s:
            a = User(id=uuid4(), name="A", email=f"{uuid4().hex}@example.test", password_hash="x")
            b = User(id=uuid4(), name="B", email=f"{uuid4().hex}@example.test", password_hash="x")
            s.add_all([a, b])
            s.flush()
            project = Project(name="Race", root_path="/race", created_by=a.id)
            s.add(project)
            s.flush()
            s.add_all(
                [
                    ProjectMember(project_id=project.id, user_id=a.id, is_owner=True),
                    ProjectMember(project_id=project.id, user_id=b.id, is_owner=True),
                ]
            )
            s.commit()
            a_id, b_id, project_id = a.id, b.id, project.id

        direct_db.register_cleanup("users", "id", a_id)
        direct_db.register_cleanup("users", "id", b_id)
        direct_db.register_cleanup("projects", "id", project_id)

        barrier = Barrier(2)

        def demote(viewer_id, target_id):
            with direct_db.session() as s:
                barrier.wait()
                return members_service.update_member(s, viewer_id, project_id, target_id, False)

        with ThreadPoolExecutor(max_workers=2) as pool:
            futures = [pool.submit(demote, a_id, b_id), pool.submit(demote, b_id, a_id)]
            outcomes = sorted(f.result().outcome.value for f in futures)

        with direct_db.session() as s:
            assert _owner_count(s, project_id) == 1
        assert "ok" in outcomes
        assert len(outcomes) == 2
