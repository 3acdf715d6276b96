"""Visibility rules exercised directly against the service layer.

Fixture world (one week):
    G1 = {alice (admin), bob}      G2 = {alice (admin), carol}
    dave belongs to no group.
"""
import uuid

import pytest
from fastapi import HTTPException

from lunchplan.models.day_status import DayStatus, LunchStatus, StatusVisibility
from lunchplan.models.group import Group, GroupMember, GroupRole
from lunchplan.models.user import User
from lunchplan.services.visibility_service import (
    can_see, group_members, resolve_visible_statuses, visible_users,
)

WEEK = "2025-W40"
OTHER_WEEK = "2025-W41"


def _user(db, name):
    user = User(name=name, email=f"{name.lower()}@example.com")
    db.add(user)
    db.commit()
    return user


def _group(db, name, creator, *members):
    group = Group(
        name=name,
        code=uuid.uuid4().hex[:6].upper(),
        invite_link=uuid.uuid4().hex,
        created_by=creator.user_id,
    )
    db.add(group)
    db.flush()
    db.add(GroupMember(group_id=group.group_id, user_id=creator.user_id, role=GroupRole.admin))
    for member in members:
        db.add(GroupMember(group_id=group.group_id, user_id=member.user_id, role=GroupRole.member))
    db.commit()
    return group


def _status(db, user, group=None, weekday=1, visibility=StatusVisibility.group_only, week=WEEK):
    record = DayStatus(
        user_id=user.user_id,
        group_id=group.group_id if group else None,
        iso_week=week,
        weekday=weekday,
        status=LunchStatus.lunchbox,
        visibility=visibility,
    )
    db.add(record)
    db.commit()
    return record


@pytest.fixture
def world(db):
    alice = _user(db, "Alice")
    bob = _user(db, "Bob")
    carol = _user(db, "Carol")
    dave = _user(db, "Dave")
    g1 = _group(db, "G1", alice, bob)
    g2 = _group(db, "G2", alice, carol)

    records = {
        "alice_g1": _status(db, alice, g1, weekday=1),
        "alice_personal": _status(db, alice, None, weekday=2),
        "bob_g1": _status(db, bob, g1, weekday=1),
        "bob_g1_all": _status(db, bob, g1, weekday=2, visibility=StatusVisibility.all_groups),
        "bob_personal": _status(db, bob, None, weekday=3),
        "carol_g2": _status(db, carol, g2, weekday=1),
        "carol_personal": _status(db, carol, None, weekday=4),
        "carol_personal_all": _status(db, carol, None, weekday=5, visibility=StatusVisibility.all_groups),
        "dave_personal": _status(db, dave, None, weekday=1),
        "bob_other_week": _status(db, bob, g1, weekday=1, week=OTHER_WEEK),
    }
    return {
        "users": {"alice": alice, "bob": bob, "carol": carol, "dave": dave},
        "groups": {"g1": g1, "g2": g2},
        "records": records,
    }


def _names(world, statuses):
    by_id = {record.id: name for name, record in world["records"].items()}
    return {by_id[status.id] for status in statuses}


class TestResolveGlobal:
    """Global (no group) view."""

    def test_alice_sees_both_groups(self, db, world):
        statuses = resolve_visible_statuses(db, world["users"]["alice"], WEEK)
        assert _names(world, statuses) == {
            "alice_g1", "alice_personal",
            "bob_g1", "bob_g1_all", "bob_personal",
            "carol_g2", "carol_personal",
        }

    def test_bob_does_not_see_carol(self, db, world):
        statuses = resolve_visible_statuses(db, world["users"]["bob"], WEEK)
        assert _names(world, statuses) == {
            "alice_g1", "alice_personal", "bob_g1", "bob_g1_all", "bob_personal",
        }

    def test_user_without_groups_sees_only_own(self, db, world):
        dave = world["users"]["dave"]
        for week in (WEEK, OTHER_WEEK):
            statuses = resolve_visible_statuses(db, dave, week)
            assert all(status.user_id == dave.user_id for status in statuses)
        assert _names(world, resolve_visible_statuses(db, dave, WEEK)) == {"dave_personal"}

    def test_only_requested_week(self, db, world):
        statuses = resolve_visible_statuses(db, world["users"]["bob"], OTHER_WEEK)
        assert _names(world, statuses) == {"bob_other_week"}


class TestResolveGroupScoped:
    """Group-scoped view."""

    def test_g1_scope_for_alice(self, db, world):
        statuses = resolve_visible_statuses(db, world["users"]["alice"], WEEK, world["groups"]["g1"])
        # alice's own records always; carol's statuses stay out of G1
        assert _names(world, statuses) == {
            "alice_g1", "alice_personal", "bob_g1", "bob_g1_all", "bob_personal",
        }

    def test_g2_scope_for_alice(self, db, world):
        statuses = resolve_visible_statuses(db, world["users"]["alice"], WEEK, world["groups"]["g2"])
        assert _names(world, statuses) == {
            "alice_g1", "alice_personal", "carol_g2", "carol_personal",
        }

    def test_non_member_scope_is_forbidden(self, db, world):
        with pytest.raises(HTTPException) as exc_info:
            resolve_visible_statuses(db, world["users"]["carol"], WEEK, world["groups"]["g1"])
        assert exc_info.value.status_code == 403

    def test_user_without_groups_scope_is_forbidden(self, db, world):
        with pytest.raises(HTTPException) as exc_info:
            resolve_visible_statuses(db, world["users"]["dave"], WEEK, world["groups"]["g2"])
        assert exc_info.value.status_code == 403


class TestCanSee:
    """Point checks agree with the bulk resolver."""

    def test_matches_global_resolver_for_everyone(self, db, world):
        week_records = [r for r in world["records"].values() if r.iso_week == WEEK]
        for viewer in world["users"].values():
            resolved = {status.id for status in resolve_visible_statuses(db, viewer, WEEK)}
            checked = {record.id for record in week_records if can_see(db, viewer, record)}
            assert resolved == checked, viewer.name

    def test_all_groups_record_visible_to_every_member(self, db, world):
        record = world["records"]["bob_g1_all"]
        for member in db.query(GroupMember).filter(GroupMember.group_id == record.group_id).all():
            viewer = db.query(User).filter(User.user_id == member.user_id).one()
            assert can_see(db, viewer, record)

    def test_personal_record_visible_iff_sharing_a_group(self, db, world):
        record = world["records"]["carol_personal"]
        users = world["users"]
        assert can_see(db, users["carol"], record)
        assert can_see(db, users["alice"], record)
        assert not can_see(db, users["bob"], record)
        assert not can_see(db, users["dave"], record)

    def test_owner_always_sees_own(self, db, world):
        dave = world["users"]["dave"]
        assert can_see(db, dave, world["records"]["dave_personal"])
        assert not can_see(db, dave, world["records"]["bob_g1_all"])


class TestVisibleUsers:
    """User listing for the grid."""

    def test_viewer_first_then_by_name(self, db, world):
        users = world["users"]
        listed = visible_users(db, users["carol"])
        assert [u.name for u in listed] == ["Carol", "Alice"]

    def test_no_duplicates_across_groups(self, db, world):
        listed = visible_users(db, world["users"]["alice"])
        assert [u.name for u in listed] == ["Alice", "Bob", "Carol"]

    def test_user_without_groups(self, db, world):
        dave = world["users"]["dave"]
        assert visible_users(db, dave) == [dave]

    def test_group_members_viewer_first(self, db, world):
        listed = group_members(db, world["users"]["bob"], world["groups"]["g1"])
        assert [u.name for u in listed] == ["Bob", "Alice"]
