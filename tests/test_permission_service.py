"""
Tests for role permissions and custody visibility.
"""

from models.booking import TeamMember
from models.user_context import Organization, Role, UserContext
from services.permission_service import (
    BOOKING_ENTITY,
    PermissionAction,
    can_perform,
    can_see_actions,
    can_view_specific_custody,
)


def test_default_permissions():
    assert can_perform({Role.ADMIN}, BOOKING_ENTITY, PermissionAction.ARCHIVE)
    assert can_perform({Role.SELF_SERVICE}, BOOKING_ENTITY, PermissionAction.CHECKOUT)
    assert not can_perform({Role.SELF_SERVICE}, BOOKING_ENTITY, PermissionAction.ARCHIVE)
    assert not can_perform({Role.BASE}, BOOKING_ENTITY, PermissionAction.CHECKIN)
    assert not can_perform(set(), BOOKING_ENTITY, PermissionAction.READ)


def test_any_role_is_enough():
    assert can_perform({Role.BASE, Role.OWNER}, BOOKING_ENTITY, PermissionAction.CANCEL)


def test_custom_permission_table():
    table = {Role.BASE: {"booking": frozenset({"checkin"})}}

    assert can_perform({Role.BASE}, "booking", "checkin", permissions=table)
    assert not can_perform({Role.ADMIN}, "booking", "checkin", permissions=table)


def test_admin_always_sees_custody():
    assert can_view_specific_custody({Role.ADMIN}, "U2", None, "U1")


def test_own_custody_is_visible():
    assert can_view_specific_custody({Role.BASE}, "U1", Organization(id="org"), "U1")


def test_others_custody_follows_organization_settings():
    hidden = Organization(id="org")
    shared = Organization(id="org", self_service_can_see_custody=True, base_user_can_see_custody=True)

    assert not can_view_specific_custody({Role.SELF_SERVICE}, "U2", hidden, "U1")
    assert can_view_specific_custody({Role.SELF_SERVICE}, "U2", shared, "U1")
    assert not can_view_specific_custody({Role.BASE}, "U2", hidden, "U1")
    assert can_view_specific_custody({Role.BASE}, "U2", shared, "U1")


def test_can_see_actions():
    admin = UserContext(user_id="U1", roles=frozenset({Role.ADMIN}))
    base = UserContext(user_id="U1", roles=frozenset({Role.BASE}))
    own = TeamMember(id="tm_1", name="Me", user_id="U1")
    other = TeamMember(id="tm_2", name="Other", user_id="U2")

    assert can_see_actions(admin, None)
    assert can_see_actions(base, own)
    assert not can_see_actions(base, other)
    assert not can_see_actions(base, None)
