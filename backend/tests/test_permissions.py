import itertools

import pytest

from tradequote.core.permissions import (
    ALL_PERMISSIONS,
    NO_PERMISSIONS,
    Permissions,
    Role,
    can_manage_users,
    cap_permissions,
    company_ceiling,
    is_support_admin,
)

FLAGS = Permissions.flag_names()


def all_permission_values():
    for bits in itertools.product((False, True), repeat=len(FLAGS)):
        yield Permissions(**dict(zip(FLAGS, bits)))


def test_cap_is_per_flag_and():
    job = Permissions(can_view_prices=True, can_edit_prices=True, can_audit=True)
    company = Permissions(can_view_prices=True, can_audit=False, can_manage_users=True)
    assert cap_permissions(job, company) == Permissions(can_view_prices=True)


def test_cap_never_exceeds_either_side():
    values = list(all_permission_values())
    for job in values[::3]:
        for company in values[::5]:
            eff = cap_permissions(job, company)
            for name in FLAGS:
                assert getattr(eff, name) == (getattr(job, name) and getattr(company, name))


def test_cap_identities():
    for p in all_permission_values():
        assert cap_permissions(p, ALL_PERMISSIONS) == p
        assert cap_permissions(ALL_PERMISSIONS, p) == p
        assert cap_permissions(p, NO_PERMISSIONS) == NO_PERMISSIONS
        assert cap_permissions(p, p) == p


def test_cap_is_idempotent():
    job = Permissions(can_view_prices=True, can_audit=True)
    company = Permissions(can_view_prices=True)
    once = cap_permissions(job, company)
    assert cap_permissions(once, company) == once


def test_cap_treats_missing_as_no_permissions():
    assert cap_permissions(None, ALL_PERMISSIONS) == NO_PERMISSIONS
    assert cap_permissions(ALL_PERMISSIONS, None) == NO_PERMISSIONS


def test_from_mapping_absent_flags_are_false_and_unknown_ignored():
    p = Permissions.from_mapping({"can_view_prices": True, "canFly": True})
    assert p == Permissions(can_view_prices=True)
    assert Permissions.from_mapping(None) == NO_PERMISSIONS


def test_merge_updates_only_given_flags():
    base = Permissions(can_view_prices=True, can_audit=True)
    merged = base.merge(can_audit=False, can_edit_prices=True, can_manage_users=None)
    assert merged == Permissions(can_view_prices=True, can_edit_prices=True)
    # original untouched
    assert base.can_audit is True


def test_merge_rejects_unknown_flag():
    with pytest.raises(TypeError):
        NO_PERMISSIONS.merge(can_delete_everything=True)


def test_company_ceiling_by_role():
    stored = Permissions(can_view_prices=True)
    assert company_ceiling(Role.OWNER, NO_PERMISSIONS) == ALL_PERMISSIONS
    assert company_ceiling(Role.ADMIN, stored) == stored
    assert company_ceiling(Role.USER, stored) == stored
    assert company_ceiling(Role.SUPPORT, ALL_PERMISSIONS) == NO_PERMISSIONS
    assert company_ceiling(None, ALL_PERMISSIONS) == NO_PERMISSIONS


def test_role_parse():
    assert Role.parse("owner") is Role.OWNER
    assert Role.parse(" ADMIN ") is Role.ADMIN
    assert Role.parse("GOD") is None
    assert Role.parse(None) is None


def test_can_manage_users():
    assert can_manage_users(Role.OWNER, NO_PERMISSIONS)
    assert can_manage_users(Role.ADMIN, NO_PERMISSIONS)
    assert not can_manage_users(Role.USER, NO_PERMISSIONS)
    assert can_manage_users(Role.USER, Permissions(can_manage_users=True))


def test_is_support_admin():
    assert is_support_admin("x", "support_admin")
    assert is_support_admin("x", "super_admin")
    assert not is_support_admin("x", "user")
    assert is_support_admin("Helpdesk", "user", ["helpdesk"])
