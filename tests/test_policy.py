# tests/test_policy.py

"""
Visibility / authorization policy engine.
"""

import pytest

from core.errors import Forbidden, NotFound
from core.policy import (
    can_create_listing,
    can_read,
    can_write,
    check_create_listing,
    check_read,
    default_status_filter,
    list_filter,
    write_scope,
)
from models.enums import EntityKind, PrincipalKind
from models.principal import Principal


def _product(country="BR", status="active", owner="user-1"):
    return {"id": "p1", "exporter_id": owner, "country_origin": country, "status": status}


def _request(country="IN", status="active", owner="user-2"):
    return {"id": "r1", "requester_id": owner, "target_country": country, "status": status}


def _profile(user_id="user-9", country="IN", status="pending"):
    return {"user_id": user_id, "country": country, "approval_status": status}


# ============================================================
# Reads
# ============================================================

@pytest.mark.parametrize("country", ["China", "CN", "Russia", None, ""])
def test_sub_admin_never_reads_uncovered_records(india_sub_admin, country):
    assert not can_read(india_sub_admin, EntityKind.product, _product(country=country))
    assert not can_read(india_sub_admin, EntityKind.request, _request(country=country))
    assert not can_read(india_sub_admin, EntityKind.profile, _profile(country=country))


def test_sub_admin_reads_covered_records_in_any_status(india_sub_admin):
    assert can_read(india_sub_admin, EntityKind.product, _product(country="IN", status="deleted"))
    assert can_read(india_sub_admin, EntityKind.profile, _profile(country="India", status="rejected"))


def test_admin_reads_everything(admin):
    assert can_read(admin, EntityKind.product, _product(status="deleted"))
    assert can_read(admin, EntityKind.profile, _profile(country=None))


def test_public_sees_only_active_listings(anonymous):
    assert can_read(anonymous, EntityKind.product, _product(status="active"))
    assert can_read(anonymous, EntityKind.request, _request(status="open"))
    assert not can_read(anonymous, EntityKind.product, _product(status="done"))
    assert not can_read(anonymous, EntityKind.profile, _profile())


def test_owner_sees_own_closed_listing(member, other_member):
    record = _product(status="done", owner=member.id)
    assert can_read(member, EntityKind.product, record)
    assert not can_read(other_member, EntityKind.product, record)


def test_user_reads_only_own_profile(member):
    assert can_read(member, EntityKind.profile, _profile(user_id=member.id))
    assert not can_read(member, EntityKind.profile, _profile(user_id="someone-else"))


def test_check_read_reports_out_of_scope_as_not_found(india_sub_admin):
    with pytest.raises(NotFound):
        check_read(india_sub_admin, EntityKind.product, _product(country="China"))
    with pytest.raises(NotFound):
        check_read(india_sub_admin, EntityKind.product, None)


# ============================================================
# List filters
# ============================================================

def test_sub_admin_list_filter_admits_both_country_forms(brazil_sub_admin):
    scope = list_filter(brazil_sub_admin, EntityKind.product)
    assert scope.matches(_product(country="BR"))
    assert scope.matches(_product(country="Brazil"))
    assert not scope.matches(_product(country="China"))
    assert not scope.matches(_product(country=None))


def test_sub_admin_without_countries_sees_nothing():
    nobody = Principal(kind=PrincipalKind.sub_admin, id="s0", assigned_countries=())
    assert list_filter(nobody, EntityKind.profile).is_never
    assert write_scope(nobody, EntityKind.product).is_never


def test_list_filter_agrees_with_can_read(india_sub_admin, anonymous, admin):
    records = [
        _product(country=c, status=s, owner=o)
        for c in ("IN", "India", "CN", None)
        for s in ("active", "open", "done", "deleted")
        for o in ("user-1", "user-2")
    ]
    for principal in (india_sub_admin, anonymous, admin):
        scope = list_filter(principal, EntityKind.product)
        for record in records:
            assert scope.matches(record) == can_read(principal, EntityKind.product, record)


def test_member_catalog_is_the_public_catalog(member):
    scope = list_filter(member, EntityKind.product)
    own_closed = _product(status="done", owner=member.id)

    assert scope.matches(_product(status="active", owner="user-2"))
    assert not scope.matches(own_closed)
    # Still readable by id and through the own-listings view
    assert can_read(member, EntityKind.product, own_closed)


def test_caller_filters_cannot_widen_scope(india_sub_admin):
    from core.predicates import Predicate

    narrowed = list_filter(india_sub_admin, EntityKind.product) & Predicate.eq("country_origin", "China")
    assert not narrowed.matches(_product(country="China"))


def test_anonymous_profile_list_is_empty(anonymous):
    assert list_filter(anonymous, EntityKind.profile).is_never


def test_default_status_view_only_for_sub_admins(india_sub_admin, admin):
    pending_queue = default_status_filter(india_sub_admin, EntityKind.profile)
    assert pending_queue.matches(_profile(status="pending"))
    assert not pending_queue.matches(_profile(status="approved"))
    assert default_status_filter(admin, EntityKind.profile) is None


# ============================================================
# Writes
# ============================================================

def test_owner_edits_fields_stranger_does_not(member, other_member):
    record = _product(owner=member.id)
    assert can_write(member, EntityKind.product, record, {"price": 12.5})
    assert not can_write(other_member, EntityKind.product, record, {"price": 12.5})


def test_sub_admin_cannot_edit_fields_even_when_covering(brazil_sub_admin):
    assert not can_write(brazil_sub_admin, EntityKind.product, _product(), {"name": "x"})


def test_sub_admin_status_change_needs_coverage(brazil_sub_admin):
    assert can_write(brazil_sub_admin, EntityKind.product, _product(country="BR"), {"status": "deleted"})
    assert not can_write(brazil_sub_admin, EntityKind.product, _product(country="CN"), {"status": "deleted"})


def test_immutable_fields_and_empty_changes_rejected(admin):
    assert not can_write(admin, EntityKind.product, _product(), {"exporter_id": "hijack"})
    assert not can_write(admin, EntityKind.product, _product(), {})


def test_anonymous_never_writes(anonymous):
    assert not can_write(anonymous, EntityKind.product, _product(status="active"), {"status": "done"})
    assert write_scope(anonymous, EntityKind.product).is_never


def test_user_write_scope_is_ownership(member):
    scope = write_scope(member, EntityKind.request)
    assert scope.matches(_request(owner=member.id))
    assert not scope.matches(_request(owner="user-2"))


# ============================================================
# Listing creation
# ============================================================

def test_only_approved_members_create_listings(member):
    assert can_create_listing(member, _profile(user_id=member.id, status="approved"))
    for status in ("pending", "rejected", "deleted"):
        assert not can_create_listing(member, _profile(user_id=member.id, status=status))
    assert not can_create_listing(member, None)


def test_cannot_create_with_someone_elses_profile(member):
    assert not can_create_listing(member, _profile(user_id="user-2", status="approved"))


def test_staff_cannot_create_listings(admin):
    with pytest.raises(Forbidden):
        check_create_listing(admin, _profile(user_id="admin-1", status="approved"))
