# tests/test_marketplace_service.py

"""
Marketplace service operations against the in-memory store.
"""

import pytest

from core.errors import Forbidden, InvalidInput, InvalidTransition, NotFound, StoreError
from models.enums import EntityKind
from services.marketplace import (
    create_listing,
    create_profile,
    dashboard_stats,
    ensure_profile,
    get_record,
    list_own_listings,
    list_records,
    transition,
    update_fields,
)


NEW_PRODUCT = {
    "name": "Cashew kernels",
    "description": "W320 grade, vacuum packed",
    "category": "Agriculture",
    "quantity": 10,
    "unit": "tonnes",
    "price": 7.5,
    "currency": "USD",
    "country_origin": "India",
}


def _ids(rows, field="id"):
    return sorted(r[field] for r in rows)


# ============================================================
# Listing views
# ============================================================

def test_public_catalog_shows_active_and_legacy_open(marketplace, anonymous):
    assert _ids(list_records(marketplace, anonymous, EntityKind.product)) == ["prod-br", "prod-cn"]
    assert _ids(list_records(marketplace, anonymous, EntityKind.request)) == ["req-open"]


def test_member_catalog_excludes_own_closed_listings(marketplace, member):
    assert _ids(list_records(marketplace, member, EntityKind.product)) == ["prod-br", "prod-cn"]
    assert _ids(list_own_listings(marketplace, member, EntityKind.product)) == ["prod-br", "prod-done"]


def test_sub_admin_sees_only_assigned_countries(marketplace, brazil_sub_admin):
    rows = list_records(marketplace, brazil_sub_admin, EntityKind.product)
    assert _ids(rows) == ["prod-br"]


def test_sub_admin_profile_queue_defaults_to_pending(marketplace, india_sub_admin, brazil_sub_admin):
    # user-1 (IN) is approved, so India's pending queue is empty
    assert list_records(marketplace, india_sub_admin, EntityKind.profile) == []
    assert _ids(list_records(marketplace, india_sub_admin, EntityKind.profile, status="all"), "user_id") == ["user-1"]
    assert _ids(list_records(marketplace, brazil_sub_admin, EntityKind.profile), "user_id") == ["user-3"]


def test_status_filter_never_widens_country_scope(marketplace, brazil_sub_admin):
    rows = list_records(marketplace, brazil_sub_admin, EntityKind.product, status="all", country="China")
    assert rows == []


def test_search_and_category_filters(marketplace, admin):
    assert _ids(list_records(marketplace, admin, EntityKind.product, search="SOLAR")) == ["prod-cn"]
    assert _ids(list_records(marketplace, admin, EntityKind.product, category="Agriculture")) == ["prod-br"]


def test_admin_status_filter_comma_separated(marketplace, admin):
    rows = list_records(marketplace, admin, EntityKind.request, status="active,deleted")
    assert _ids(rows) == ["req-deleted", "req-open"]


def test_list_own_listings_requires_member(marketplace, member, admin):
    assert _ids(list_own_listings(marketplace, member, EntityKind.request)) == ["req-deleted"]
    with pytest.raises(Forbidden):
        list_own_listings(marketplace, admin, EntityKind.request)


def test_get_record_out_of_scope_is_not_found(marketplace, india_sub_admin):
    with pytest.raises(NotFound):
        get_record(marketplace, india_sub_admin, EntityKind.product, "prod-cn")


# ============================================================
# Profiles
# ============================================================

def test_create_profile_always_pending(store):
    profile = create_profile(store, "user-9", {"full_name": "Nandi", "approval_status": "approved"})
    assert profile["approval_status"] == "pending"


def test_ensure_profile_is_idempotent(marketplace):
    existing = ensure_profile(marketplace, "user-1", {"full_name": "Someone else"})
    assert existing["full_name"] == "Asha Rao"
    assert len(marketplace.rows("profiles")) == 3


def test_sub_admin_approves_covered_profile_only(marketplace, brazil_sub_admin, india_sub_admin):
    result = transition(marketplace, brazil_sub_admin, EntityKind.profile, "user-3", "approved")
    assert result["applied"] is True
    assert result["status"] == "approved"
    assert result["allowed_next"] == ["rejected"]

    # China is outside India's scope: not even visible
    with pytest.raises(NotFound):
        transition(marketplace, india_sub_admin, EntityKind.profile, "user-2", "approved")


def test_deleted_profile_is_terminal(marketplace, admin):
    transition(marketplace, admin, EntityKind.profile, "user-2", "deleted")
    with pytest.raises(InvalidTransition):
        transition(marketplace, admin, EntityKind.profile, "user-2", "approved")


def test_concurrent_approval_reports_not_applied(marketplace, admin, brazil_sub_admin):
    record = get_record(marketplace, brazil_sub_admin, EntityKind.profile, "user-3")
    assert record["approval_status"] == "pending"

    # Another reviewer rejects between our read and our write
    original_fetch = marketplace.fetch_one

    def fetch_then_race(table, predicate):
        row = original_fetch(table, predicate)
        if table == "profiles" and row and row["approval_status"] == "pending":
            marketplace.conditional_update(table, predicate, {"approval_status": "rejected"})
        return row

    marketplace.fetch_one = fetch_then_race
    result = transition(marketplace, brazil_sub_admin, EntityKind.profile, "user-3", "approved")
    marketplace.fetch_one = original_fetch

    assert result["applied"] is False
    assert result["status"] == "rejected"


# ============================================================
# Listing creation
# ============================================================

def test_approved_member_creates_active_listing(marketplace, member):
    created = create_listing(marketplace, member, EntityKind.product, {**NEW_PRODUCT, "status": "done"})
    assert created["exporter_id"] == member.id
    assert created["status"] == "active"


def test_pending_member_cannot_post(marketplace, other_member):
    with pytest.raises(Forbidden):
        create_listing(marketplace, other_member, EntityKind.product, NEW_PRODUCT)


def test_revoked_approval_blocks_post_even_after_approved_read(marketplace, member, admin):
    profile = get_record(marketplace, member, EntityKind.profile, member.id)
    assert profile["approval_status"] == "approved"

    # Approval revoked between page load and submit
    transition(marketplace, admin, EntityKind.profile, member.id, "rejected")

    with pytest.raises(Forbidden):
        create_listing(marketplace, member, EntityKind.product, NEW_PRODUCT)


def test_staff_cannot_post(marketplace, admin):
    with pytest.raises(Forbidden):
        create_listing(marketplace, admin, EntityKind.request, {"title": "x"})


# ============================================================
# Field edits and listing transitions
# ============================================================

def test_owner_edits_listing(marketplace, member):
    updated = update_fields(marketplace, member, EntityKind.product, "prod-br", {"price": 9.0, "unit": None})
    assert updated["price"] == 9.0
    assert marketplace.fetch_one("products", _eq("id", "prod-br"))["price"] == 9.0


def test_stranger_cannot_edit_visible_listing(marketplace, other_member):
    with pytest.raises(Forbidden):
        update_fields(marketplace, other_member, EntityKind.product, "prod-br", {"price": 1.0})


def test_status_never_changes_through_field_edit(marketplace, member):
    with pytest.raises(Forbidden):
        update_fields(marketplace, member, EntityKind.product, "prod-br", {"status": "done"})


def test_owner_closes_legacy_open_request(marketplace, other_member):
    result = transition(marketplace, other_member, EntityKind.request, "req-open", "done")
    assert result["applied"] is True
    assert result["status"] == "done"
    assert result["allowed_next"] == []


def test_covering_sub_admin_deletes_listing(marketplace, brazil_sub_admin):
    result = transition(marketplace, brazil_sub_admin, EntityKind.product, "prod-br", "deleted")
    assert result["applied"] is True


def test_done_listing_is_terminal(marketplace, member):
    with pytest.raises(InvalidTransition):
        transition(marketplace, member, EntityKind.product, "prod-done", "active")


# ============================================================
# Dashboard
# ============================================================

def test_dashboard_counts_are_scoped(marketplace, admin, brazil_sub_admin, member):
    everything = dashboard_stats(marketplace, admin)
    assert everything["profiles"]["pending"] == 2
    assert everything["products"]["active"] == 2
    assert everything["product_requests"]["active"] == 1

    brazil = dashboard_stats(marketplace, brazil_sub_admin)
    assert brazil["profiles"]["pending"] == 1
    assert brazil["products"]["active"] == 1
    assert brazil["product_requests"]["active"] == 0

    with pytest.raises(Forbidden):
        dashboard_stats(marketplace, member)


def _eq(field, value):
    from core.predicates import Predicate

    return Predicate.eq(field, value)


# ============================================================
# Deleting a member hides their listings
# ============================================================

def test_deleting_member_removes_their_listings_from_catalog(marketplace, admin, anonymous):
    result = transition(marketplace, admin, EntityKind.profile, "user-1", "deleted")
    assert result["applied"] is True

    assert _ids(list_records(marketplace, anonymous, EntityKind.product)) == ["prod-cn"]
    assert marketplace.fetch_one("products", _eq("id", "prod-br"))["status"] == "deleted"
    # Already-closed listings keep their status
    assert marketplace.fetch_one("products", _eq("id", "prod-done"))["status"] == "done"


def test_deleting_member_hides_legacy_open_requests(marketplace, admin, anonymous):
    transition(marketplace, admin, EntityKind.profile, "user-2", "deleted")

    assert list_records(marketplace, anonymous, EntityKind.request) == []
    assert _ids(list_records(marketplace, anonymous, EntityKind.product)) == ["prod-br"]


def test_listing_cleanup_failure_does_not_undo_profile_deletion(marketplace, admin):
    original_update = marketplace.conditional_update

    def failing_listing_update(table, predicate, patch):
        if table == "products":
            raise StoreError("Failed to update products failed")
        return original_update(table, predicate, patch)

    marketplace.conditional_update = failing_listing_update
    result = transition(marketplace, admin, EntityKind.profile, "user-1", "deleted")
    marketplace.conditional_update = original_update

    assert result["applied"] is True
    assert marketplace.fetch_one("profiles", _eq("user_id", "user-1"))["approval_status"] == "deleted"
    assert marketplace.fetch_one("products", _eq("id", "prod-br"))["status"] == "active"


def test_rejecting_member_leaves_listings_alone(marketplace, admin, anonymous):
    transition(marketplace, admin, EntityKind.profile, "user-1", "rejected")
    assert _ids(list_records(marketplace, anonymous, EntityKind.product)) == ["prod-br", "prod-cn"]


# ============================================================
# Budget range on partial edits
# ============================================================

def _seed_budgeted_request(store):
    return store.seed(
        "product_requests",
        id="req-budget",
        requester_id="user-1",
        title="Bulk soybean meal",
        description="Non-GMO soybean meal, 48% protein",
        category="Agriculture",
        target_country="Brazil",
        budget_min=100,
        budget_max=200,
        status="active",
    )


def test_partial_budget_edit_checked_against_stored_row(marketplace, member):
    _seed_budgeted_request(marketplace)

    with pytest.raises(InvalidInput):
        update_fields(marketplace, member, EntityKind.request, "req-budget", {"budget_min": 500.0})
    with pytest.raises(InvalidInput):
        update_fields(marketplace, member, EntityKind.request, "req-budget", {"budget_max": 50.0})

    stored = marketplace.fetch_one("product_requests", _eq("id", "req-budget"))
    assert (stored["budget_min"], stored["budget_max"]) == (100, 200)


def test_budget_edit_within_range(marketplace, member):
    _seed_budgeted_request(marketplace)

    updated = update_fields(marketplace, member, EntityKind.request, "req-budget", {"budget_min": 150.0})
    assert updated["budget_min"] == 150.0

    widened = update_fields(
        marketplace, member, EntityKind.request, "req-budget", {"budget_min": 300.0, "budget_max": 400.0}
    )
    assert (widened["budget_min"], widened["budget_max"]) == (300.0, 400.0)
