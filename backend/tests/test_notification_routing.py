"""
Unit tests for notification click routing.

The one rule that must never break: a creator is never sent to a public
/property page, whatever the notification carries.
"""
import pytest

from app.schemas.notification import Notification, ViewerRole
from app.services.notification_routing import (
    ACTION_LABELS,
    CREATOR_RULES,
    get_notification_action_label,
    parse_role,
    resolve_notification,
    resolve_notification_route,
)


def note(type_: str, **data) -> Notification:
    return Notification(type=type_, data=data or None)


# ============================================================
# CREATOR
# ============================================================

class TestCreatorRoutes:

    @pytest.mark.parametrize("notification, expected", [
        (note("new_lead", promotion_id="p1"), "/dashboard/creator/my-promotions/p1"),
        (note("lead_created", lead_id="l1"), "/dashboard/creator/analytics"),
        (note("commission_earned", transaction_id="t9"), "/dashboard/creator/wallet/transactions/t9"),
        (note("payout_processed", amount=100), "/dashboard/creator/wallet/transactions"),
        (note("withdrawal_processed", transaction_id="t2"), "/dashboard/creator/wallet/transactions/t2"),
        (note("property_assigned", promotion_id="p2", property_id="x"), "/dashboard/creator/my-promotions/p2"),
        (note("promotion_paused", property_id="x"), "/dashboard/creator/analytics"),
        (note("promotion_resumed", promotion_id="p3"), "/dashboard/creator/my-promotions/p3"),
        (note("tier_updated", tier=2), "/dashboard/creator/profile"),
    ])
    def test_routes(self, notification, expected):
        assert resolve_notification_route(notification, "creator") == expected

    def test_property_verified_never_routes_to_public_page(self):
        assert resolve_notification_route(note("property_verified", property_id="x"), "creator") is None

    def test_property_assigned_without_promotion_has_no_route(self):
        assert resolve_notification_route(note("property_assigned", property_id="x"), "creator") is None

    def test_system_is_read_only(self):
        assert resolve_notification_route(note("system", property_id="x"), "creator") is None

    def test_unknown_type_has_no_route(self):
        assert resolve_notification_route(note("something_new", property_id="x"), "creator") is None

    def test_no_creator_template_points_at_property_pages(self):
        for rule in CREATOR_RULES:
            for template in rule.routes:
                assert not template.startswith("/property")

    def test_fuzz_never_property_for_creator(self):
        data = {
            "property_id": "x", "promotion_id": "p", "transaction_id": "t",
            "inspection_id": "i", "handover_id": "h", "contract_id": "c", "bid_id": "b",
        }
        known_types = {t for labels in ACTION_LABELS.values() for t in labels} | {
            "property_verified", "property_assigned", "property_bought", "system",
        }
        for type_ in known_types:
            route = resolve_notification_route(Notification(type=type_, data=data), "creator")
            assert route is None or not route.startswith("/property"), type_


# ============================================================
# DEVELOPER
# ============================================================

class TestDeveloperRoutes:

    @pytest.mark.parametrize("notification, expected", [
        (note("handover_completed", handover_id="h1"), "/dashboard/developer/handover/h1"),
        (note("handover_documents_signed", property_id="x"), "/dashboard/developer/handover"),
        (note("property_verified", property_id="x", contract_id="c1"), "/dashboard/developer/contracts/c1"),
        (note("property_verified", property_id="x"), "/dashboard/developer/properties/x"),
        (note("new_lead", promotion_id="p1"), "/dashboard/developer/leads"),
        (note("new_bid", property_id="x", bid_id="b1"), "/dashboard/developer/properties/x/bids/b1"),
        (note("new_bid", property_id="x"), "/dashboard/developer/properties/x"),
        (note("inspection_booked", inspection_id="i1"), "/dashboard/developer/inspections/i1"),
        (note("inspection_cancelled", property_id="x"), "/dashboard/developer/inspections"),
        (note("inspection_paid", inspection_id="i2"), "/dashboard/developer/inspections/i2"),
        (note("contract_executed", contract_id="c2"), "/dashboard/developer/contracts/c2"),
        (note("property_bought", transaction_id="t1"), "/dashboard/developer/wallet?transaction=t1"),
        (note("deposit_cash", amount=5), "/dashboard/developer/wallet"),
    ])
    def test_routes(self, notification, expected):
        assert resolve_notification_route(notification, "developer") == expected

    @pytest.mark.parametrize("notification", [
        note("property_verified", contract_id="c1"),
        note("new_bid", bid_id="b1"),
        note("inspection_paid", property_id="x"),
        note("contract_executed", property_id="x"),
        note("property_bought", property_id="x"),
        note("property_bought", property_id="x", transaction_id=""),
    ])
    def test_required_keys(self, notification):
        assert resolve_notification_route(notification, "developer") is None


# ============================================================
# BUYER / ANONYMOUS / OTHER
# ============================================================

class TestBuyerRoutes:

    @pytest.mark.parametrize("notification, expected", [
        (note("inspection_confirmed", inspection_id="i1"), "/dashboard/buyer/inspections/i1"),
        (note("inspection_completed", property_id="x"), "/dashboard/buyer/inspections"),
        (note("property_verified", property_id="x"), "/property/x"),
        (note("handover_documents_uploaded", handover_id="h1"), "/dashboard/buyer/handover/h1/documents"),
        (note("handover_scheduled", handover_id="h2"), "/dashboard/buyer/handover/h2"),
        (note("handover_completed", property_id="x"), "/dashboard/buyer/handover"),
        (note("payment_confirmed", amount=10), "/dashboard/buyer/wallet"),
    ])
    def test_routes(self, notification, expected):
        assert resolve_notification_route(notification, "buyer") == expected

    def test_unmatched_buyer_type_does_not_fall_back(self):
        assert resolve_notification_route(note("new_lead", property_id="x"), "buyer") is None


class TestOtherRoles:

    @pytest.mark.parametrize("role", [None, "", "anonymous", ViewerRole.ANONYMOUS])
    def test_anonymous_property_fallback(self, role):
        assert resolve_notification_route(note("anything", property_id="x"), role) == "/property/x"

    def test_anonymous_without_property(self):
        assert resolve_notification_route(note("anything", lead_id="l"), None) is None

    @pytest.mark.parametrize("role", ["admin", "organizer", "superuser"])
    def test_admin_and_unknown_roles(self, role):
        assert resolve_notification_route(note("property_verified", property_id="x"), role) is None

    def test_no_data(self):
        for role in ("creator", "developer", "buyer", None):
            assert resolve_notification(Notification(type="new_lead"), role).route is None
            assert resolve_notification(Notification(type="new_lead", data={}), role).action_label is None

    def test_role_parsing(self):
        assert parse_role(" Creator ") == ViewerRole.CREATOR
        assert parse_role(None) == ViewerRole.ANONYMOUS
        assert parse_role("nobody") is None


# ============================================================
# LABELS
# ============================================================

class TestActionLabels:

    @pytest.mark.parametrize("type_, role, label", [
        ("new_lead", "creator", "View Analytics"),
        ("commission_paid", "creator", "View Wallet"),
        ("withdrawal_processed", "creator", "View Transaction"),
        ("tier_upgraded", "creator", "View Profile"),
        ("property_verified", "developer", "View Contract"),
        ("new_bid", "developer", "View Bid"),
        ("inspection_paid", "developer", "View Inspection"),
        ("property_bought", "developer", "See Transaction"),
        ("inspection_rescheduled", "buyer", "View Inspection"),
        ("payment_confirmed", "buyer", "View Transaction"),
        ("handover_documents_uploaded", "buyer", "View Documents"),
        ("handover_scheduled", "buyer", "View Handover"),
    ])
    def test_labels(self, type_, role, label):
        assert get_notification_action_label(Notification(type=type_), role) == label

    def test_label_depends_on_type_only(self):
        # Label exists even when the route needs a key that is missing
        assert get_notification_action_label(note("property_verified"), "developer") == "View Contract"

    def test_routes_without_labels(self):
        assert get_notification_action_label(Notification(type="new_lead"), "developer") is None
        assert get_notification_action_label(Notification(type="deposit_cash"), "buyer") is None
        assert get_notification_action_label(Notification(type="new_lead"), None) is None

    def test_resolve_drops_label_without_route(self):
        decision = resolve_notification(note("property_verified", contract_id="c1"), "developer")

        assert decision.route is None
        assert decision.action_label is None

    def test_resolve_pairs_route_and_label(self):
        decision = resolve_notification(note("new_lead", promotion_id="p1"), "creator")

        assert decision.route == "/dashboard/creator/my-promotions/p1"
        assert decision.action_label == "View Analytics"
