# Overview: Pytest coverage for multi-seller checkout, points award and failure handling.

"""
Checkout Tests

A cart holding products from two shops must turn into exactly two orders,
clear the cart and award floor(total / 100) points, all in one go. The
sequential mode is checked for its partial-failure reporting.
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from sutradhar.extensions import db
from sutradhar.models import Order, CartLine, PointsLedgerEntry, Profile
from sutradhar.services import cart_service, checkout_service
from sutradhar.services.checkout_service import CheckoutError, PartialCheckoutError
from sutradhar.services.offers_service import OfferError
from sutradhar.validation import ValidationError
from conftest import make_offer


ADDRESS = "12 Temple Street, Kanchipuram"


@pytest.fixture
def two_shop_cart(buyer, saree, vase):
    """Saree (3000) from the weaver, two vases (2 x 1000) from the potter."""
    cart_service.add_to_cart(buyer.id, saree.id, 1)
    cart_service.add_to_cart(buyer.id, vase.id, 2)
    return buyer


def _fail_on_call(monkeypatch, n):
    """Make the n-th seller order insert raise a database error."""
    original = checkout_service._insert_seller_order
    calls = {"count": 0}

    def flaky(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == n:
            raise SQLAlchemyError("simulated write failure")
        return original(*args, **kwargs)

    monkeypatch.setattr(checkout_service, "_insert_seller_order", flaky)


def _points(user_id):
    return db.session.query(Profile).filter_by(user_id=user_id).one().points


class TestPlaceOrder:
    def test_one_order_per_seller(self, two_shop_cart, weaver, potter):
        result = checkout_service.place_order(two_shop_cart.id, ADDRESS)

        assert result["seller_count"] == 2
        orders = db.session.query(Order).filter_by(buyer_id=two_shop_cart.id).all()
        assert len(orders) == 2
        assert {o.seller_id for o in orders} == {weaver[1].id, potter[1].id}

    def test_order_sums_match_cart_pricing(self, two_shop_cart):
        result = checkout_service.place_order(two_shop_cart.id, ADDRESS)
        pricing = result["pricing"]
        orders = result["orders"]

        assert pricing["subtotal"] == pytest.approx(5000.0)
        assert pricing["shipping"] == 200.0
        assert pricing["tax"] == pytest.approx(250.0)
        assert pricing["total"] == pytest.approx(5450.0)

        assert sum(o["subtotal"] for o in orders) == pytest.approx(pricing["subtotal"])
        assert sum(o["shipping"] for o in orders) == pytest.approx(pricing["shipping"])
        assert sum(o["tax"] for o in orders) == pytest.approx(pricing["tax"])
        assert sum(o["total"] for o in orders) == pytest.approx(pricing["total"])

    def test_orders_are_placed_with_address(self, two_shop_cart):
        result = checkout_service.place_order(two_shop_cart.id, f"  {ADDRESS}  ", payment_method="upi")
        for order in result["orders"]:
            assert order["status"] == "placed"
            assert order["payment_method"] == "upi"
            assert order["shipping_address"] == {"address": ADDRESS}

    def test_cart_is_cleared(self, two_shop_cart):
        checkout_service.place_order(two_shop_cart.id, ADDRESS)
        assert cart_service.fetch_cart(two_shop_cart.id).lines == []

    def test_points_awarded_once(self, two_shop_cart):
        result = checkout_service.place_order(two_shop_cart.id, ADDRESS)

        assert result["points_earned"] == 54
        assert _points(two_shop_cart.id) == 54
        entries = db.session.query(PointsLedgerEntry).filter_by(user_id=two_shop_cart.id).all()
        assert len(entries) == 1
        assert entries[0].type == "earn"
        assert entries[0].points == 54
        # Multi-seller checkouts do not link the entry to a single order
        assert entries[0].order_id is None

    def test_single_seller_points_link_to_order(self, buyer, saree):
        cart_service.add_to_cart(buyer.id, saree.id, 1)
        result = checkout_service.place_order(buyer.id, ADDRESS)
        entry = db.session.query(PointsLedgerEntry).filter_by(user_id=buyer.id).one()
        assert entry.order_id == result["orders"][0]["id"]

    def test_promo_discount_is_allocated(self, two_shop_cart):
        make_offer("TEXTILE20", "percent", 20)
        result = checkout_service.place_order(two_shop_cart.id, ADDRESS, promo_code="textile20")

        assert result["pricing"]["discount"] == pytest.approx(1000.0)
        assert sum(o["discount"] for o in result["orders"]) == pytest.approx(1000.0)
        assert result["points_earned"] == 44

    def test_blank_address_rejected(self, two_shop_cart):
        with pytest.raises(ValidationError):
            checkout_service.place_order(two_shop_cart.id, "   ")
        assert db.session.query(Order).count() == 0

    def test_empty_cart_rejected(self, buyer):
        with pytest.raises(ValidationError):
            checkout_service.place_order(buyer.id, ADDRESS)

    def test_bad_promo_writes_nothing(self, two_shop_cart):
        with pytest.raises(OfferError):
            checkout_service.place_order(two_shop_cart.id, ADDRESS, promo_code="NOPE")
        assert db.session.query(Order).count() == 0
        assert len(cart_service.fetch_cart(two_shop_cart.id).lines) == 2


class TestAtomicCheckout:
    def test_failure_rolls_back_everything(self, two_shop_cart, monkeypatch):
        _fail_on_call(monkeypatch, 2)

        with pytest.raises(CheckoutError) as exc:
            checkout_service.place_order(two_shop_cart.id, ADDRESS)

        assert not isinstance(exc.value, PartialCheckoutError)
        assert db.session.query(Order).count() == 0
        assert db.session.query(CartLine).filter_by(user_id=two_shop_cart.id).count() == 2
        assert _points(two_shop_cart.id) == 0
        assert db.session.query(PointsLedgerEntry).count() == 0


class TestSequentialCheckout:
    @pytest.fixture(autouse=True)
    def sequential(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "CHECKOUT_ATOMIC", False)

    def test_success_matches_atomic_outcome(self, two_shop_cart):
        result = checkout_service.place_order(two_shop_cart.id, ADDRESS)
        assert len(result["orders"]) == 2
        assert cart_service.fetch_cart(two_shop_cart.id).lines == []
        assert _points(two_shop_cart.id) == 54

    def test_partial_failure_reports_placed_orders(self, two_shop_cart, monkeypatch):
        _fail_on_call(monkeypatch, 2)

        with pytest.raises(PartialCheckoutError) as exc:
            checkout_service.place_order(two_shop_cart.id, ADDRESS)

        placed = db.session.query(Order).all()
        assert [o.id for o in placed] == exc.value.placed_order_ids
        assert len(placed) == 1
        assert exc.value.failed_seller_id != placed[0].seller_id
        # Cart and points are left for the buyer to retry
        assert db.session.query(CartLine).filter_by(user_id=two_shop_cart.id).count() == 2
        assert _points(two_shop_cart.id) == 0

    def test_first_failure_is_a_plain_checkout_error(self, two_shop_cart, monkeypatch):
        _fail_on_call(monkeypatch, 1)

        with pytest.raises(CheckoutError) as exc:
            checkout_service.place_order(two_shop_cart.id, ADDRESS)

        assert not isinstance(exc.value, PartialCheckoutError)
        assert db.session.query(Order).count() == 0

    def test_cart_clear_failure_is_reported(self, two_shop_cart, monkeypatch):
        monkeypatch.setattr(checkout_service, "clear_cart", lambda *args, **kwargs: False)

        with pytest.raises(PartialCheckoutError) as exc:
            checkout_service.place_order(two_shop_cart.id, ADDRESS)

        placed = db.session.query(Order).order_by(Order.id).all()
        assert len(placed) == 2
        assert sorted(exc.value.placed_order_ids) == [o.id for o in placed]
        assert exc.value.failed_steps == ["clear_cart"]
        # Points still land so the ledger matches the placed orders
        assert _points(two_shop_cart.id) == 54

    def test_points_failure_is_reported(self, two_shop_cart, monkeypatch):
        def broken_record(*args, **kwargs):
            raise SQLAlchemyError("simulated write failure")

        monkeypatch.setattr(checkout_service, "record_points", broken_record)

        with pytest.raises(PartialCheckoutError) as exc:
            checkout_service.place_order(two_shop_cart.id, ADDRESS)

        assert len(exc.value.placed_order_ids) == 2
        assert exc.value.failed_steps == ["award_points"]
        assert db.session.query(CartLine).filter_by(user_id=two_shop_cart.id).count() == 0
        assert db.session.query(PointsLedgerEntry).count() == 0


class TestCheckoutRoutes:
    def test_checkout_returns_orders(self, client, buyer_headers, two_shop_cart):
        resp = client.post('/api/buyer/checkout', json={"shipping_address": ADDRESS}, headers=buyer_headers)
        assert resp.status_code == 201
        assert len(resp.json["orders"]) == 2
        assert resp.json["points_earned"] == 54

        orders = client.get('/api/buyer/orders', headers=buyer_headers)
        assert orders.status_code == 200
        assert orders.json["count"] == 2

    def test_missing_address_is_400(self, client, buyer_headers, two_shop_cart):
        resp = client.post('/api/buyer/checkout', json={}, headers=buyer_headers)
        assert resp.status_code == 400

    def test_write_failure_is_retryable_500(self, client, buyer_headers, two_shop_cart, monkeypatch):
        _fail_on_call(monkeypatch, 1)
        resp = client.post('/api/buyer/checkout', json={"shipping_address": ADDRESS}, headers=buyer_headers)
        assert resp.status_code == 500
        assert resp.json["retryable"] is True

    def test_partial_failure_is_409(self, app, client, buyer_headers, two_shop_cart, monkeypatch):
        monkeypatch.setitem(app.config, "CHECKOUT_ATOMIC", False)
        _fail_on_call(monkeypatch, 2)
        resp = client.post('/api/buyer/checkout', json={"shipping_address": ADDRESS}, headers=buyer_headers)
        assert resp.status_code == 409
        assert resp.json["partial"] is True
        assert len(resp.json["details"]["placed_order_ids"]) == 1
        assert resp.json["details"]["failed_steps"] == ["order"]

    def test_quote_does_not_write(self, client, buyer_headers, two_shop_cart):
        resp = client.get('/api/buyer/checkout', headers=buyer_headers)
        assert resp.status_code == 200
        assert resp.json["total"] == pytest.approx(5450.0)
        assert db.session.query(Order).count() == 0

    def test_promo_endpoint(self, client, buyer_headers, two_shop_cart):
        make_offer("TEXTILE20", "percent", 20)
        resp = client.post('/api/buyer/promo', json={"code": "TEXTILE20"}, headers=buyer_headers)
        assert resp.status_code == 200
        assert resp.json["discount"] == pytest.approx(1000.0)
        assert resp.json["pricing"]["total"] == pytest.approx(4450.0)

    def test_unknown_promo_is_400(self, client, buyer_headers, two_shop_cart):
        resp = client.post('/api/buyer/promo', json={"code": "BOGUS"}, headers=buyer_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "Invalid promo code"

    def test_seller_sees_only_own_orders(self, client, buyer_headers, weaver_headers, two_shop_cart, weaver):
        client.post('/api/buyer/checkout', json={"shipping_address": ADDRESS}, headers=buyer_headers)
        resp = client.get('/api/seller/orders', headers=weaver_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 1
        assert resp.json["items"][0]["seller_id"] == weaver[1].id
