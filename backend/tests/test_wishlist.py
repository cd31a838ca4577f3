# Overview: Pytest coverage for wishlist idempotency and the wishlist API.

import pytest

from sutradhar.extensions import db
from sutradhar.models import WishlistEntry
from sutradhar.services import wishlist_service
from sutradhar.services.wishlist_service import WishlistError
from conftest import make_product


class TestWishlistService:
    def test_add_twice_keeps_one_entry(self, buyer, saree):
        assert wishlist_service.add_to_wishlist(buyer.id, saree.id) is True
        assert wishlist_service.add_to_wishlist(buyer.id, saree.id) is True

        assert db.session.query(WishlistEntry).filter_by(user_id=buyer.id).count() == 1

    def test_is_in_wishlist(self, buyer, saree, vase):
        wishlist_service.add_to_wishlist(buyer.id, saree.id)
        wishlist = wishlist_service.fetch_wishlist(buyer.id)
        assert wishlist.is_in_wishlist(saree.id)
        assert not wishlist.is_in_wishlist(vase.id)

    def test_remove(self, buyer, saree):
        wishlist_service.add_to_wishlist(buyer.id, saree.id)
        assert wishlist_service.remove_from_wishlist(buyer.id, saree.id) is True
        assert wishlist_service.fetch_wishlist(buyer.id).entries == []

    def test_remove_missing_is_fine(self, buyer, saree):
        assert wishlist_service.remove_from_wishlist(buyer.id, saree.id) is True

    def test_unknown_product(self, buyer):
        with pytest.raises(WishlistError):
            wishlist_service.add_to_wishlist(buyer.id, 424242)

    def test_unpublished_product_rejected(self, buyer, weaver):
        draft = make_product(weaver[1], "Unfinished Shawl", 900.0, published=False)
        with pytest.raises(WishlistError):
            wishlist_service.add_to_wishlist(buyer.id, draft.id)
        assert wishlist_service.fetch_wishlist(buyer.id).entries == []

    def test_entries_carry_product_and_shop(self, buyer, saree):
        wishlist_service.add_to_wishlist(buyer.id, saree.id)
        item = wishlist_service.fetch_wishlist(buyer.id).to_dict()["items"][0]
        assert item["product"]["title"] == "Silk Saree"
        assert item["product"]["seller"]["shop_name"] == "Kanchi Looms"

    def test_no_user_is_empty(self, app):
        assert wishlist_service.fetch_wishlist(None).to_dict() == {"items": [], "count": 0}


class TestWishlistRoutes:
    def test_toggle_flow(self, client, buyer_headers, saree):
        added = client.post('/api/buyer/wishlist', json={"product_id": saree.id}, headers=buyer_headers)
        assert added.status_code == 200
        assert added.json["count"] == 1

        again = client.post('/api/buyer/wishlist', json={"product_id": saree.id}, headers=buyer_headers)
        assert again.status_code == 200
        assert again.json["count"] == 1

        contains = client.get(f'/api/buyer/wishlist?product_id={saree.id}', headers=buyer_headers)
        assert contains.json["contains"] is True

        removed = client.delete(f'/api/buyer/wishlist/{saree.id}', headers=buyer_headers)
        assert removed.json["count"] == 0

    def test_unknown_product_is_404(self, client, buyer_headers):
        resp = client.post('/api/buyer/wishlist', json={"product_id": 31337}, headers=buyer_headers)
        assert resp.status_code == 404

    def test_unpublished_product_is_404(self, client, buyer_headers, weaver):
        draft = make_product(weaver[1], "Unfinished Shawl", 900.0, published=False)
        resp = client.post('/api/buyer/wishlist', json={"product_id": draft.id}, headers=buyer_headers)
        assert resp.status_code == 404
        assert client.get('/api/buyer/wishlist', headers=buyer_headers).json["count"] == 0
