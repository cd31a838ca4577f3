# Overview: Pytest coverage for the public marketplace and seller listings.

import pytest

from sutradhar.services import catalog_service
from conftest import make_product


class TestFiltering:
    PRODUCTS = [
        {"title": "Silk Saree", "tags": ["Textiles", "Silk"], "seller": {"shop_name": "Kanchi Looms"}},
        {"title": "Blue Pottery Vase", "tags": ["Pottery"], "seller": {"shop_name": "Khurja Clay Works"}},
        {"title": "Dhokra Elephant", "tags": None, "seller": None},
    ]

    def test_empty_filters_match_everything(self):
        assert catalog_service.filter_products(self.PRODUCTS) == self.PRODUCTS
        assert catalog_service.filter_products(self.PRODUCTS, search="  ", tag="ALL") == self.PRODUCTS

    def test_search_matches_title_or_shop(self):
        assert [p["title"] for p in catalog_service.filter_products(self.PRODUCTS, search="saree")] == ["Silk Saree"]
        assert [p["title"] for p in catalog_service.filter_products(self.PRODUCTS, search="khurja")] == ["Blue Pottery Vase"]

    def test_tag_is_substring_case_insensitive(self):
        matched = catalog_service.filter_products(self.PRODUCTS, tag="textile")
        assert [p["title"] for p in matched] == ["Silk Saree"]

    def test_search_and_tag_combine(self):
        assert catalog_service.filter_products(self.PRODUCTS, search="vase", tag="silk") == []


class TestMarketRoutes:
    def test_lists_published_only(self, client, weaver, saree, vase):
        make_product(weaver[1], "Draft Dupatta", 700.0, published=False)

        resp = client.get('/api/market/products')
        assert resp.status_code == 200
        titles = {p["title"] for p in resp.json["items"]}
        assert titles == {"Silk Saree", "Blue Pottery Vase"}

    def test_listing_carries_seller_summary(self, client, saree):
        item = client.get('/api/market/products').json["items"][0]
        assert item["seller"] == {
            "shop_name": "Kanchi Looms",
            "verified_badge": True,
            "rating": 4.8,
            "region": "Tamil Nadu",
        }

    def test_search_and_tag_params(self, client, saree, stole, vase):
        by_tag = client.get('/api/market/products?tag=Pottery').json
        assert by_tag["count"] == 1

        by_shop = client.get('/api/market/products?search=looms').json
        assert {p["title"] for p in by_shop["items"]} == {"Silk Saree", "Cotton Stole"}

    def test_product_detail(self, client, saree, weaver):
        resp = client.get(f'/api/market/products/{saree.id}')
        assert resp.status_code == 200
        assert resp.json["price"] == 3000.0

        draft = make_product(weaver[1], "Hidden", 10.0, published=False)
        assert client.get(f'/api/market/products/{draft.id}').status_code == 404


class TestSellerRoutes:
    def test_register_shop_once(self, client):
        from conftest import make_user, token_for, auth_headers
        user = make_user("newseller@example.com", role="seller")
        headers = auth_headers(token_for(user))

        first = client.post('/api/seller/shop', json={"shop_name": "Channapatna Toys", "region": "Karnataka"}, headers=headers)
        assert first.status_code == 201
        assert first.json["shop_name"] == "Channapatna Toys"

        second = client.post('/api/seller/shop', json={"shop_name": "Again"}, headers=headers)
        assert second.status_code == 409

    def test_register_shop_requires_name(self, client):
        from conftest import make_user, token_for, auth_headers
        user = make_user("noname@example.com", role="seller")
        resp = client.post('/api/seller/shop', json={"bio": "hi"}, headers=auth_headers(token_for(user)))
        assert resp.status_code == 400

    def test_create_and_update_product(self, client, weaver_headers):
        created = client.post('/api/seller/products', json={
            "title": "Ikat Cushion Cover",
            "price": 850,
            "stock": 12,
            "tags": ["Textiles", "Home Decor"],
            "published": True,
        }, headers=weaver_headers)
        assert created.status_code == 201
        product_id = created.json["id"]

        updated = client.put(f'/api/seller/products/{product_id}', json={"price": "900.50"}, headers=weaver_headers)
        assert updated.status_code == 200
        assert updated.json["price"] == 900.5

        listed = client.get('/api/seller/products', headers=weaver_headers).json
        assert listed["count"] == 1

    @pytest.mark.parametrize("payload", [
        {"price": 100},
        {"title": "X", "price": -5},
        {"title": "X", "price": 10, "stock": -1},
        {"title": "X", "price": 10, "seller_id": 3},
        {"title": "X", "price": 10, "tags": "Textiles"},
    ])
    def test_create_product_validation(self, client, weaver_headers, payload):
        resp = client.post('/api/seller/products', json=payload, headers=weaver_headers)
        assert resp.status_code == 400

    @pytest.mark.parametrize("price", ["nan", "NaN", "inf", "-Infinity", 1e400])
    def test_non_finite_price_rejected(self, client, weaver_headers, saree, price):
        created = client.post('/api/seller/products', json={"title": "Ghost", "price": price, "published": True}, headers=weaver_headers)
        assert created.status_code == 400
        assert "finite" in created.json["error"]

        updated = client.put(f'/api/seller/products/{saree.id}', json={"price": price}, headers=weaver_headers)
        assert updated.status_code == 400

        listed = client.get('/api/seller/products', headers=weaver_headers).json
        assert [p["price"] for p in listed["items"]] == [3000.0]

    def test_cannot_edit_another_shops_product(self, client, weaver_headers, vase):
        resp = client.put(f'/api/seller/products/{vase.id}', json={"price": 1}, headers=weaver_headers)
        assert resp.status_code == 404

    def test_empty_update(self, client, weaver_headers, saree):
        resp = client.put(f'/api/seller/products/{saree.id}', json={}, headers=weaver_headers)
        assert resp.status_code == 400
