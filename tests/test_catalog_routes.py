class TestCategories:
    def test_admin_creates_category(self, client, factory):
        admin = factory.admin()
        resp = client.post("/api/category/", json={"name": "Bags", "description": "All bags"}, headers=admin["headers"])
        assert resp.status_code == 201
        assert resp.get_json()["data"]["name"] == "Bags"

    def test_duplicate_name_case_insensitive(self, client, factory):
        admin = factory.admin()
        factory.category("Bags")
        resp = client.post("/api/category/", json={"name": "bags"}, headers=admin["headers"])
        assert resp.status_code == 409

    def test_vendor_cannot_create(self, client, factory):
        vendor = factory.vendor()
        assert client.post("/api/category/", json={"name": "Bags"}, headers=vendor["headers"]).status_code == 403

    def test_public_list_with_search(self, client, factory):
        factory.category("Bags")
        factory.category("Belts")
        factory.category("Shoes")

        resp = client.get("/api/category/?searchTerm=b&sort=name-asc")
        body = resp.get_json()
        assert [c["name"] for c in body["data"]] == ["Bags", "Belts"]
        assert body["meta"]["total"] == 2

    def test_non_string_name(self, client, factory):
        admin = factory.admin()
        resp = client.post("/api/category/", json={"name": 12}, headers=admin["headers"])
        assert resp.status_code == 400
        category_id = factory.category("Caps")
        resp = client.patch(f"/api/category/{category_id}", json={"description": 3}, headers=admin["headers"])
        assert resp.status_code == 400

    def test_get_missing(self, client):
        assert client.get("/api/category/999").status_code == 404

    def test_update_and_delete(self, client, factory):
        admin = factory.admin()
        category_id = factory.category("Old")

        resp = client.patch(f"/api/category/{category_id}", json={"name": "New"}, headers=admin["headers"])
        assert resp.get_json()["data"]["name"] == "New"

        assert client.delete(f"/api/category/{category_id}", headers=admin["headers"]).status_code == 200
        assert client.get(f"/api/category/{category_id}").status_code == 404

    def test_delete_in_use(self, client, factory, catalog):
        admin = factory.admin()
        resp = client.delete(f"/api/category/{catalog['category_id']}", headers=admin["headers"])
        assert resp.status_code == 409


class TestShops:
    def test_vendor_creates_shop(self, client, factory):
        vendor = factory.vendor()
        resp = client.post("/api/shop/", json={"name": "Corner shop"}, headers=vendor["headers"])
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["vendorId"] == vendor["profile_id"]
        assert data["isBlacklisted"] is False

    def test_customer_cannot_create_shop(self, client, factory):
        customer = factory.customer()
        assert client.post("/api/shop/", json={"name": "Nope"}, headers=customer["headers"]).status_code == 403

    def test_non_string_fields(self, client, catalog):
        headers = catalog["vendor"]["headers"]
        assert client.post("/api/shop/", json={"name": 99}, headers=headers).status_code == 400
        resp = client.patch(f"/api/shop/{catalog['shop_id']}", json={"description": {"x": 1}}, headers=headers)
        assert resp.status_code == 400

    def test_my_shops(self, client, factory):
        vendor = factory.vendor()
        other = factory.vendor()
        factory.shop(vendor["profile_id"], name="Mine")
        factory.shop(other["profile_id"], name="Theirs")

        resp = client.get("/api/shop/my-shops", headers=vendor["headers"])
        assert [s["name"] for s in resp.get_json()["data"]] == ["Mine"]

    def test_list_filters_blacklisted(self, client, factory):
        vendor = factory.vendor()
        factory.shop(vendor["profile_id"], name="Good")
        factory.shop(vendor["profile_id"], name="Bad", blacklisted=True)

        resp = client.get("/api/shop/?isBlacklisted=true")
        body = resp.get_json()
        assert [s["name"] for s in body["data"]] == ["Bad"]
        assert body["meta"]["total"] == 1

    def test_detail_includes_products(self, client, catalog):
        resp = client.get(f"/api/shop/{catalog['shop_id']}")
        data = resp.get_json()["data"]
        assert [p["id"] for p in data["products"]] == [catalog["product_id"]]
        assert data["vendor"]["id"] == catalog["vendor"]["profile_id"]

    def test_only_owner_updates(self, client, factory, catalog):
        intruder = factory.vendor()
        url = f"/api/shop/{catalog['shop_id']}"
        assert client.patch(url, json={"name": "Mine now"}, headers=intruder["headers"]).status_code == 403

        resp = client.patch(url, json={"name": "Renamed"}, headers=catalog["vendor"]["headers"])
        assert resp.status_code == 200
        assert resp.get_json()["data"]["name"] == "Renamed"

    def test_admin_blacklists(self, client, factory, catalog):
        admin = factory.admin()
        url = f"/api/shop/{catalog['shop_id']}/blacklist"

        assert client.patch(url, json={"isBlacklisted": True}, headers=catalog["vendor"]["headers"]).status_code == 403
        assert client.patch(url, json={}, headers=admin["headers"]).status_code == 400

        resp = client.patch(url, json={"isBlacklisted": True}, headers=admin["headers"])
        assert resp.get_json()["data"]["isBlacklisted"] is True

        resp = client.patch(url, json={"isBlacklisted": "false"}, headers=admin["headers"])
        assert resp.get_json()["data"]["isBlacklisted"] is False


class TestProducts:
    def _payload(self, catalog, **overrides):
        payload = {
            "name": "Sneaker",
            "price": "79.90",
            "inventory": 5,
            "shopId": catalog["shop_id"],
            "categoryId": catalog["category_id"],
            "images": ["a.png", "b.png"],
        }
        payload.update(overrides)
        return payload

    def test_vendor_creates_product(self, client, catalog):
        resp = client.post("/api/product/", json=self._payload(catalog), headers=catalog["vendor"]["headers"])
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["price"] == 79.9
        assert data["images"] == ["a.png", "b.png"]

    def test_cannot_use_foreign_shop(self, client, factory, catalog):
        intruder = factory.vendor()
        resp = client.post("/api/product/", json=self._payload(catalog), headers=intruder["headers"])
        assert resp.status_code == 403

    def test_blacklisted_shop_cannot_add(self, client, factory, catalog):
        shop_id = factory.shop(catalog["vendor"]["profile_id"], blacklisted=True)
        resp = client.post(
            "/api/product/", json=self._payload(catalog, shopId=shop_id), headers=catalog["vendor"]["headers"]
        )
        assert resp.status_code == 400

    def test_unknown_category(self, client, catalog):
        resp = client.post(
            "/api/product/", json=self._payload(catalog, categoryId=999), headers=catalog["vendor"]["headers"]
        )
        assert resp.status_code == 404

    def test_non_string_name(self, client, catalog):
        headers = catalog["vendor"]["headers"]
        resp = client.post("/api/product/", json=self._payload(catalog, name=5), headers=headers)
        assert resp.status_code == 400
        resp = client.patch(f"/api/product/{catalog['product_id']}", json={"description": 1.5}, headers=headers)
        assert resp.status_code == 400

    def test_bad_price(self, client, catalog):
        resp = client.post(
            "/api/product/", json=self._payload(catalog, price="cheap"), headers=catalog["vendor"]["headers"]
        )
        assert resp.status_code == 400

    def test_listing_hides_blacklisted_shops(self, client, factory, catalog):
        hidden_shop = factory.shop(catalog["vendor"]["profile_id"], blacklisted=True)
        factory.product(hidden_shop, catalog["category_id"], name="Hidden")

        resp = client.get("/api/product/")
        body = resp.get_json()
        assert [p["id"] for p in body["data"]] == [catalog["product_id"]]
        assert body["meta"]["total"] == 1

    def test_listing_filters_by_category(self, client, factory, catalog):
        other_category = factory.category("Hats")
        factory.product(catalog["shop_id"], other_category, name="Cap")

        resp = client.get(f"/api/product/?categoryId={other_category}")
        assert [p["name"] for p in resp.get_json()["data"]] == ["Cap"]

    def test_update_and_delete(self, client, catalog):
        url = f"/api/product/{catalog['product_id']}"
        headers = catalog["vendor"]["headers"]

        resp = client.patch(url, json={"price": "42.00", "inventory": 3}, headers=headers)
        assert resp.get_json()["data"]["price"] == 42.0

        assert client.delete(url, headers=headers).status_code == 200
        assert client.get(url).status_code == 404
