from conftest import fetch_product


def product_payload(**overrides):
    payload = {
        "nombre_producto": "Tinte Rubio",
        "cantidad_producto": 4,
        "precio_producto": "9.90",
        "precio_compra": "5.20",
        "marca_producto": "Igora",
        "categoria_producto": "TIN",
    }
    payload.update(overrides)
    return payload


class TestStockHelpers:
    def test_check_stock_reports_availability(self, client, admin_headers, product):
        resp = client.post(
            "/api/products/check-stock",
            json={"productos": [{"id": product.id, "cantidad": 5}]},
            headers=admin_headers,
        )

        assert resp.status_code == 200
        assert resp.json()["data"] == [{
            "id": product.id,
            "nombre": "Shampoo Keratina",
            "cantidadSolicitada": 5,
            "cantidadDisponible": 10,
            "suficiente": True,
        }]

    def test_check_stock_drops_unknown_ids(self, client, seller_headers, product):
        resp = client.post(
            "/api/products/check-stock",
            json={"productos": [{"id": 999, "cantidad": 1}, {"id": product.id, "cantidad": 11}]},
            headers=seller_headers,
        )

        data = resp.json()["data"]
        assert len(data) == 1
        assert data[0]["suficiente"] is False

    def test_add_stock_adds_delta(self, client, admin_headers, database, product):
        resp = client.put(f"/api/products/{product.id}/add-stock", json={"cantidad": 5}, headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["data"]["cantidad_producto"] == 15
        assert fetch_product(database, product.id)["cantidad_producto"] == 15
        entry = database.fetch_one("SELECT descripcion FROM changes WHERE tabla_afectada = 'productos'")
        assert entry["descripcion"] == "Stock añadido al producto: Shampoo Keratina (+5 unidades, total: 15)"

    def test_add_stock_rejects_non_positive(self, client, admin_headers, database, product):
        for cantidad in (0, -3):
            resp = client.put(
                f"/api/products/{product.id}/add-stock", json={"cantidad": cantidad}, headers=admin_headers
            )
            assert resp.status_code == 400
            assert resp.json()["message"] == "ID de producto o cantidad inválidos"

        assert fetch_product(database, product.id)["cantidad_producto"] == 10

    def test_set_quantity_overwrites_even_negative(self, client, admin_headers, database, product):
        resp = client.put(f"/api/products/{product.id}/quantity", json={"cantidad": -2}, headers=admin_headers)

        assert resp.status_code == 200
        assert fetch_product(database, product.id)["cantidad_producto"] == -2

    def test_stock_routes_need_productos_permission(self, client, seller_headers, product):
        resp = client.put(f"/api/products/{product.id}/add-stock", json={"cantidad": 1}, headers=seller_headers)

        assert resp.status_code == 403


class TestProductCrud:
    def test_create_and_read(self, client, admin_headers, provider):
        resp = client.post(
            "/api/products/", json=product_payload(proveedor_producto=provider.id), headers=admin_headers
        )

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["precio_producto"] == 9.9
        assert data["proveedor_nombre"] == "Distribuidora Andina"
        assert data["estado"] == "activo"

        detail = client.get(f"/api/products/{data['id']}", headers=admin_headers).json()["data"]
        assert detail["nombre_producto"] == "Tinte Rubio"

    def test_name_must_be_unique(self, client, admin_headers, product):
        resp = client.post(
            "/api/products/", json=product_payload(nombre_producto="Shampoo Keratina"), headers=admin_headers
        )

        assert resp.status_code == 400
        assert resp.json()["message"] == "Ya existe un producto con ese nombre"

    def test_unknown_provider_is_rejected(self, client, admin_headers):
        resp = client.post("/api/products/", json=product_payload(proveedor_producto=55), headers=admin_headers)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Proveedor no encontrado"

    def test_update_rejects_taken_name(self, client, admin_headers, product):
        other = client.post("/api/products/", json=product_payload(), headers=admin_headers).json()["data"]

        resp = client.put(
            f"/api/products/{other['id']}", json={"nombre_producto": "Shampoo Keratina"}, headers=admin_headers
        )

        assert resp.status_code == 400

    def test_delete_is_soft_and_hides_from_active(self, client, admin_headers, product):
        resp = client.delete(f"/api/products/{product.id}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json()["data"]["estado"] == "inactivo"
        active = client.get("/api/products/active", headers=admin_headers).json()["data"]
        assert active == []

    def test_toggle_status(self, client, admin_headers, product):
        first = client.put(f"/api/products/{product.id}/toggle-status", headers=admin_headers).json()
        second = client.put(f"/api/products/{product.id}/toggle-status", headers=admin_headers).json()

        assert first["data"]["estado"] == "inactivo"
        assert second["data"]["estado"] == "activo"

    def test_list_search_and_pagination(self, client, admin_headers, product):
        client.post("/api/products/", json=product_payload(), headers=admin_headers)

        body = client.get("/api/products/?search=tinte&limit=1", headers=admin_headers).json()

        assert [p["nombre_producto"] for p in body["data"]] == ["Tinte Rubio"]
        assert body["pagination"]["total"] == 1

    def test_limit_above_maximum_is_rejected(self, client, admin_headers):
        resp = client.get("/api/products/?limit=500", headers=admin_headers)

        assert resp.status_code == 400

    def test_missing_product_is_404(self, client, admin_headers):
        resp = client.get("/api/products/321", headers=admin_headers)

        assert resp.status_code == 404
        assert resp.json() == {"success": False, "message": "Producto no encontrado"}

    def test_excel_export(self, client, admin_headers, product):
        resp = client.get("/api/products/export/excel", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        # Un .xlsx es un zip
        assert resp.content[:2] == b"PK"
