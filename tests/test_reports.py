from datetime import date, timedelta

import pytest


@pytest.fixture
def sales(client, admin_headers, customer, product, service):
    payloads = [
        {"cedula_cliente": "123", "productos": [{"id": product.id, "cantidad": 2, "costo": 50}], "iva": 0},
        {"cedula_cliente": "123", "productos": [{"id": product.id, "cantidad": 1, "costo": 50}],
         "servicios": [{"id": service.id, "cantidad": 3, "costo": 10}], "iva": 0},
    ]
    return [client.post("/api/sales/", json=p, headers=admin_headers).json()["data"] for p in payloads]


class TestSalesReports:
    def test_top_products(self, client, admin_headers, sales, product):
        data = client.get("/api/reports/products", headers=admin_headers).json()["data"]

        assert data == [{
            "id": product.id,
            "nombre": "Shampoo Keratina",
            "cantidad_vendida": 3,
            "total_vendido": 150.0,
            "ventas": 2,
        }]

    def test_top_services(self, client, admin_headers, sales):
        data = client.get("/api/reports/services", headers=admin_headers).json()["data"]

        assert data[0]["cantidad_vendida"] == 3
        assert data[0]["total_vendido"] == 30.0

    def test_top_clients(self, client, admin_headers, sales):
        data = client.get("/api/reports/clients", headers=admin_headers).json()["data"]

        assert data[0]["cedula"] == "123"
        assert data[0]["nombre"] == "María López"
        assert data[0]["compras"] == 2
        assert data[0]["total_gastado"] == 180.0

    def test_sales_report_and_by_date(self, client, admin_headers, sales):
        today = date.today().isoformat()

        rows = client.get("/api/reports/sales", headers=admin_headers).json()["data"]
        assert len(rows) == 2
        assert {r["servicios"] for r in rows} == {0, 3}

        daily = client.get(
            f"/api/reports/sales/by-date?fechaInicio={today}&fechaFin={today}", headers=admin_headers
        ).json()["data"]
        assert daily == [{"fecha": today, "cantidad_ventas": 2, "total": 180.0}]

    def test_range_outside_sales_is_empty(self, client, admin_headers, sales):
        old = (date.today() - timedelta(days=30)).isoformat()

        resp = client.get(f"/api/reports/sales?fechaInicio={old}&fechaFin={old}", headers=admin_headers)

        assert resp.json()["data"] == []

    def test_inverted_range_is_rejected(self, client, admin_headers):
        resp = client.get(
            "/api/reports/sales?fechaInicio=2024-05-10&fechaFin=2024-05-01", headers=admin_headers
        )

        assert resp.status_code == 400

    def test_sales_excel(self, client, admin_headers, sales):
        resp = client.get("/api/reports/sales/excel", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.content[:2] == b"PK"

    def test_general(self, client, admin_headers, sales):
        data = client.get("/api/reports/general", headers=admin_headers).json()["data"]

        assert data["total_ventas"] == 2
        assert data["ingresos_totales"] == 180.0
        assert data["total_clientes"] == 1
        # 10 - 3 = 7 unidades, por encima del umbral de 5
        assert data["productos_bajo_stock"] == 0

    def test_requires_reportes_permission(self, client, seller_headers):
        assert client.get("/api/reports/general", headers=seller_headers).status_code == 403


class TestChanges:
    def test_changes_listing_and_filters(self, client, admin_headers, sales):
        body = client.get("/api/changes/", headers=admin_headers).json()
        assert body["pagination"]["total"] == 2

        by_table = client.get("/api/changes/table/ventas", headers=admin_headers).json()["data"]
        assert len(by_table) == 2
        by_user = client.get("/api/changes/user/admin", headers=admin_headers).json()["data"]
        assert len(by_user) == 2
        assert client.get("/api/changes/user/nadie", headers=admin_headers).json()["data"] == []

        first = client.get(f"/api/changes/{by_table[0]['id']}", headers=admin_headers).json()["data"]
        assert first["tabla_afectada"] == "ventas"
        assert client.get("/api/changes/9999", headers=admin_headers).status_code == 404

    def test_change_stats(self, client, admin_headers, sales):
        data = client.get("/api/changes/stats", headers=admin_headers).json()["data"]

        assert data["total_cambios"] == 2
        assert data["cambios_hoy"] == 2
        assert data["por_tipo"] == {"Agregar": 2}
        assert data["por_tabla"] == {"ventas": 2}

    def test_changes_by_date(self, client, admin_headers, sales):
        today = date.today().isoformat()

        resp = client.get(f"/api/reports/changes/by-date?fechaInicio={today}&fechaFin={today}",
                          headers=admin_headers)

        assert len(resp.json()["data"]) == 2

    def test_changes_by_date_needs_both_dates(self, client, admin_headers):
        assert client.get("/api/reports/changes/by-date", headers=admin_headers).status_code == 400


class TestDashboard:
    def test_stats(self, client, viewer_headers, database, sales, product):
        database.execute("UPDATE products SET cantidad_producto = 2 WHERE id = :id", {"id": product.id})

        data = client.get("/api/dashboard/stats", headers=viewer_headers).json()["data"]

        assert data["clientes"] == 1
        assert data["productos"] == 1
        assert data["servicios"] == 1
        assert data["ventas"] == 2
        assert data["ventas_hoy"] == 2
        assert data["ventas_mes"] == 2
        assert data["usuarios"] == 2
        assert data["productos_bajo_stock"] == 1
