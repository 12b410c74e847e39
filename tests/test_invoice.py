import pytest

from backoffice.crud import clients as clients_crud


@pytest.fixture
def sale_id(client, admin_headers, customer, product, service):
    payload = {
        "cedula_cliente": "123",
        "productos": [{"id": product.id, "cantidad": 2, "costo": 50}],
        "servicios": [{"id": service.id, "cantidad": 1, "costo": 10}],
        "iva": 15,
    }
    return client.post("/api/sales/", json=payload, headers=admin_headers).json()["data"]["id"]


class TestInvoice:
    def test_renders_html_without_auth(self, client, sale_id):
        resp = client.get(f"/api/sales/{sale_id}/invoice")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        html = resp.text
        assert "Serenity Hair &amp; Spa" in html
        assert "0601780661001" in html
        assert "María López" in html
        assert "Shampoo Keratina" in html
        assert "Corte de cabello" in html
        # 110.00 + 15% = 126.50 ; subtotal = 126.50 / 1.15 = 110.00
        assert "$126.50" in html
        assert "$110.00" in html
        assert "$16.50" in html
        assert "Gracias por su compra." in html
        assert "window.print()" in html

    def test_missing_sale_is_404_without_client_lookup(self, client, monkeypatch):
        calls = []
        monkeypatch.setattr(clients_crud, "fetch_client_row", lambda *args: calls.append(args))

        resp = client.get("/api/sales/424242/invoice")

        assert resp.status_code == 404
        assert "Venta no encontrada" in resp.text
        assert calls == []

    def test_invalid_id_is_400(self, client):
        resp = client.get("/api/sales/abc/invoice")

        assert resp.status_code == 400
        assert "<h1>ID de venta inválido</h1>" in resp.text

    @pytest.mark.parametrize("raw_id", ["1_0", "%205%20", "%D9%A1", "-1"])
    def test_non_digit_ids_are_400(self, client, sale_id, raw_id):
        resp = client.get(f"/api/sales/{raw_id}/invoice")

        assert resp.status_code == 400
        assert "<h1>ID de venta inválido</h1>" in resp.text

    def test_malformed_line_items_render_placeholders(self, client, database, sale_id):
        database.execute(
            "UPDATE sales SET productos = :bad, servicios = :bad WHERE id = :id",
            {"bad": "{esto no es json", "id": sale_id},
        )

        resp = client.get(f"/api/sales/{sale_id}/invoice")

        assert resp.status_code == 200
        assert "No hay productos en esta venta" in resp.text
        assert "No hay servicios en esta venta" in resp.text

    def test_missing_client_shows_placeholders(self, client, database, sale_id):
        database.execute("DELETE FROM clients WHERE cedula = '123'")

        resp = client.get(f"/api/sales/{sale_id}/invoice")

        assert resp.status_code == 200
        assert "No disponible" in resp.text
        assert "Shampoo Keratina" in resp.text

    def test_unexpected_error_is_500_with_detail(self, client, monkeypatch, sale_id):
        def broken(context):
            raise RuntimeError("plantilla rota")

        monkeypatch.setattr("backoffice.routers.sales.render_invoice_html", broken)

        resp = client.get(f"/api/sales/{sale_id}/invoice")

        assert resp.status_code == 500
        assert "plantilla rota" in resp.text

    def test_pdf_requires_auth_and_returns_pdf(self, client, admin_headers, sale_id):
        assert client.get(f"/api/sales/{sale_id}/invoice.pdf").status_code == 401

        resp = client.get(f"/api/sales/{sale_id}/invoice.pdf", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.content.startswith(b"%PDF")
