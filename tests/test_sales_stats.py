from datetime import datetime, timedelta

from backoffice.models import Permission
from conftest import auth_headers, make_user


def test_stats_without_sales_are_zero(client, admin_headers):
    resp = client.get("/api/sales/stats", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "total_ventas": 0,
        "cantidad_ventas": 0,
        "ventas_hoy": 0,
        "ventas_mes": 0,
        "promedio_venta": 0,
    }


def test_stats_count_only_active_sales(client, admin_headers, database, customer, service):
    for costo in (10, 20, 30):
        payload = {"cedula_cliente": "123", "servicios": [{"id": service.id, "cantidad": 1, "costo": costo}]}
        client.post("/api/sales/", json=payload, headers=admin_headers)

    # Una anulada y una de hace más de un año
    database.execute("UPDATE sales SET estado = 'inactivo' WHERE total_pagar = 30")
    old = datetime.now() - timedelta(days=400)
    database.execute(
        "UPDATE sales SET fecha_creacion = :fecha WHERE total_pagar = 20",
        {"fecha": old.strftime("%Y-%m-%d %H:%M:%S.%f")},
    )

    data = client.get("/api/sales/stats", headers=admin_headers).json()["data"]

    assert data["cantidad_ventas"] == 2
    assert data["total_ventas"] == 30.0
    assert data["promedio_venta"] == 15.0
    assert data["ventas_hoy"] == 1
    assert data["ventas_mes"] == 1


def test_stats_readable_with_reportes_permission(client, settings, db_session):
    analyst = make_user(db_session, "analista", [Permission.REPORTES])

    resp = client.get("/api/sales/stats", headers=auth_headers(settings, analyst))

    assert resp.status_code == 200
