from backoffice.models import Permission
from backoffice.security import verify_password
from conftest import auth_headers, make_user


def user_payload(**overrides):
    payload = {
        "nombre": "Sofía",
        "apellido": "Paredes",
        "email": "sofia@serenity.ec",
        "cedula": "1720000002",
        "usuario": "sofia",
        "password": "clave123",
        "perfil": "Estilista",
        "permisos": ["Inicio", "Servicios"],
    }
    payload.update(overrides)
    return payload


class TestUserCrud:
    def test_create_hides_password(self, client, admin_headers, db_session):
        resp = client.post("/api/users/", json=user_payload(), headers=admin_headers)

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["permisos"] == ["Inicio", "Servicios"]
        assert "password" not in data
        assert "password_hash" not in data

    def test_conflicts_are_reported_by_field(self, client, admin_headers, admin):
        cases = [
            ({"usuario": "admin"}, "El nombre de usuario ya está en uso"),
            ({"cedula": admin.cedula, "usuario": "otro", "email": "otro@serenity.ec"},
             "La cédula ya está registrada"),
        ]
        for overrides, message in cases:
            resp = client.post("/api/users/", json=user_payload(**overrides), headers=admin_headers)
            assert resp.status_code == 400
            assert resp.json()["message"] == message

    def test_duplicate_email(self, client, admin_headers):
        client.post("/api/users/", json=user_payload(), headers=admin_headers)

        resp = client.post(
            "/api/users/", json=user_payload(usuario="sofia2", cedula="999"), headers=admin_headers
        )

        assert resp.status_code == 400
        assert resp.json()["message"] == "El email ya está registrado"

    def test_unknown_permission_is_rejected(self, client, admin_headers):
        resp = client.post("/api/users/", json=user_payload(permisos=["Todo"]), headers=admin_headers)

        assert resp.status_code == 400

    def test_update_permissions(self, client, admin_headers, viewer):
        resp = client.put(
            f"/api/users/{viewer.id}", json={"permisos": ["Inicio", "Reportes"]}, headers=admin_headers
        )

        assert resp.json()["data"]["permisos"] == ["Inicio", "Reportes"]

    def test_cannot_delete_self(self, client, admin_headers, admin):
        resp = client.delete(f"/api/users/{admin.id}", headers=admin_headers)

        assert resp.status_code == 403

    def test_delete_is_soft(self, client, admin_headers, viewer):
        resp = client.delete(f"/api/users/{viewer.id}", headers=admin_headers)

        assert resp.json()["data"]["estado"] == "inactivo"

    def test_toggle_status_and_self_guard(self, client, admin_headers, admin, viewer):
        resp = client.patch(f"/api/users/{viewer.id}/toggle-status", headers=admin_headers)
        assert resp.json()["data"]["estado"] == "inactivo"

        assert client.patch(f"/api/users/{admin.id}/toggle-status", headers=admin_headers).status_code == 403

    def test_stats(self, client, admin_headers, seller, viewer):
        client.delete(f"/api/users/{viewer.id}", headers=admin_headers)

        data = client.get("/api/users/stats", headers=admin_headers).json()["data"]

        assert data["total"] == 3
        assert data["activos"] == 2
        assert data["inactivos"] == 1
        assert data["porPerfil"] == {"Administrador": 1, "Empleado": 2}
        assert data["porGenero"] == {"Sin especificar": 3}

    def test_requires_usuarios_permission(self, client, seller_headers):
        assert client.get("/api/users/", headers=seller_headers).status_code == 403


class TestChangePassword:
    def test_own_password_needs_current_one(self, client, seller_headers, seller, db_session):
        wrong = client.patch(
            f"/api/users/{seller.id}/change-password",
            json={"password_actual": "nope", "password_nueva": "nueva123"},
            headers=seller_headers,
        )
        assert wrong.status_code == 400
        assert wrong.json()["message"] == "La contraseña actual es incorrecta"

        ok = client.patch(
            f"/api/users/{seller.id}/change-password",
            json={"password_actual": "secret123", "password_nueva": "nueva123"},
            headers=seller_headers,
        )
        assert ok.status_code == 200
        db_session.refresh(seller)
        assert verify_password("nueva123", seller.password_hash)

    def test_other_user_requires_asignar(self, client, seller_headers, viewer):
        resp = client.patch(
            f"/api/users/{viewer.id}/change-password",
            json={"password_nueva": "nueva123"},
            headers=seller_headers,
        )

        assert resp.status_code == 403

    def test_admin_resets_other_password(self, client, settings, db_session, viewer):
        manager = make_user(db_session, "gerente", [Permission.ASIGNAR])

        resp = client.patch(
            f"/api/users/{viewer.id}/change-password",
            json={"password_nueva": "reset123"},
            headers=auth_headers(settings, manager),
        )

        assert resp.status_code == 200
        login = client.post("/api/auth/login", json={"usuario": "visitante", "password": "reset123"})
        assert login.status_code == 200
