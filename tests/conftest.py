from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from backoffice.config import Settings
from backoffice.database import Database
from backoffice.main import create_app
from backoffice.models import Client, Permission, Product, Provider, Service, User
from backoffice.security import get_password_hash, token_for_user


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        secret_key="test-secret-key",
        log_level="WARNING",
        log_dir="",
        low_stock_threshold=5,
    )


@pytest.fixture
def database(settings):
    db = Database.from_settings(settings)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def app(settings, database):
    return create_app(settings, database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


# --- USUARIOS ---

def make_user(session, usuario, permisos, password="secret123", **overrides):
    data = {
        "nombre": usuario.capitalize(),
        "apellido": "Prueba",
        "email": f"{usuario}@serenity.test",
        "cedula": f"ced-{usuario}",
        "perfil": "Empleado",
    }
    data.update(overrides)
    user = User(
        usuario=usuario,
        password_hash=get_password_hash(password),
        permisos=[p.value for p in permisos],
        **data,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(settings, user):
    return {"Authorization": f"Bearer {token_for_user(settings, user)}"}


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin", list(Permission), nombre="Ana", apellido="Torres", perfil="Administrador")


@pytest.fixture
def seller(db_session):
    return make_user(db_session, "vendedor", [Permission.INICIO, Permission.VENTAS], nombre="Luis", apellido="Mora")


@pytest.fixture
def viewer(db_session):
    return make_user(db_session, "visitante", [Permission.INICIO])


@pytest.fixture
def admin_headers(settings, admin):
    return auth_headers(settings, admin)


@pytest.fixture
def seller_headers(settings, seller):
    return auth_headers(settings, seller)


@pytest.fixture
def viewer_headers(settings, viewer):
    return auth_headers(settings, viewer)


# --- CATÁLOGO ---

@pytest.fixture
def provider(db_session):
    p = Provider(nombre_empresa="Distribuidora Andina", email="ventas@andina.test")
    db_session.add(p)
    db_session.commit()
    db_session.refresh(p)
    return p


@pytest.fixture
def customer(db_session):
    c = Client(nombre="María", apellido="López", cedula="123", email="maria@correo.test",
               numero="0991234567", locacion="Sangolquí")
    db_session.add(c)
    db_session.commit()
    db_session.refresh(c)
    return c


@pytest.fixture
def product(db_session, provider):
    p = Product(
        nombre_producto="Shampoo Keratina",
        cantidad_producto=10,
        precio_producto=Decimal("50.00"),
        precio_compra=Decimal("30.00"),
        marca_producto="Loreal",
        categoria_producto="CAP",
        proveedor_producto=provider.id,
    )
    db_session.add(p)
    db_session.commit()
    db_session.refresh(p)
    return p


@pytest.fixture
def service(db_session):
    s = Service(nombre="Corte de cabello", descripcion="Corte y peinado",
                coste_total=Decimal("2.00"), costo_servicio=Decimal("10.00"), productos=[])
    db_session.add(s)
    db_session.commit()
    db_session.refresh(s)
    return s


def fetch_product(database, product_id):
    return database.fetch_one("SELECT * FROM products WHERE id = :id", {"id": product_id})


def count_rows(database, table):
    return database.fetch_one(f"SELECT COUNT(*) AS total FROM {table}")["total"]
