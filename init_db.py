from decimal import Decimal

from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.database import Database
# Importamos TODO desde backoffice.models (el __init__.py registra las tablas)
from backoffice.models import Client, Permission, Product, Provider, Service, User
from backoffice.security import get_password_hash


def seed(db: Session) -> None:
    """Poblado inicial. Solo inserta lo que no existe, se puede correr varias veces."""

    # 1. USUARIOS
    users_to_create = [
        ("admin", "admin123", "Administrador", [p.value for p in Permission],
         {"nombre": "Admin", "apellido": "Serenity", "email": "admin@serenity.ec", "cedula": "0000000001"}),
        ("caja", "caja123", "Cajero", [Permission.INICIO.value, Permission.VENTAS.value, Permission.CLIENTE.value],
         {"nombre": "Caja", "apellido": "Principal", "email": "caja@serenity.ec", "cedula": "0000000002"}),
    ]
    for usuario, password, perfil, permisos, datos in users_to_create:
        if not db.query(User).filter(User.usuario == usuario).first():
            db.add(User(
                usuario=usuario,
                password_hash=get_password_hash(password),
                perfil=perfil,
                permisos=permisos,
                **datos,
            ))
            print(f"✅ Usuario '{usuario}' creado.")
    db.commit()

    # 2. PROVEEDOR
    provider = db.query(Provider).filter(Provider.nombre_empresa == "Distribuidora Belleza Andina").first()
    if not provider:
        provider = Provider(
            nombre_empresa="Distribuidora Belleza Andina",
            email="ventas@bellezaandina.ec",
            numero="022345678",
            web="https://bellezaandina.ec",
        )
        db.add(provider)
        db.commit()
        db.refresh(provider)
        print("✅ Proveedor creado.")

    # 3. PRODUCTOS
    products_data = [
        ("Shampoo Keratina 500ml", 25, "12.50", "7.80", "Loreal", "CAP"),
        ("Tinte Rubio Ceniza", 15, "9.90", "5.20", "Igora", "TIN"),
        ("Crema Hidratante Facial", 8, "18.00", "11.00", "Nivea", "PIE"),
    ]
    for nombre, cantidad, precio, compra, marca, categoria in products_data:
        if not db.query(Product).filter(Product.nombre_producto == nombre).first():
            db.add(Product(
                nombre_producto=nombre,
                cantidad_producto=cantidad,
                precio_producto=Decimal(precio),
                precio_compra=Decimal(compra),
                marca_producto=marca,
                categoria_producto=categoria,
                proveedor_producto=provider.id,
            ))
            print(f"✅ Producto '{nombre}' creado.")
    db.commit()

    # 4. SERVICIOS
    services_data = [
        ("Corte de cabello", "Corte y peinado", "2.00", "10.00"),
        ("Manicure spa", "Limpieza, exfoliación y esmaltado", "3.50", "15.00"),
    ]
    for nombre, descripcion, coste, costo in services_data:
        if not db.query(Service).filter(Service.nombre == nombre).first():
            db.add(Service(
                nombre=nombre,
                descripcion=descripcion,
                coste_total=Decimal(coste),
                costo_servicio=Decimal(costo),
                productos=[],
            ))
            print(f"✅ Servicio '{nombre}' creado.")
    db.commit()

    # 5. CLIENTE DE MOSTRADOR
    if not db.query(Client).filter(Client.cedula == "9999999999").first():
        db.add(Client(nombre="Consumidor", apellido="Final", cedula="9999999999"))
        db.commit()
        print("✅ Cliente 'Consumidor Final' creado.")


def init_db():
    database = Database.from_settings(get_settings())
    print("--- Creando Tablas ---")
    database.create_all()

    print("--- Iniciando Poblado ---")
    db = database.session()
    try:
        seed(db)
    finally:
        db.close()
        database.dispose()
    print("--- Listo ---")


if __name__ == "__main__":
    init_db()
