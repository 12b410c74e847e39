# backoffice/models/__init__.py

# 1. Base de datos (Origen de la clase declarativa)
from backoffice.database import Base

from .common import Status

# 2. Catálogos
from .providers import Provider
from .products import Product
from .services import Service

# 3. Clientes y ventas
from .clients import Client
from .sales import Sale

# 4. Usuarios y bitácora
from .users import User, Permission
from .changes import Change, ChangeType
