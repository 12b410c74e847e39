# backoffice/routers/__init__.py

# Esto expone los módulos para que "from backoffice.routers import sales" funcione
from . import auth
from . import clients
from . import products
from . import services
from . import providers
from . import sales
from . import users
from . import changes
from . import reports
from . import dashboard
