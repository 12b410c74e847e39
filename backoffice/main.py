import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from backoffice.config import Settings, get_settings
from backoffice.database import Database, get_database
from backoffice.error_handlers import register_error_handlers
from backoffice.logging_config import log_requests, setup_logging
from backoffice.routers import (
    auth, clients, products, services, providers,
    sales, users, changes, reports, dashboard,
)

logger = logging.getLogger("backoffice")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: abre el pool y crea las tablas.
    Shutdown: libera todas las conexiones.
    """
    settings: Settings = app.state.settings
    database = app.state.database

    logger.info("Iniciando %s (%s)...", settings.app_name, settings.environment)
    database.create_all()
    logger.info(
        "Pool de BD listo: pool_size=%s max_overflow=%s pool_timeout=%ss query_timeout=%ss",
        settings.db_pool_size, settings.db_max_overflow,
        settings.db_pool_timeout, settings.db_query_timeout,
    )

    yield

    logger.info("Aplicación apagándose, cerrando conexiones...")
    database.dispose()


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir or None)

    app = FastAPI(
        title=settings.app_name,
        description="Back office: clientes, productos, servicios, proveedores, ventas y reportes",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)

    # 1. CONFIGURACIÓN DE CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    # 2. MANEJO DE ERRORES (sobre JSON estándar)
    register_error_handlers(app)

    # 3. REGISTRO DE ROUTERS
    app.include_router(auth.router, prefix="/api/auth", tags=["🔑 Autenticación"])
    app.include_router(clients.router, prefix="/api/clients", tags=["👥 Clientes"])
    app.include_router(products.router, prefix="/api/products", tags=["📦 Productos"])
    app.include_router(services.router, prefix="/api/services", tags=["💇 Servicios"])
    app.include_router(providers.router, prefix="/api/providers", tags=["🚚 Proveedores"])
    app.include_router(sales.router, prefix="/api/sales", tags=["🛒 Ventas"])
    app.include_router(users.router, prefix="/api/users", tags=["👤 Usuarios"])
    app.include_router(changes.router, prefix="/api/changes", tags=["📝 Bitácora de cambios"])
    app.include_router(reports.router, prefix="/api/reports", tags=["📊 Reportes"])
    app.include_router(dashboard.router, prefix="/api/dashboard", tags=["🏠 Dashboard"])

    @app.get("/health", tags=["⚙️ Sistema"])
    def health(database: Database = Depends(get_database)):
        if not database.ping():
            raise HTTPException(status_code=503, detail="Base de datos no disponible")
        return {"success": True, "message": "OK", "data": {"database": True}}

    return app


app = create_app()
