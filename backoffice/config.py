# backoffice/config.py
from functools import lru_cache
from typing import List

from fastapi import Request
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Core ---
    app_name: str = "Serenity Back Office"
    environment: str = "development"
    debug: bool = False

    # --- Base de datos ---
    # Cambia la URL si usas PostgreSQL o MySQL
    database_url: str = "sqlite:///./backoffice.db"
    db_pool_size: int = Field(10, ge=1)
    db_max_overflow: int = Field(0, ge=0)
    db_pool_timeout: int = Field(30, ge=1)    # segundos esperando conexión libre
    db_query_timeout: int = Field(30, ge=1)   # segundos por sentencia

    # --- Seguridad / JWT ---
    secret_key: str = "serenity_backoffice_secret_change_me_in_prod"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24 horas

    # --- CORS ---
    cors_origins: List[str] = ["http://localhost:4200"]

    # --- Logging ---
    log_level: str = "INFO"
    log_dir: str = ""  # vacío = solo consola

    # --- Negocio ---
    low_stock_threshold: int = 10

    # --- Membrete de la factura ---
    store_name: str = "Serenity Hair & Spa"
    store_address: str = "Sangolquí, Ecuador"
    store_phone: str = "0986247531"
    store_ruc: str = "0601780661001"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_app_settings(request: Request) -> Settings:
    """Dependencia: la configuración con la que se creó la app."""
    return request.app.state.settings
