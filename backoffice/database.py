# backoffice/database.py
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Union

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Executable

logger = logging.getLogger("backoffice.database")

# ESTA es la Base que todos los modelos deben usar
Base = declarative_base()

Statement = Union[str, Executable]


def _as_statement(statement: Statement) -> Executable:
    return text(statement) if isinstance(statement, str) else statement


def _engine_options(url: str, pool_size: int, max_overflow: int,
                    pool_timeout: int, query_timeout: int) -> Dict[str, Any]:
    # SQLite en memoria: una sola conexión compartida o cada sesión vería una BD vacía
    if url in ("sqlite://", "sqlite:///:memory:"):
        return {
            "connect_args": {"check_same_thread": False, "timeout": query_timeout},
            "poolclass": StaticPool,
        }

    options: Dict[str, Any] = {
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": pool_timeout,
        "pool_pre_ping": True,
    }
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False, "timeout": query_timeout}
    elif url.startswith("postgresql"):
        options["connect_args"] = {"options": f"-c statement_timeout={query_timeout * 1000}"}
    elif url.startswith("mysql"):
        options["connect_args"] = {"read_timeout": query_timeout, "write_timeout": query_timeout}
    return options


class Database:
    """
    Pool de conexiones de la aplicación.

    Se crea en el arranque (lifespan) y se libera al apagar. Los endpoints lo
    reciben por dependencia (get_db / get_database), nunca como global.
    - session(): sesión ORM, una por petición.
    - execute / fetch_all / fetch_one: una sentencia parametrizada; toma una
      conexión del pool y la devuelve al terminar.
    - transaction(): varias sentencias en una sola transacción sobre la misma conexión.
    """

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 0,
                 pool_timeout: int = 30, query_timeout: int = 30, echo: bool = False):
        self.url = url
        self.engine = create_engine(
            url,
            echo=echo,
            **_engine_options(url, pool_size, max_overflow, pool_timeout, query_timeout),
        )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            query_timeout=settings.db_query_timeout,
            echo=settings.debug,
        )

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        # commit al salir, rollback si algo revienta
        with self.engine.begin() as conn:
            yield conn

    def execute(self, statement: Statement, params: Optional[Dict[str, Any]] = None) -> int:
        with self.transaction() as conn:
            result = conn.execute(_as_statement(statement), params or {})
            return result.rowcount

    def fetch_all(self, statement: Statement, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            result = conn.execute(_as_statement(statement), params or {})
            return [dict(row) for row in result.mappings()]

    def fetch_one(self, statement: Statement, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        rows = self.fetch_all(statement, params)
        return rows[0] if rows else None

    def create_all(self) -> None:
        # Importar los modelos registra las tablas en Base.metadata
        import backoffice.models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        try:
            self.fetch_one("SELECT 1")
            return True
        except Exception:
            logger.exception("La base de datos no responde")
            return False

    def dispose(self) -> None:
        self.engine.dispose()


# --- Dependencias para los endpoints ---

def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
