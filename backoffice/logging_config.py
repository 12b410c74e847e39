# backoffice/logging_config.py
import json
import logging
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from fastapi import Request

logger = logging.getLogger("backoffice")

CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _file_handler(path: Path, level: int) -> RotatingFileHandler:
    fh = RotatingFileHandler(path, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    fh.setFormatter(JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    fh.setLevel(level)
    return fh


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configura el logger 'backoffice'.
    Consola siempre; si se indica log_dir se agregan app.log y errors.log en JSON.
    Es idempotente: si ya tiene handlers no vuelve a agregarlos.
    """
    numeric_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    logger.setLevel(numeric_level)
    if logger.handlers:
        return

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_dir:
        logs_path = Path(log_dir)
        logs_path.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_file_handler(logs_path / "app.log", logging.INFO))
        logger.addHandler(_file_handler(logs_path / "errors.log", logging.ERROR))
        # Las ventas también van a su propio archivo
        logging.getLogger("backoffice.sales").addHandler(
            _file_handler(logs_path / "sales.log", logging.INFO)
        )


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response
