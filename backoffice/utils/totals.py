# backoffice/utils/totals.py
import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Tuple

from pydantic import ValidationError

from backoffice.schemas.sales import LineItem

logger = logging.getLogger("backoffice.sales")

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convierte lo que venga de la BD o del JSON (float, str, int, None) a Decimal."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() evita arrastrar el error binario de los float
    return Decimal(str(value))


def money(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def lines_subtotal(items: Iterable[LineItem]) -> Decimal:
    return sum((to_decimal(item.costo) * item.cantidad for item in items), Decimal("0"))


def compute_sale_total(productos: Iterable[LineItem], servicios: Iterable[LineItem],
                       iva: Any) -> Tuple[Decimal, Decimal]:
    """
    subtotal = Σ costo×cantidad (productos + servicios)
    total    = subtotal + subtotal × iva/100, redondeado a centavos (ROUND_HALF_UP)
    """
    subtotal = lines_subtotal(productos) + lines_subtotal(servicios)
    total = subtotal + subtotal * to_decimal(iva) / Decimal("100")
    return money(subtotal), money(total)


def subtotal_from_total(total: Any, iva: Any) -> Decimal:
    """Base imponible a partir del total ya guardado (para la factura)."""
    divisor = Decimal("1") + to_decimal(iva) / Decimal("100")
    return money(to_decimal(total) / divisor)


def parse_line_items(raw: Any) -> List[LineItem]:
    """
    Lee los renglones guardados en la venta. Pueden llegar como lista
    o como texto JSON; un texto corrupto da lista vacía y los renglones
    inválidos se descartan.
    """
    if raw is None:
        return []
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Renglones de venta ilegibles, se ignoran: %r", raw[:80])
            return []
    if not isinstance(raw, list):
        return []

    items = []
    for entry in raw:
        try:
            items.append(LineItem.model_validate(entry))
        except ValidationError:
            logger.warning("Renglón de venta inválido descartado: %r", entry)
    return items
