from decimal import Decimal

from backoffice.schemas.sales import LineItem
from backoffice.utils.totals import compute_sale_total, money, parse_line_items, subtotal_from_total


def item(id, cantidad, costo):
    return LineItem(id=id, cantidad=cantidad, costo=Decimal(costo))


class TestComputeSaleTotal:
    def test_applies_tax_over_all_lines(self):
        subtotal, total = compute_sale_total([item(1, 2, "50")], [item(7, 1, "10")], 15)

        assert subtotal == Decimal("110.00")
        assert total == Decimal("126.50")

    def test_no_lines_is_zero(self):
        assert compute_sale_total([], [], 12) == (Decimal("0.00"), Decimal("0.00"))

    def test_half_up_rounding(self):
        _, total = compute_sale_total([], [item(1, 1, "0.50")], 15)

        assert total == Decimal("0.58")

    def test_float_tax_does_not_drift(self):
        _, total = compute_sale_total([item(1, 3, "0.10")], [], 0.1)

        assert total == Decimal("0.30")


class TestInvoiceHelpers:
    def test_subtotal_from_total(self):
        assert subtotal_from_total(126.5, 15) == Decimal("110.00")
        assert subtotal_from_total("36.40", "12") == Decimal("32.50")

    def test_money_handles_empty_values(self):
        assert money(None) == Decimal("0.00")
        assert money("") == Decimal("0.00")
        assert money(2.675) == Decimal("2.68")


class TestParseLineItems:
    def test_list_of_dicts(self):
        items = parse_line_items([{"id": 1, "cantidad": 2, "costo": 5, "nombre": "Gel"}])

        assert items == [LineItem(id=1, cantidad=2, costo=Decimal("5"), nombre="Gel")]

    def test_json_text(self):
        items = parse_line_items('[{"id": 3, "cantidad": 1, "costo": "9.90"}]')

        assert len(items) == 1
        assert items[0].costo == Decimal("9.90")

    def test_malformed_text_is_empty(self):
        assert parse_line_items("{no es json") == []
        assert parse_line_items(b"[") == []
        assert parse_line_items(None) == []
        assert parse_line_items('{"id": 1}') == []

    def test_invalid_entries_are_skipped(self):
        raw = [{"id": 1, "cantidad": 0, "costo": 5}, "basura", {"id": 2, "cantidad": 1, "costo": 4}]

        assert [i.id for i in parse_line_items(raw)] == [2]
