"""
Data model and totals tests.
"""
import random
from datetime import date

import pytest
from pydantic import ValidationError

from inventory_report.models import LineItem, ReportHeader, Totals, UnitOfMeasure
from inventory_report.services.report_service import calculate_totals


# ===================== MODELS =====================


def test_line_item_defaults():
    item = LineItem()
    assert item.unit == UnitOfMeasure.YDS
    assert item.invoice_qty == 0
    assert item.rcvd_qty == 0
    assert item.unit_price == 0
    assert item.rcvd_date is None
    assert item.id


def test_line_item_ids_are_unique():
    assert LineItem().id != LineItem().id


def test_non_numeric_quantities_become_zero():
    item = LineItem(invoice_qty="", rcvd_qty="n/a", unit_price=5)
    assert item.invoice_qty == 0
    assert item.rcvd_qty == 0
    assert item.line_total == 0


def test_line_total():
    item = LineItem(invoice_qty=10, unit_price=2.5)
    assert item.line_total == 25.0


def test_unit_is_normalized():
    assert LineItem(unit="kg").unit == UnitOfMeasure.KG
    assert LineItem(unit="").unit == UnitOfMeasure.YDS


def test_unknown_unit_is_rejected():
    with pytest.raises(ValidationError):
        LineItem(unit="LITRE")


@pytest.mark.parametrize(
    "color, hs_code, expected",
    [
        ("Navy", "5209.42", "Color: Navy, H.S Code: 5209.42"),
        ("Navy", "", "Color: Navy"),
        ("", "5209.42", "H.S Code: 5209.42"),
        ("  ", " ", ""),
    ],
)
def test_detail_line(color, hs_code, expected):
    assert LineItem(color=color, hs_code=hs_code).detail_line == expected


def test_header_dates():
    header = ReportHeader(buyer_name="Acme", invoice_date="", billing_date="2024-03-15")
    assert header.invoice_date is None
    assert header.billing_date == date(2024, 3, 15)


def test_header_none_text_becomes_blank():
    header = ReportHeader(buyer_name="Acme", supplier_name=None)
    assert header.supplier_name == ""


# ===================== TOTALS =====================


def test_totals_single_item():
    totals = calculate_totals([LineItem(invoice_qty=10, unit_price=2.5)])
    assert totals.total_value == 25.0
    assert totals.total_invoice_qty == 10.0


def test_totals_sum_every_column(items):
    totals = calculate_totals(items)
    assert totals.total_invoice_qty == pytest.approx(152.5)
    assert totals.total_rcvd_qty == pytest.approx(138.0)
    assert totals.total_value == pytest.approx(380.0)
    assert totals.total_value == pytest.approx(sum(i.invoice_qty * i.unit_price for i in items))


def test_totals_empty_quantity_contributes_zero():
    totals = calculate_totals([LineItem(invoice_qty="", unit_price=5)])
    assert totals.total_value == 0


def test_totals_coerce_unvalidated_items():
    raw = LineItem.model_construct(invoice_qty="x", rcvd_qty="3", unit_price=2)
    totals = calculate_totals([raw])
    assert totals.total_invoice_qty == 0
    assert totals.total_rcvd_qty == 3
    assert totals.total_value == 0


def test_totals_are_order_independent(item_factory):
    batch = [
        item_factory(i, invoice_qty=i * 1.5, rcvd_qty=i, unit_price=0.25 * i)
        for i in range(1, 25)
    ]
    shuffled = list(batch)
    random.Random(7).shuffle(shuffled)

    a, b = calculate_totals(batch), calculate_totals(shuffled)
    assert a.total_invoice_qty == pytest.approx(b.total_invoice_qty)
    assert a.total_rcvd_qty == pytest.approx(b.total_rcvd_qty)
    assert a.total_value == pytest.approx(b.total_value)


def test_totals_empty_collection():
    assert calculate_totals([]) == Totals()


def test_qty_mismatch_flag():
    assert Totals(total_invoice_qty=10, total_rcvd_qty=9).qty_mismatch
    assert not Totals(total_invoice_qty=10, total_rcvd_qty=10).qty_mismatch
