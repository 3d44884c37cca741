"""
Layout tier, geometry and column preset tests.
"""
import pytest

from inventory_report.core.layout import (
    COMBINED_COLUMNS,
    DEFAULT_TIERS,
    SPLIT_COLUMNS,
    PdfGeometry,
    ReportLayoutConfig,
    select_layout_tier,
)
from inventory_report.models import LineItem, Totals

GEOMETRY = PdfGeometry()
BUDGET = GEOMETRY.max_table_height


# ===================== GEOMETRY =====================


def test_geometry_anchor_points():
    assert GEOMETRY.table_start_y == 56
    assert GEOMETRY.signature_y == 182
    assert GEOMETRY.max_table_height == 91
    assert GEOMETRY.signature_limit == 172
    assert GEOMETRY.right_x == 222


# ===================== TIERS =====================


def test_few_rows_tier_spreads_the_budget():
    tier = select_layout_tier(5, BUDGET)
    assert tier.name == "few"
    assert tier.font_size == 10
    assert tier.min_row_height == pytest.approx(BUDGET / 5)


def test_many_rows_tier():
    tier = select_layout_tier(30, BUDGET)
    assert tier.name == "minimal"
    assert tier.font_size == 7
    assert tier.min_row_height == 5


@pytest.mark.parametrize(
    "rows, expected",
    [(1, "few"), (5, "few"), (6, "medium"), (15, "medium"), (16, "compact"), (25, "compact"), (26, "minimal"), (500, "minimal")],
)
def test_tier_thresholds(rows, expected):
    assert select_layout_tier(rows, BUDGET).name == expected


@pytest.mark.parametrize("boundary", [5, 15, 25])
def test_row_height_drops_across_each_boundary(boundary):
    before = select_layout_tier(boundary, BUDGET)
    after = select_layout_tier(boundary + 1, BUDGET)
    assert after.min_row_height < before.min_row_height
    assert after.font_size < before.font_size


def test_tiers_are_monotonic():
    previous = select_layout_tier(1, BUDGET)
    for rows in range(2, 80):
        tier = select_layout_tier(rows, BUDGET)
        assert tier.font_size <= previous.font_size
        assert tier.min_row_height <= previous.min_row_height
        previous = tier


def test_tier_floors_are_respected():
    for rows in range(1, 200):
        tier = select_layout_tier(rows, BUDGET)
        assert tier.min_row_height >= 5
        assert tier.font_size >= 5


def test_zero_rows_treated_as_one():
    assert select_layout_tier(0, BUDGET).min_row_height == pytest.approx(BUDGET)


def test_tier_table_is_ordered():
    bounds = [tier.max_rows for tier in DEFAULT_TIERS[:-1]]
    assert bounds == sorted(bounds)
    assert DEFAULT_TIERS[-1].max_rows is None


# ===================== COLUMNS =====================


def test_combined_preset_labels():
    assert [c.label for c in COMBINED_COLUMNS] == [
        "Fabric Code",
        "Item Description",
        "Rcvd Date",
        "Challan No",
        "Pi Number",
        "Unit",
        "Invoice Qty",
        "Rcvd Qty",
        "Unit Price $",
        "Total Value",
        "Appstreme No.\n(Receipt no)",
    ]


def test_split_preset_has_color_and_hs_columns():
    keys = [c.key for c in SPLIT_COLUMNS]
    assert len(keys) == 13
    assert "color" in keys and "hs_code" in keys


@pytest.mark.parametrize("columns", [COMBINED_COLUMNS, SPLIT_COLUMNS])
def test_presets_fit_the_page(columns):
    usable = GEOMETRY.page_width - 2 * GEOMETRY.side_margin
    assert sum(c.pdf_width for c in columns) <= usable


def test_description_folds_details():
    description = COMBINED_COLUMNS[1]
    item = LineItem(item_description="Denim", color="Blue", hs_code="5209")
    assert description.cell_value(item) == "Denim\nColor: Blue, H.S Code: 5209"
    assert description.cell_value(LineItem(item_description="Denim")) == "Denim"


def test_split_description_does_not_fold_details():
    description = SPLIT_COLUMNS[1]
    item = LineItem(item_description="Denim", color="Blue")
    assert description.cell_value(item) == "Denim"


def test_cell_values_by_kind():
    item = LineItem(rcvd_date="2024-03-01", unit="PCS", invoice_qty="4", unit_price=1.5)
    by_key = {c.key: c for c in COMBINED_COLUMNS}
    assert by_key["rcvd_date"].cell_value(item) == "01-03-2024"
    assert by_key["unit"].cell_value(item) == "PCS"
    assert by_key["invoice_qty"].cell_value(item) == 4.0
    assert by_key["line_total"].cell_value(item) == 6.0
    assert by_key["fabric_code"].cell_value(item) == ""


def test_total_values():
    totals = Totals(total_invoice_qty=1, total_rcvd_qty=2, total_value=3)
    by_key = {c.key: c for c in COMBINED_COLUMNS}
    assert by_key["invoice_qty"].total_value(totals) == 1
    assert by_key["rcvd_qty"].total_value(totals) == 2
    assert by_key["line_total"].total_value(totals) == 3
    assert by_key["unit_price"].total_value(totals) is None


# ===================== CONFIG =====================


def test_default_config_uses_combined_columns():
    config = ReportLayoutConfig()
    assert config.pdf_columns == COMBINED_COLUMNS
    assert config.excel_columns == COMBINED_COLUMNS
    assert config.sheet_name == "Inventory Report"


def test_with_preset():
    config = ReportLayoutConfig.with_preset("split", company_name="Other Mill")
    assert config.excel_columns == SPLIT_COLUMNS
    assert config.company_name == "Other Mill"


def test_with_unknown_preset():
    with pytest.raises(ValueError, match="Unknown column preset"):
        ReportLayoutConfig.with_preset("wide")
