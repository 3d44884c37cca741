# inventory_report/core/layout.py

from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from inventory_report.config import COMPANY_ADDRESS, COMPANY_NAME, REPORT_TITLE, SHEET_NAME
from inventory_report.core.utils import format_date, to_number
from inventory_report.models import LineItem, Totals

# Column kinds
TEXT = "text"
DESCRIPTION = "description"
DATE = "date"
UNIT = "unit"
QTY = "qty"
MONEY = "money"

NUMERIC_KINDS = (QTY, MONEY)

# Which Totals field feeds the totals row for a given column key
TOTALS_FIELDS = {
    "invoice_qty": "total_invoice_qty",
    "rcvd_qty": "total_rcvd_qty",
    "line_total": "total_value",
}


class ColumnSpec(BaseModel):
    """
    One column of the report table, shared by the PDF and Excel renderers.
    """
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="LineItem attribute (or property) the column reads.")
    label: str = Field(..., description="Header label; may contain a line break.")
    kind: str = Field(TEXT, description="text, description, date, unit, qty or money.")
    pdf_width: float = Field(..., description="Column width on the PDF page in mm.")
    xlsx_width: float = Field(..., description="Excel column width in characters.")
    align: str = Field("center", description="Horizontal alignment of body cells.")
    wrap: bool = Field(False, description="Wrap long text inside the cell.")

    @property
    def is_numeric(self) -> bool:
        return self.kind in NUMERIC_KINDS

    def cell_value(self, item: LineItem) -> Any:
        """
        Raw value of this column for one item: floats for numeric columns,
        display strings for everything else.
        """
        if self.kind == DESCRIPTION:
            description = item.item_description or ""
            details = item.detail_line
            return f"{description}\n{details}" if details else description
        value = getattr(item, self.key)
        if self.kind == DATE:
            return format_date(value)
        if self.kind == UNIT:
            return getattr(value, "value", value) or ""
        if self.is_numeric:
            return to_number(value)
        return "" if value is None else str(value)

    def total_value(self, totals: Totals) -> Optional[float]:
        field_name = TOTALS_FIELDS.get(self.key)
        if field_name is None:
            return None
        return getattr(totals, field_name)


# Color and H.S code folded into the description cell
COMBINED_COLUMNS: Tuple[ColumnSpec, ...] = (
    ColumnSpec(key="fabric_code", label="Fabric Code", pdf_width=24, xlsx_width=15),
    ColumnSpec(key="item_description", label="Item Description", kind=DESCRIPTION,
               pdf_width=52, xlsx_width=35, align="left", wrap=True),
    ColumnSpec(key="rcvd_date", label="Rcvd Date", kind=DATE, pdf_width=20, xlsx_width=12),
    ColumnSpec(key="challan_no", label="Challan No", pdf_width=22, xlsx_width=14),
    ColumnSpec(key="pi_number", label="Pi Number", pdf_width=22, xlsx_width=14),
    ColumnSpec(key="unit", label="Unit", kind=UNIT, pdf_width=13, xlsx_width=8),
    ColumnSpec(key="invoice_qty", label="Invoice Qty", kind=QTY, pdf_width=22, xlsx_width=13, align="right"),
    ColumnSpec(key="rcvd_qty", label="Rcvd Qty", kind=QTY, pdf_width=22, xlsx_width=13, align="right"),
    ColumnSpec(key="unit_price", label="Unit Price $", kind=MONEY, pdf_width=20, xlsx_width=13, align="right"),
    ColumnSpec(key="line_total", label="Total Value", kind=MONEY, pdf_width=24, xlsx_width=15, align="right"),
    ColumnSpec(key="appstreme_no", label="Appstreme No.\n(Receipt no)", pdf_width=28, xlsx_width=18,
               align="left", wrap=True),
)

# Fully split variant: color and H.S code get their own columns
SPLIT_COLUMNS: Tuple[ColumnSpec, ...] = (
    ColumnSpec(key="fabric_code", label="Fabric Code", pdf_width=20, xlsx_width=15),
    ColumnSpec(key="item_description", label="Item Description", pdf_width=40, xlsx_width=25,
               align="left", wrap=True),
    ColumnSpec(key="color", label="Color", pdf_width=18, xlsx_width=10),
    ColumnSpec(key="hs_code", label="HS Code", pdf_width=18, xlsx_width=10),
    ColumnSpec(key="rcvd_date", label="Rcvd Date", kind=DATE, pdf_width=18, xlsx_width=12),
    ColumnSpec(key="challan_no", label="Challan No", pdf_width=20, xlsx_width=12),
    ColumnSpec(key="pi_number", label="Pi Number", pdf_width=20, xlsx_width=12),
    ColumnSpec(key="unit", label="Unit", kind=UNIT, pdf_width=12, xlsx_width=6),
    ColumnSpec(key="invoice_qty", label="Invoice Qty", kind=QTY, pdf_width=20, xlsx_width=10, align="right"),
    ColumnSpec(key="rcvd_qty", label="Rcvd Qty", kind=QTY, pdf_width=20, xlsx_width=10, align="right"),
    ColumnSpec(key="unit_price", label="Unit Price $", kind=MONEY, pdf_width=18, xlsx_width=10, align="right"),
    ColumnSpec(key="line_total", label="Total Value", kind=MONEY, pdf_width=22, xlsx_width=12, align="right"),
    ColumnSpec(key="appstreme_no", label="Appstreme No", pdf_width=23, xlsx_width=15, align="left", wrap=True),
)

COLUMN_PRESETS = {
    "combined": COMBINED_COLUMNS,
    "split": SPLIT_COLUMNS,
}


class LayoutTierSpec(BaseModel):
    """One step of the row-count -> (font size, row height) table."""
    model_config = ConfigDict(frozen=True)

    name: str
    max_rows: Optional[int] = Field(None, description="Inclusive upper bound; None for the last tier.")
    font_size: float
    cell_padding: float
    min_row_floor: Optional[float] = Field(
        None, description="Lower bound on the row height; None spreads the whole table budget over the rows."
    )


class LayoutTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    font_size: float
    cell_padding: float
    min_row_height: float


DEFAULT_TIERS: Tuple[LayoutTierSpec, ...] = (
    LayoutTierSpec(name="few", max_rows=5, font_size=10, cell_padding=2.0, min_row_floor=None),
    LayoutTierSpec(name="medium", max_rows=15, font_size=9, cell_padding=1.75, min_row_floor=8),
    LayoutTierSpec(name="compact", max_rows=25, font_size=8, cell_padding=1.5, min_row_floor=6),
    LayoutTierSpec(name="minimal", max_rows=None, font_size=7, cell_padding=1.0, min_row_floor=5),
)

MIN_FONT_SIZE = 5
MIN_ROW_HEIGHT = 5


def select_layout_tier(
    row_count: int,
    max_table_height: float,
    tiers: Tuple[LayoutTierSpec, ...] = DEFAULT_TIERS,
) -> LayoutTier:
    """
    Picks the font size and minimum row height for a table of `row_count` rows
    (data rows plus the totals row) that has to fit in `max_table_height` mm.

    Fewer rows get a larger font and taller rows that share out the available
    height; more rows shrink down to the floor of their tier. Rows never shrink
    below MIN_ROW_HEIGHT, so very long tables overflow onto another page rather
    than being clipped.
    """
    rows = max(1, int(row_count))
    tier_spec = tiers[-1]
    for candidate in tiers:
        if candidate.max_rows is None or rows <= candidate.max_rows:
            tier_spec = candidate
            break

    share = max_table_height / rows
    row_height = share if tier_spec.min_row_floor is None else max(tier_spec.min_row_floor, share)

    return LayoutTier(
        name=tier_spec.name,
        font_size=max(MIN_FONT_SIZE, tier_spec.font_size),
        cell_padding=tier_spec.cell_padding,
        min_row_height=max(MIN_ROW_HEIGHT, row_height),
    )


class PdfGeometry(BaseModel):
    """
    Fixed anchor points of the landscape A4 page, in millimetres from the top-left corner.
    """
    model_config = ConfigDict(frozen=True)

    page_width: float = 297.0
    page_height: float = 210.0

    header_y: float = 12
    address_y: float = 18
    title_y: float = 25
    company_font_size: float = 18
    address_font_size: float = 8
    title_font_size: float = 12

    info_block_y: float = 32
    line_height: float = 5
    info_block_lines: int = 4
    info_font_size: float = 8
    left_x: float = 14
    left_value_offset: float = 32
    right_x_from_edge: float = 75
    right_value_offset: float = 28

    table_gap: float = 4
    side_margin: float = 14
    top_margin: float = 10
    grid_line_width: float = 0.3
    header_line_width: float = 0.4

    signature_height: float = 20
    bottom_margin: float = 8
    signature_gap: float = 35
    signature_clearance: float = 10
    signature_line_length: float = 50
    signature_edge_x: float = 20
    signature_label_x: float = 30
    signature_right_label_x_from_edge: float = 65
    signature_label_drop: float = 4
    signature_font_size: float = 8
    signature_line_width: float = 0.3

    @property
    def table_start_y(self) -> float:
        return self.info_block_y + self.line_height * self.info_block_lines + self.table_gap

    @property
    def signature_y(self) -> float:
        return self.page_height - self.signature_height - self.bottom_margin

    @property
    def max_table_height(self) -> float:
        return self.signature_y - self.table_start_y - self.signature_gap

    @property
    def signature_limit(self) -> float:
        """Lowest point the table may reach before the signatures move to a new page."""
        return self.signature_y - self.signature_clearance

    @property
    def right_x(self) -> float:
        return self.page_width - self.right_x_from_edge


class ReportLayoutConfig(BaseModel):
    """
    Everything that differs between report variants: labels, column set and spacing.
    """
    company_name: str = COMPANY_NAME
    company_address: str = COMPANY_ADDRESS
    report_title: str = REPORT_TITLE
    sheet_name: str = SHEET_NAME

    pdf_columns: Tuple[ColumnSpec, ...] = COMBINED_COLUMNS
    excel_columns: Tuple[ColumnSpec, ...] = COMBINED_COLUMNS
    geometry: PdfGeometry = Field(default_factory=PdfGeometry)
    tiers: Tuple[LayoutTierSpec, ...] = DEFAULT_TIERS

    left_info_labels: Tuple[str, ...] = (
        "Buyer Name :", "Supplier Name:", "File No :", "Invoice No :", "L/C Number :",
    )
    right_info_labels: Tuple[str, ...] = ("Invoice Date:", "Billing Date:")
    pdf_totals_label: str = "TOTAL:"
    excel_totals_label: str = "TOTAL:"
    excel_totals_unit: str = "YDS"
    signature_labels: Tuple[str, str] = ("Prepared By", "Store In-Charge")
    signature_spacer_rows: int = 3
    signature_span: int = 2

    @classmethod
    def with_preset(cls, preset: str, **overrides: Any) -> "ReportLayoutConfig":
        """Builds a config that uses the named column preset ('combined' or 'split') for both outputs."""
        if preset not in COLUMN_PRESETS:
            raise ValueError(f"Unknown column preset '{preset}'. Expected one of: {', '.join(COLUMN_PRESETS)}")
        columns = COLUMN_PRESETS[preset]
        return cls(pdf_columns=columns, excel_columns=columns, **overrides)


def header_values(header: Any) -> Tuple[List[str], List[str]]:
    """Info-block values in label order: (left column, right column)."""
    left = [
        header.buyer_name or "",
        header.supplier_name or "",
        header.file_no or "",
        header.invoice_no or "",
        header.lc_number or "",
    ]
    right = [format_date(header.invoice_date), format_date(header.billing_date)]
    return left, right
