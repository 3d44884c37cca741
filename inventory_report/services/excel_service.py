# inventory_report/services/excel_service.py

import datetime
import re
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from inventory_report.core.errors import ExcelRenderError, ReportGenerationError
from inventory_report.core.layout import DESCRIPTION, ColumnSpec, ReportLayoutConfig, header_values
from inventory_report.core.logger import get_logger
from inventory_report.models import LineItem, ReportHeader, Totals
from inventory_report.services.download_service import LocalDownloadService, download_service

logger = get_logger(__name__)

NUMBER_FORMAT = "#,##0.00"
HEADER_FILL = "D9D9D9"

TITLE_FONT_SIZES = (16, 13, 10)
TITLE_ROW_HEIGHTS = (24, 20, 16)
SPACER_ROW_HEIGHT = 8
INFO_ROW_HEIGHT = 16
HEADER_ROW_HEIGHT = 30
DATA_ROW_HEIGHT = 20
DATA_ROW_HEIGHT_WITH_DETAILS = 30
TOTALS_ROW_HEIGHT = 20
SIGNATURE_ROW_HEIGHT = 20

# Workbook metadata and zip entry times are pinned so repeated exports are byte-identical
FIXED_DOC_TIMESTAMP = datetime.datetime(2000, 1, 1)
FIXED_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_MODIFIED_RE = re.compile(rb"(<dcterms:modified\b[^>]*>)[^<]*(</dcterms:modified>)")

THIN = Side(style="thin", color="000000")
FULL_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)
TOP_BORDER = Border(top=THIN)


class RowRole(str, Enum):
    TITLE = "title"
    SPACER = "spacer"
    INFO = "info"
    HEADER = "header"
    DATA = "data"
    TOTALS = "totals"
    SIGNATURE = "signature"


@dataclass
class SheetRow:
    role: RowRole
    values: List[Any] = field(default_factory=list)
    has_details: bool = False


@dataclass
class SheetRows:
    """
    The finished grid plus symbolic lookups, so styling never depends on
    hard-coded row numbers. All indices are 1-based worksheet rows.
    """
    rows: List[SheetRow]

    def rows_for(self, role: RowRole) -> List[int]:
        return [index for index, row in enumerate(self.rows, start=1) if row.role == role]

    def _single(self, role: RowRole) -> int:
        found = self.rows_for(role)
        if len(found) != 1:
            raise ValueError(f"Expected exactly one {role.value} row, found {len(found)}")
        return found[0]

    @property
    def header_row(self) -> int:
        return self._single(RowRole.HEADER)

    @property
    def totals_row(self) -> int:
        return self._single(RowRole.TOTALS)

    @property
    def signature_row(self) -> int:
        return self._single(RowRole.SIGNATURE)

    @property
    def data_rows(self) -> List[int]:
        return self.rows_for(RowRole.DATA)

    @property
    def first_data_row(self) -> int:
        return self.header_row + 1

    def __len__(self) -> int:
        return len(self.rows)


class SheetRowBuilder:
    """Appends rows in display order, remembering what each one is for."""

    def __init__(self, column_count: int):
        self.column_count = column_count
        self._rows: List[SheetRow] = []

    def add(self, role: RowRole, values: Optional[List[Any]] = None, has_details: bool = False) -> int:
        self._rows.append(SheetRow(role=role, values=list(values or []), has_details=has_details))
        return len(self._rows)

    def add_spacers(self, count: int) -> None:
        for _ in range(count):
            self.add(RowRole.SPACER)

    def blank(self) -> List[Any]:
        return [None] * self.column_count

    def build(self) -> SheetRows:
        return SheetRows(rows=list(self._rows))


def normalize_xlsx_archive(content: bytes) -> bytes:
    """
    Rewrites a saved workbook so it carries no wall-clock time: every zip entry
    gets FIXED_ZIP_DATE_TIME and docProps/core.xml gets FIXED_DOC_TIMESTAMP as
    its modified date. Entry order and compression are kept.
    """
    pinned = FIXED_DOC_TIMESTAMP.strftime("%Y-%m-%dT%H:%M:%SZ").encode("ascii")
    output = BytesIO()
    with zipfile.ZipFile(BytesIO(content)) as source, zipfile.ZipFile(output, "w") as target:
        for info in source.infolist():
            data = source.read(info.filename)
            if info.filename == "docProps/core.xml":
                data = _MODIFIED_RE.sub(lambda m: m.group(1) + pinned + m.group(2), data)
            entry = zipfile.ZipInfo(info.filename, date_time=FIXED_ZIP_DATE_TIME)
            entry.compress_type = info.compress_type
            entry.external_attr = info.external_attr
            target.writestr(entry, data)
    return output.getvalue()


@dataclass
class RenderedWorkbook:
    content: bytes
    rows: SheetRows


class ExcelReportRenderer:
    """
    Builds the one-sheet workbook: title rows, info block, item table,
    totals row and signature row, styled by row role.
    """
    def __init__(self, config: Optional[ReportLayoutConfig] = None):
        self.config = config or ReportLayoutConfig()

    @property
    def columns(self) -> Sequence[ColumnSpec]:
        return self.config.excel_columns

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def right_label_column(self) -> int:
        """0-based column holding the right-hand info labels."""
        return self.column_count - 3

    @property
    def right_signature_column(self) -> int:
        """1-based first column of the right signature label."""
        return self.column_count - self.config.signature_span + 1

    @property
    def folds_details(self) -> bool:
        """True when color/H.S code are printed inside the description cell."""
        return any(column.kind == DESCRIPTION for column in self.columns)

    def _column_index(self, key: str) -> Optional[int]:
        for index, column in enumerate(self.columns):
            if column.key == key:
                return index
        return None

    # --- grid construction ---

    def build_rows(self, header: ReportHeader, items: Sequence[LineItem], totals: Totals) -> SheetRows:
        cfg = self.config
        builder = SheetRowBuilder(self.column_count)

        for title in (cfg.company_name, cfg.company_address, cfg.report_title):
            builder.add(RowRole.TITLE, [title])
        builder.add_spacers(1)

        left_values, right_values = header_values(header)
        for index, (label, value) in enumerate(zip(cfg.left_info_labels, left_values)):
            values = builder.blank()
            values[0], values[1] = label, value
            if index < len(cfg.right_info_labels):
                values[self.right_label_column] = cfg.right_info_labels[index]
                values[self.right_label_column + 1] = right_values[index]
            builder.add(RowRole.INFO, values)
        builder.add_spacers(1)

        builder.add(RowRole.HEADER, [column.label for column in self.columns])

        for item in items:
            builder.add(
                RowRole.DATA,
                [column.cell_value(item) for column in self.columns],
                has_details=bool(item.detail_line) and self.folds_details,
            )

        totals_values = builder.blank()
        totals_values[0] = cfg.excel_totals_label
        unit_index = self._column_index("unit")
        if unit_index is not None:
            totals_values[unit_index] = cfg.excel_totals_unit
        for index, column in enumerate(self.columns):
            total = column.total_value(totals)
            if total is not None:
                totals_values[index] = total
        builder.add(RowRole.TOTALS, totals_values)

        builder.add_spacers(cfg.signature_spacer_rows)

        signature_values = builder.blank()
        left_label, right_label = cfg.signature_labels
        signature_values[0] = left_label
        signature_values[self.right_signature_column - 1] = right_label
        builder.add(RowRole.SIGNATURE, signature_values)

        return builder.build()

    # --- styling ---

    def _write_values(self, ws: Worksheet, rows: SheetRows) -> None:
        for row_index, row in enumerate(rows.rows, start=1):
            for col_index, value in enumerate(row.values, start=1):
                if value is None or value == "":
                    continue
                ws.cell(row=row_index, column=col_index, value=value)

    def _style_titles(self, ws: Worksheet, rows: SheetRows) -> None:
        for position, row_index in enumerate(rows.rows_for(RowRole.TITLE)):
            size = TITLE_FONT_SIZES[min(position, len(TITLE_FONT_SIZES) - 1)]
            cell = ws.cell(row=row_index, column=1)
            cell.font = Font(bold=True, size=size)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            ws.merge_cells(start_row=row_index, start_column=1, end_row=row_index, end_column=self.column_count)

    def _style_info(self, ws: Worksheet, rows: SheetRows) -> None:
        for row_index in rows.rows_for(RowRole.INFO):
            for col_index in (1, self.right_label_column + 1):
                ws.cell(row=row_index, column=col_index).font = Font(bold=True)
            for col_index in (2, self.right_label_column + 2):
                ws.cell(row=row_index, column=col_index).alignment = Alignment(horizontal="left")

    def _style_header(self, ws: Worksheet, rows: SheetRows) -> None:
        row_index = rows.header_row
        fill = PatternFill(fill_type="solid", start_color=HEADER_FILL, end_color=HEADER_FILL)
        for col_index in range(1, self.column_count + 1):
            cell = ws.cell(row=row_index, column=col_index)
            cell.font = Font(bold=True)
            cell.border = FULL_BORDER
            cell.fill = fill
            cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    def _style_table_cell(self, ws: Worksheet, row_index: int, col_index: int, column: ColumnSpec, bold: bool) -> None:
        cell = ws.cell(row=row_index, column=col_index)
        cell.border = FULL_BORDER
        if bold:
            cell.font = Font(bold=True)
        if column.is_numeric:
            cell.number_format = NUMBER_FORMAT
            cell.alignment = Alignment(horizontal="right", vertical="center")
        elif column.wrap:
            cell.alignment = Alignment(horizontal=column.align, vertical="center", wrap_text=True)
        else:
            cell.alignment = Alignment(horizontal="center", vertical="center")

    def _style_body(self, ws: Worksheet, rows: SheetRows) -> None:
        for row_index in rows.data_rows:
            for col_index, column in enumerate(self.columns, start=1):
                self._style_table_cell(ws, row_index, col_index, column, bold=False)
        for col_index, column in enumerate(self.columns, start=1):
            self._style_table_cell(ws, rows.totals_row, col_index, column, bold=True)

    def _style_signatures(self, ws: Worksheet, rows: SheetRows) -> None:
        row_index = rows.signature_row
        span = self.config.signature_span
        for start in (1, self.right_signature_column):
            end = start + span - 1
            ws.merge_cells(start_row=row_index, start_column=start, end_row=row_index, end_column=end)
            for col_index in range(start, end + 1):
                ws.cell(row=row_index, column=col_index).border = TOP_BORDER
            anchor = ws.cell(row=row_index, column=start)
            anchor.font = Font(bold=True)
            anchor.alignment = Alignment(horizontal="center", vertical="top")

    def _size_grid(self, ws: Worksheet, rows: SheetRows) -> None:
        for col_index, column in enumerate(self.columns, start=1):
            ws.column_dimensions[get_column_letter(col_index)].width = column.xlsx_width

        heights: Dict[RowRole, float] = {
            RowRole.SPACER: SPACER_ROW_HEIGHT,
            RowRole.INFO: INFO_ROW_HEIGHT,
            RowRole.HEADER: HEADER_ROW_HEIGHT,
            RowRole.DATA: DATA_ROW_HEIGHT,
            RowRole.TOTALS: TOTALS_ROW_HEIGHT,
            RowRole.SIGNATURE: SIGNATURE_ROW_HEIGHT,
        }
        title_position = 0
        for row_index, row in enumerate(rows.rows, start=1):
            if row.role == RowRole.TITLE:
                height = TITLE_ROW_HEIGHTS[min(title_position, len(TITLE_ROW_HEIGHTS) - 1)]
                title_position += 1
            elif row.role == RowRole.DATA and row.has_details:
                height = DATA_ROW_HEIGHT_WITH_DETAILS
            else:
                height = heights[row.role]
            ws.row_dimensions[row_index].height = height

    def render(self, header: ReportHeader, items: Sequence[LineItem], totals: Totals) -> RenderedWorkbook:
        rows = self.build_rows(header, items, totals)

        wb = Workbook()
        ws = wb.active
        ws.title = self.config.sheet_name

        self._write_values(ws, rows)
        self._style_titles(ws, rows)
        self._style_info(ws, rows)
        self._style_header(ws, rows)
        self._style_body(ws, rows)
        self._style_signatures(ws, rows)
        self._size_grid(ws, rows)

        wb.properties.creator = self.config.company_name
        wb.properties.title = self.config.report_title
        wb.properties.created = FIXED_DOC_TIMESTAMP

        # openpyxl stamps `modified` and the zip entries with the current time on save
        buffer = BytesIO()
        wb.save(buffer)
        return RenderedWorkbook(content=normalize_xlsx_archive(buffer.getvalue()), rows=rows)


def render_workbook(
    header: ReportHeader,
    items: Sequence[LineItem],
    totals: Totals,
    config: Optional[ReportLayoutConfig] = None,
) -> RenderedWorkbook:
    """
    Renders the report workbook in memory.

    Raises:
        ExcelRenderError: if building, styling or serializing the workbook fails.
    """
    try:
        return ExcelReportRenderer(config).render(header, items, totals)
    except ReportGenerationError:
        raise
    except Exception as e:
        logger.exception(f"Error rendering Excel report: {e}")
        raise ExcelRenderError(f"Failed to render Excel report: {e}") from e


def generate_report_excel(
    header: ReportHeader,
    items: Sequence[LineItem],
    totals: Totals,
    filename: str,
    config: Optional[ReportLayoutConfig] = None,
    downloads: Optional[LocalDownloadService] = None,
) -> Path:
    """
    Renders the report workbook and saves it as `<filename>.xlsx`.

    Returns:
        Path: location of the saved workbook.
    """
    rendered = render_workbook(header, items, totals, config)
    path = (downloads or download_service).save_file(rendered.content, f"{filename}.xlsx")
    logger.info(f"Excel report generated: {path.name} ({len(rendered.rows)} rows)")
    return path
