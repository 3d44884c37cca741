# inventory_report/services/pdf_service.py

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, Table, TableStyle

from inventory_report.core.errors import PdfRenderError, ReportGenerationError
from inventory_report.core.layout import (
    DESCRIPTION,
    ColumnSpec,
    LayoutTier,
    PdfGeometry,
    ReportLayoutConfig,
    header_values,
    select_layout_tier,
)
from inventory_report.core.logger import get_logger
from inventory_report.core.utils import format_number
from inventory_report.models import LineItem, ReportHeader, Totals
from inventory_report.services.download_service import LocalDownloadService, download_service
from inventory_report.services.font_service import get_active_font_name

logger = get_logger(__name__)

_ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "right": TA_RIGHT}


@dataclass
class RenderedPdf:
    content: bytes
    page_count: int
    tier: LayoutTier
    table_bottom: float    # mm from the top of the last page the table touches
    table_end_page: int
    signature_y: float     # mm from the top of the signature page
    signature_page: int


def _paragraph_text(text: str) -> str:
    return escape(text or "").replace("\n", "<br/>")


class PdfReportRenderer:
    """
    Lays out one report on a landscape A4 canvas: title block, info block,
    the item table (sized by layout tier) and the signature block.
    """
    def __init__(self, config: Optional[ReportLayoutConfig] = None):
        self.config = config or ReportLayoutConfig()
        self.geometry: PdfGeometry = self.config.geometry

    # --- coordinate helpers (layout is expressed in mm from the top edge) ---

    def _y(self, top_mm: float) -> float:
        return (self.geometry.page_height - top_mm) * mm

    @property
    def columns(self) -> Sequence[ColumnSpec]:
        return self.config.pdf_columns

    @property
    def table_width(self) -> float:
        return sum(column.pdf_width for column in self.columns)

    @property
    def table_x(self) -> float:
        return max(self.geometry.side_margin, (self.geometry.page_width - self.table_width) / 2)

    # --- drawing ---

    def _draw_title_block(self, c: canvas.Canvas, font: str, bold_font: str) -> None:
        g = self.geometry
        center_x = g.page_width / 2 * mm

        c.setFont(bold_font, g.company_font_size)
        c.drawCentredString(center_x, self._y(g.header_y), self.config.company_name)

        c.setFont(font, g.address_font_size)
        c.drawCentredString(center_x, self._y(g.address_y), self.config.company_address)

        c.setFont(bold_font, g.title_font_size)
        c.drawCentredString(center_x, self._y(g.title_y), self.config.report_title)

    def _draw_label_value(
        self, c: canvas.Canvas, label: str, value: str, x: float, y: float, offset: float,
        font: str, bold_font: str,
    ) -> None:
        size = self.geometry.info_font_size
        c.setFont(bold_font, size)
        c.drawString(x * mm, self._y(y), label)
        c.setFont(font, size)
        c.drawString((x + offset) * mm, self._y(y), value or "")

    def _draw_info_block(self, c: canvas.Canvas, header: ReportHeader, font: str, bold_font: str) -> None:
        g = self.geometry
        left_values, right_values = header_values(header)

        for index, (label, value) in enumerate(zip(self.config.left_info_labels, left_values)):
            y = g.info_block_y + g.line_height * index
            self._draw_label_value(c, label, value, g.left_x, y, g.left_value_offset, font, bold_font)

        for index, (label, value) in enumerate(zip(self.config.right_info_labels, right_values)):
            y = g.info_block_y + g.line_height * index
            self._draw_label_value(c, label, value, g.right_x, y, g.right_value_offset, font, bold_font)

    def _draw_signatures(self, c: canvas.Canvas, bold_font: str) -> float:
        g = self.geometry
        sig_y = g.signature_y
        left_label, right_label = self.config.signature_labels

        c.setLineWidth(g.signature_line_width * mm)
        c.setStrokeColor(colors.black)

        c.line(g.signature_edge_x * mm, self._y(sig_y),
               (g.signature_edge_x + g.signature_line_length) * mm, self._y(sig_y))
        c.setFont(bold_font, g.signature_font_size)
        c.drawString(g.signature_label_x * mm, self._y(sig_y + g.signature_label_drop), left_label)

        right_end = g.page_width - g.signature_edge_x
        c.line((right_end - g.signature_line_length) * mm, self._y(sig_y), right_end * mm, self._y(sig_y))
        c.drawString((g.page_width - g.signature_right_label_x_from_edge) * mm,
                     self._y(sig_y + g.signature_label_drop), right_label)
        return sig_y

    # --- table ---

    def _build_rows(
        self, items: Sequence[LineItem], totals: Totals, tier: LayoutTier, font: str, bold_font: str,
    ) -> List[list]:
        leading = tier.font_size * 1.2
        header_style = ParagraphStyle(
            "ReportTableHeader", fontName=bold_font, fontSize=tier.font_size,
            leading=leading, alignment=TA_CENTER,
        )
        cell_styles = {
            align: ParagraphStyle(
                f"ReportTableCell-{align}", fontName=font, fontSize=tier.font_size,
                leading=leading, alignment=enum,
            )
            for align, enum in _ALIGNMENTS.items()
        }

        rows: List[list] = [[Paragraph(_paragraph_text(column.label), header_style) for column in self.columns]]

        for item in items:
            row = []
            for column in self.columns:
                value = column.cell_value(item)
                if column.is_numeric:
                    row.append(format_number(value))
                elif column.wrap or column.kind == DESCRIPTION:
                    align = "left" if column.kind == DESCRIPTION else column.align
                    row.append(Paragraph(_paragraph_text(value), cell_styles.get(align, cell_styles["center"])))
                else:
                    row.append(value)
            rows.append(row)

        totals_row = []
        for column in self.columns:
            total = column.total_value(totals)
            if total is not None:
                totals_row.append(format_number(total))
            elif column.key == "unit":
                totals_row.append(self.config.pdf_totals_label)
            else:
                totals_row.append("")
        rows.append(totals_row)
        return rows

    def _build_table(self, rows: List[list], tier: LayoutTier, font: str, bold_font: str) -> Table:
        g = self.geometry
        last = len(rows) - 1
        padding = tier.cell_padding * mm
        header_height = tier.font_size * 1.2 * 2 + 2 * padding

        commands = [
            ("FONTNAME", (0, 0), (-1, last), font),
            ("FONTSIZE", (0, 0), (-1, last), tier.font_size),
            ("LEADING", (0, 0), (-1, last), tier.font_size * 1.2),
            ("TEXTCOLOR", (0, 0), (-1, last), colors.black),
            ("BACKGROUND", (0, 0), (-1, last), colors.white),
            ("ALIGN", (0, 0), (-1, last), "CENTER"),
            ("VALIGN", (0, 0), (-1, last), "MIDDLE"),
            ("LEFTPADDING", (0, 0), (-1, last), padding),
            ("RIGHTPADDING", (0, 0), (-1, last), padding),
            ("TOPPADDING", (0, 0), (-1, last), padding),
            ("BOTTOMPADDING", (0, 0), (-1, last), padding),
            ("GRID", (0, 0), (-1, last), g.grid_line_width * mm, colors.black),
            ("GRID", (0, 0), (-1, 0), g.header_line_width * mm, colors.black),
            ("FONTNAME", (0, 0), (-1, 0), bold_font),
            # Totals row
            ("FONTNAME", (0, last), (-1, last), bold_font),
            ("GRID", (0, last), (-1, last), g.header_line_width * mm, colors.black),
        ]
        for index, column in enumerate(self.columns):
            if column.kind == DESCRIPTION:
                commands.append(("ALIGN", (index, 1), (index, last - 1), "LEFT"))

        table = Table(
            rows,
            colWidths=[column.pdf_width * mm for column in self.columns],
            repeatRows=1,
            minRowHeights=[header_height] + [tier.min_row_height * mm] * (len(rows) - 1),
        )
        table.setStyle(TableStyle(commands))
        return table

    def _draw_table(self, c: canvas.Canvas, table: Table) -> float:
        """
        Draws the table starting at the table anchor, continuing onto new pages
        when it runs past the bottom margin.

        Returns:
            float: bottom edge of the table on its last page, in mm from the top.
        """
        g = self.geometry
        x = self.table_x * mm
        width = self.table_width * mm
        page_bottom = g.page_height - g.bottom_margin
        top = g.table_start_y
        remaining = table

        while True:
            available = (page_bottom - top) * mm
            _, height = remaining.wrapOn(c, width, available)
            if height <= available:
                remaining.drawOn(c, x, self._y(top) - height)
                return top + height / mm

            parts = remaining.split(width, available)
            if len(parts) < 2:
                if top == g.top_margin:
                    # A single row taller than a whole page; draw it and let it clip.
                    logger.warning(
                        f"PDF table row is taller than a page ({height / mm:.1f}mm, {available / mm:.1f}mm fit); "
                        f"the row is clipped on page {c.getPageNumber()}"
                    )
                    remaining.drawOn(c, x, self._y(top) - height)
                    return top + height / mm
                c.showPage()
                top = g.top_margin
                continue

            first, remaining = parts[0], parts[1]
            _, first_height = first.wrapOn(c, width, available)
            first.drawOn(c, x, self._y(top) - first_height)
            logger.debug(f"PDF table continues on page {c.getPageNumber() + 1}")
            c.showPage()
            top = g.top_margin

    def render(self, header: ReportHeader, items: Sequence[LineItem], totals: Totals) -> RenderedPdf:
        g = self.geometry
        font = get_active_font_name()
        bold_font = get_active_font_name(bold=True)

        row_count = len(items) + 1
        tier = select_layout_tier(row_count, g.max_table_height, self.config.tiers)
        logger.debug(
            f"PDF layout tier '{tier.name}' for {row_count} rows: font={tier.font_size}, "
            f"min_row_height={tier.min_row_height:.2f}mm, budget={g.max_table_height:.1f}mm"
        )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(g.page_width * mm, g.page_height * mm), invariant=1)
        c.setTitle(self.config.report_title)
        c.setAuthor(self.config.company_name)

        self._draw_title_block(c, font, bold_font)
        self._draw_info_block(c, header, font, bold_font)

        rows = self._build_rows(items, totals, tier, font, bold_font)
        table = self._build_table(rows, tier, font, bold_font)
        table_bottom = self._draw_table(c, table)
        table_end_page = c.getPageNumber()

        # Never let the table run into the signatures
        if table_bottom > g.signature_limit:
            logger.info(
                f"Table ends at {table_bottom:.1f}mm, past the signature limit "
                f"{g.signature_limit:.1f}mm; moving signatures to a new page"
            )
            c.showPage()

        signature_y = self._draw_signatures(c, bold_font)
        signature_page = c.getPageNumber()
        c.save()

        return RenderedPdf(
            content=buffer.getvalue(),
            page_count=signature_page,
            tier=tier,
            table_bottom=table_bottom,
            table_end_page=table_end_page,
            signature_y=signature_y,
            signature_page=signature_page,
        )


def render_pdf(
    header: ReportHeader,
    items: Sequence[LineItem],
    totals: Totals,
    config: Optional[ReportLayoutConfig] = None,
) -> RenderedPdf:
    """
    Renders the report PDF in memory.

    Raises:
        PdfRenderError: if layout or drawing fails.
        FontRegistrationError: if a configured font cannot be loaded.
    """
    try:
        return PdfReportRenderer(config).render(header, items, totals)
    except ReportGenerationError:
        raise
    except Exception as e:
        logger.exception(f"Error rendering PDF report: {e}")
        raise PdfRenderError(f"Failed to render PDF report: {e}") from e


def generate_report_pdf(
    header: ReportHeader,
    items: Sequence[LineItem],
    totals: Totals,
    filename: str,
    config: Optional[ReportLayoutConfig] = None,
    downloads: Optional[LocalDownloadService] = None,
) -> Path:
    """
    Renders the report PDF and saves it as `<filename>.pdf`.

    Returns:
        Path: location of the saved PDF.
    """
    rendered = render_pdf(header, items, totals, config)
    path = (downloads or download_service).save_file(rendered.content, f"{filename}.pdf")
    logger.info(f"PDF report generated: {path.name} ({rendered.page_count} page(s), tier '{rendered.tier.name}')")
    return path
