# inventory_report/services/report_service.py

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from inventory_report.core.errors import ReportGenerationError, ReportValidationError
from inventory_report.core.layout import ReportLayoutConfig
from inventory_report.core.logger import get_logger
from inventory_report.core.utils import get_filename_date, round_half_up, to_number
from inventory_report.models import LineItem, ReportHeader, Totals
from inventory_report.services.download_service import LocalDownloadService, download_service
from inventory_report.services.excel_service import generate_report_excel
from inventory_report.services.pdf_service import generate_report_pdf

logger = get_logger(__name__)


@dataclass
class ExportResult:
    pdf_path: Path
    excel_path: Path
    totals: Totals
    base_filename: str


def calculate_totals(items: Iterable[LineItem]) -> Totals:
    """
    Sums invoice quantity, received quantity and value over all items.
    Non-numeric quantities or prices count as zero.
    """
    total_invoice_qty = 0.0
    total_rcvd_qty = 0.0
    total_value = 0.0
    for item in items:
        invoice_qty = to_number(item.invoice_qty)
        total_invoice_qty += invoice_qty
        total_rcvd_qty += to_number(item.rcvd_qty)
        total_value += invoice_qty * to_number(item.unit_price)
    return Totals(
        total_invoice_qty=total_invoice_qty,
        total_rcvd_qty=total_rcvd_qty,
        total_value=total_value,
    )


def build_base_filename(header: ReportHeader, totals: Totals) -> str:
    """e.g. 'Bill of Buyer Acme $1235 DATE-15-03-2024' (no extension)."""
    return (
        f"Bill of Buyer {header.buyer_name} ${round_half_up(totals.total_value)} "
        f"DATE-{get_filename_date(header.billing_date)}"
    )


def validate_report_request(header: ReportHeader, items: Sequence[LineItem]) -> None:
    """
    Pre-export guard for the form layer. generate_reports() assumes it has passed.

    Raises:
        ReportValidationError: with a user-facing message for the first problem found.
    """
    if not (header.buyer_name or "").strip():
        raise ReportValidationError("Please enter a Buyer Name.")
    if not items:
        raise ReportValidationError("Please add at least one line item.")
    if header.billing_date is None:
        raise ReportValidationError("Please set a billing date.")


def generate_reports(
    header: ReportHeader,
    items: Sequence[LineItem],
    config: Optional[ReportLayoutConfig] = None,
    output_dir: Optional[Union[str, Path]] = None,
) -> ExportResult:
    """
    Produces both report files for one buyer: totals are computed once, then
    the PDF and the Excel workbook are rendered and saved under the same base name.

    Nothing is rolled back on failure; re-running regenerates both files.

    Args:
        header (ReportHeader): Validated header (buyer name and billing date set).
        items (Sequence[LineItem]): At least one line item, in display order.
        config (ReportLayoutConfig): Labels, column preset and spacing. Defaults apply when omitted.
        output_dir: Directory to save into. Defaults to REPORT_OUTPUT_DIR.

    Returns:
        ExportResult: Paths of both files plus the totals and base filename used.

    Raises:
        ReportGenerationError: if either report could not be produced.
    """
    items = list(items)
    totals = calculate_totals(items)
    base_filename = build_base_filename(header, totals)
    downloads = LocalDownloadService(output_dir) if output_dir is not None else download_service
    logger.info(f"Generating reports '{base_filename}' for {len(items)} item(s)")

    try:
        pdf_path = generate_report_pdf(header, items, totals, base_filename, config, downloads)
        excel_path = generate_report_excel(header, items, totals, base_filename, config, downloads)
    except Exception as e:
        logger.error(f"Error generating reports for buyer '{header.buyer_name}': {e}")
        raise ReportGenerationError(f"Error generating reports. {e}") from e

    return ExportResult(
        pdf_path=pdf_path,
        excel_path=excel_path,
        totals=totals,
        base_filename=base_filename,
    )
