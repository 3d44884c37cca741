"""
Test fixtures - sample report data and a throwaway downloads directory
"""

import pytest

from inventory_report.models import LineItem, ReportHeader
from inventory_report.services import font_service
from inventory_report.services.download_service import LocalDownloadService


@pytest.fixture(autouse=True)
def builtin_fonts():
    """Draw every test PDF with Helvetica, whatever the environment configures."""
    font_service.register_pdf_fonts(font_path="")
    yield
    font_service.active_font_name = None
    font_service.active_bold_font_name = None


@pytest.fixture()
def header():
    return ReportHeader(
        buyer_name="Acme",
        supplier_name="Delta Fabrics",
        file_no="F-101",
        invoice_no="INV-2024-07",
        lc_number="LC-556677",
        invoice_date="2024-03-10",
        billing_date="2024-03-15",
    )


def make_item(index: int = 1, **overrides) -> LineItem:
    fields = dict(
        fabric_code=f"FAB-{index:03d}",
        item_description=f"Cotton twill {index}",
        color="Navy",
        hs_code="5209.42",
        rcvd_date="2024-03-01",
        challan_no=f"CH-{index}",
        pi_number=f"PI-{index}",
        unit="YDS",
        invoice_qty=100,
        rcvd_qty=98,
        unit_price=2.5,
        appstreme_no=f"AP-{index}",
    )
    fields.update(overrides)
    return LineItem(**fields)


@pytest.fixture()
def item_factory():
    return make_item


@pytest.fixture()
def items():
    return [
        make_item(1),
        make_item(2, color="", hs_code="", invoice_qty=40, rcvd_qty=40, unit_price=3.25),
        make_item(3, unit="MTR", invoice_qty="12.5", rcvd_qty=None, unit_price="abc"),
    ]


@pytest.fixture()
def downloads(tmp_path):
    return LocalDownloadService(tmp_path / "downloads")
