# inventory_report/models.py

import datetime
import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from inventory_report.core.utils import to_number


class UnitOfMeasure(str, Enum):
    YDS = "YDS"
    PCS = "PCS"
    KG = "KG"
    MTR = "MTR"
    BOX = "BOX"


def _blank_date_to_none(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


class ReportHeader(BaseModel):
    """
    Buyer/invoice metadata printed at the top of both reports.
    """
    buyer_name: str = Field("", description="Name of the buyer the bill is raised for.")
    supplier_name: str = Field("", description="Name of the fabric supplier.")
    file_no: str = Field("", description="Internal file number.")
    invoice_no: str = Field("", description="Supplier invoice number.")
    lc_number: str = Field("", description="Letter of credit number.")
    invoice_date: Optional[datetime.date] = Field(None, description="Date of the supplier invoice.")
    billing_date: Optional[datetime.date] = Field(None, description="Date the bill is prepared.")

    @field_validator("invoice_date", "billing_date", mode="before")
    @classmethod
    def _empty_dates(cls, value: Any) -> Any:
        return _blank_date_to_none(value)

    @field_validator("buyer_name", "supplier_name", "file_no", "invoice_no", "lc_number", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class LineItem(BaseModel):
    """
    Represents a single fabric row of the report.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Opaque row identifier, not rendered.")
    fabric_code: str = Field("", description="Fabric code.")
    item_description: str = Field("", description="Free-text description of the fabric.")
    color: str = Field("", description="Fabric color, folded into the description on the reports.")
    hs_code: str = Field("", description="Harmonized-system code, folded into the description on the reports.")
    rcvd_date: Optional[datetime.date] = Field(None, description="Date the goods were received.")
    challan_no: str = Field("", description="Delivery challan number.")
    pi_number: str = Field("", description="Proforma invoice number.")
    unit: UnitOfMeasure = Field(UnitOfMeasure.YDS, description="Unit of measure for the quantities.")
    invoice_qty: float = Field(0.0, description="Quantity on the invoice.")
    rcvd_qty: float = Field(0.0, description="Quantity actually received.")
    unit_price: float = Field(0.0, description="Price per unit in USD.")
    appstreme_no: str = Field("", description="Appstreme receipt number.")

    @field_validator("invoice_qty", "rcvd_qty", "unit_price", mode="before")
    @classmethod
    def _lenient_number(cls, value: Any) -> float:
        # Non-numeric input counts as zero instead of failing validation
        return to_number(value)

    @field_validator("rcvd_date", mode="before")
    @classmethod
    def _empty_rcvd_date(cls, value: Any) -> Any:
        return _blank_date_to_none(value)

    @field_validator("unit", mode="before")
    @classmethod
    def _normalize_unit(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper() or UnitOfMeasure.YDS
        return value

    @field_validator(
        "fabric_code", "item_description", "color", "hs_code",
        "challan_no", "pi_number", "appstreme_no", mode="before",
    )
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def line_total(self) -> float:
        return to_number(self.invoice_qty) * to_number(self.unit_price)

    @property
    def detail_line(self) -> str:
        """'Color: X, H.S Code: Y' with only the parts that are filled in."""
        details = []
        if self.color and self.color.strip():
            details.append(f"Color: {self.color}")
        if self.hs_code and self.hs_code.strip():
            details.append(f"H.S Code: {self.hs_code}")
        return ", ".join(details)


class Totals(BaseModel):
    """
    Aggregate sums over all line items.
    """
    total_invoice_qty: float = Field(0.0, description="Sum of invoice quantities.")
    total_rcvd_qty: float = Field(0.0, description="Sum of received quantities.")
    total_value: float = Field(0.0, description="Sum of invoice_qty * unit_price.")

    @property
    def qty_mismatch(self) -> bool:
        return abs(self.total_invoice_qty - self.total_rcvd_qty) > 1e-9
