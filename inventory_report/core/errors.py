# inventory_report/core/errors.py


class ReportGenerationError(RuntimeError):
    """Raised when a report (PDF or Excel) could not be produced."""


class PdfRenderError(ReportGenerationError):
    pass


class ExcelRenderError(ReportGenerationError):
    pass


class FontRegistrationError(ReportGenerationError):
    pass


class DownloadError(ReportGenerationError):
    pass


class ReportValidationError(ValueError):
    """Raised by the pre-export guard when the header or items are incomplete."""
