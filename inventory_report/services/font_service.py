# inventory_report/services/font_service.py

import os
from typing import Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from inventory_report.config import PDF_BOLD_FONT_PATH, PDF_FONT_NAME, PDF_FONT_PATH
from inventory_report.core.errors import FontRegistrationError
from inventory_report.core.logger import get_logger

logger = get_logger(__name__)

BUILTIN_FONT = "Helvetica"
BUILTIN_BOLD_FONT = "Helvetica-Bold"

# Global font names, set once by register_pdf_fonts()
active_font_name: Optional[str] = None
active_bold_font_name: Optional[str] = None


def register_pdf_fonts(
    font_path: Optional[str] = None,
    bold_font_path: Optional[str] = None,
    font_name: Optional[str] = None,
) -> str:
    """
    Registers the TTF faces used by the PDF report, falling back to the
    built-in Helvetica family when no font file is configured.

    Must run before any text is drawn. Calling it again with the same
    configuration is a no-op.

    Args:
        font_path (str): Regular TTF file. Defaults to PDF_FONT_PATH.
        bold_font_path (str): Bold TTF file. Defaults to PDF_BOLD_FONT_PATH,
            then to the regular file.
        font_name (str): Logical family name. Defaults to PDF_FONT_NAME.

    Returns:
        str: The active (regular) font name.
    """
    global active_font_name, active_bold_font_name

    font_path = font_path if font_path is not None else PDF_FONT_PATH
    bold_font_path = bold_font_path if bold_font_path is not None else PDF_BOLD_FONT_PATH
    font_name = font_name or PDF_FONT_NAME

    if not font_path:
        active_font_name, active_bold_font_name = BUILTIN_FONT, BUILTIN_BOLD_FONT
        return active_font_name

    bold_name = f"{font_name}-Bold"
    if active_font_name == font_name and font_name in pdfmetrics.getRegisteredFontNames():
        return active_font_name

    try:
        if not os.path.isfile(font_path):
            raise FileNotFoundError(f"Font file '{font_path}' does not exist.")
        pdfmetrics.registerFont(TTFont(font_name, font_path))
        pdfmetrics.registerFont(TTFont(bold_name, bold_font_path or font_path))
        pdfmetrics.registerFontFamily(
            font_name, normal=font_name, bold=bold_name, italic=font_name, boldItalic=bold_name
        )
    except Exception as e:
        logger.error(f"Failed to register PDF font '{font_name}' from {font_path}: {e}")
        raise FontRegistrationError(f"Failed to register PDF font '{font_name}': {e}") from e

    active_font_name, active_bold_font_name = font_name, bold_name
    logger.info(f"Registered PDF font '{font_name}' from {font_path}")
    return active_font_name


def get_active_font_name(bold: bool = False) -> str:
    """Face name to pass to every text-drawing call; registers fonts on first use."""
    if active_font_name is None:
        register_pdf_fonts()
    return active_bold_font_name if bold else active_font_name
