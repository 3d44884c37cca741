# inventory_report/config.py

import os

from inventory_report.core.logger import get_logger

# --- General Application Configuration ---
# Setting the environment to development by default if not specified
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if ENVIRONMENT == "development" else "INFO").upper()

# --- Report Branding ---
COMPANY_NAME = os.getenv("COMPANY_NAME", "Tusuka Trousers Ltd.")
COMPANY_ADDRESS = os.getenv("COMPANY_ADDRESS", "Neelngar, Konabari, Gazipur")
REPORT_TITLE = os.getenv("REPORT_TITLE", "Inventory Report")
SHEET_NAME = os.getenv("SHEET_NAME", "Inventory Report")

# --- Output Location ---
# Generated PDF/XLSX files are written here (the "download" target)
REPORT_OUTPUT_DIR = os.getenv("REPORT_OUTPUT_DIR", os.path.join(os.getcwd(), "generated-reports"))

# --- PDF Fonts ---
# Leave PDF_FONT_PATH unset to draw with the built-in Helvetica family.
PDF_FONT_NAME = os.getenv("PDF_FONT_NAME", "ReportSans")
PDF_FONT_PATH = os.getenv("PDF_FONT_PATH", "")
PDF_BOLD_FONT_PATH = os.getenv("PDF_BOLD_FONT_PATH", "")

get_logger(__name__).info(
    f"Configuration Loaded: Environment={ENVIRONMENT}, Output Dir={REPORT_OUTPUT_DIR}, "
    f"Company={COMPANY_NAME}, PDF Font={PDF_FONT_PATH or 'Helvetica'}"
)
