# inventory_report/services/download_service.py

import os
import re
from pathlib import Path
from typing import Optional, Union

from inventory_report.config import REPORT_OUTPUT_DIR
from inventory_report.core.errors import DownloadError
from inventory_report.core.logger import get_logger

logger = get_logger(__name__)

# Characters that cannot appear in a file name on common file systems
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def sanitize_filename(filename: str) -> str:
    """Replaces path separators and reserved characters; spaces and '$' are kept."""
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", filename).strip()
    return cleaned or "report"


class LocalDownloadService:
    """
    Delivers generated report files by writing them into a downloads directory.
    Saving the same name twice overwrites the earlier file.
    """
    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        self.output_dir = Path(output_dir or REPORT_OUTPUT_DIR)

    def save_file(self, content: bytes, filename: str) -> Path:
        """
        Writes `content` to `<output_dir>/<filename>`.

        Args:
            content (bytes): The rendered file.
            filename (str): File name including extension.

        Returns:
            Path: Where the file was written.
        """
        target = self.output_dir / sanitize_filename(filename)
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.error(f"Failed to save {filename} to {self.output_dir}: {e}")
            raise DownloadError(f"Failed to save '{filename}': {e}") from e
        logger.info(f"Saved {target.name} ({len(content)} bytes) to {self.output_dir}")
        return target

    def file_exists(self, filename: str) -> bool:
        return (self.output_dir / sanitize_filename(filename)).is_file()


# Default instance; callers may pass their own output_dir per export instead.
download_service = LocalDownloadService()
