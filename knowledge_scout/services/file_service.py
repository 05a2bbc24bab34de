"""
Local disk storage for uploaded files.
"""
import logging
import os
from typing import Tuple

from knowledge_scout.utils.file_upload import generate_unique_filename


logger = logging.getLogger(__name__)


class FileStorage:
    """Store uploads under a single directory and hand back stable paths."""

    def __init__(self, upload_dir: str):
        self.upload_dir = upload_dir

    def save_file(self, content: bytes, original_filename: str) -> Tuple[str, str]:
        """
        Write an upload to disk.

        Returns:
            Tuple of (file_path, stored filename)
        """
        os.makedirs(self.upload_dir, exist_ok=True)

        filename = generate_unique_filename(original_filename)
        file_path = os.path.join(self.upload_dir, filename)
        with open(file_path, "wb") as f:
            f.write(content)

        logger.info(f"File '{original_filename}' stored as '{file_path}'.")
        return file_path, filename

    def delete_file(self, file_path: str) -> bool:
        """Delete a stored file. Returns False if it was already gone."""
        if not self.file_exists(file_path):
            logger.warning(f"File '{file_path}' not found, nothing to delete.")
            return False
        os.remove(file_path)
        logger.info(f"File '{file_path}' deleted successfully.")
        return True

    def file_exists(self, file_path: str) -> bool:
        """Check if a stored file exists."""
        return os.path.exists(file_path)
