"""
Document text extraction service.
Parses PDF and plain text; other accepted formats get a fixed placeholder.
"""
import logging

from pypdf import PdfReader

from knowledge_scout.utils.file_upload import PDF_MEDIA_TYPE, TEXT_MEDIA_TYPE

logger = logging.getLogger(__name__)

EXTRACTION_NOT_IMPLEMENTED = "Text extraction not yet implemented for this file type."
EXTRACTION_FAILED = "Failed to extract text from document."


class TextExtractor:
    """Extract plain text from an uploaded file. Never raises."""

    def extract(self, file_path: str, media_type: str) -> str:
        """
        Extract text from a stored file, dispatching on its declared media type.

        Args:
            file_path: Path of the stored upload
            media_type: Media type declared at upload time

        Returns:
            Extracted text, or a placeholder string when the type has no
            extractor or extraction fails
        """
        try:
            if media_type == PDF_MEDIA_TYPE:
                return self._extract_pdf(file_path)
            if media_type == TEXT_MEDIA_TYPE:
                return self._extract_text(file_path)
            return EXTRACTION_NOT_IMPLEMENTED
        except Exception as e:
            logger.error(f"Text extraction error for '{file_path}': {e}")
            return EXTRACTION_FAILED

    def _extract_pdf(self, file_path: str) -> str:
        """Extract text from PDF."""
        reader = PdfReader(file_path)
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages)

    def _extract_text(self, file_path: str) -> str:
        """Read a plain text file verbatim."""
        with open(file_path, "rb") as f:
            return f.read().decode("utf-8", errors="ignore")
