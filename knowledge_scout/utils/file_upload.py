"""
File upload utilities.
"""
import mimetypes
import os
import uuid
from typing import Optional

from knowledge_scout.core.exceptions import ValidationError


PDF_MEDIA_TYPE = "application/pdf"
TEXT_MEDIA_TYPE = "text/plain"

ALLOWED_MEDIA_TYPES = {
    PDF_MEDIA_TYPE,
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    TEXT_MEDIA_TYPE,
    "application/rtf",
}

# Alternate spellings browsers send for allowed types
MEDIA_TYPE_ALIASES = {
    "text/rtf": "application/rtf",
    "application/x-rtf": "application/rtf",
}

GENERIC_MEDIA_TYPES = {"", "application/octet-stream"}


def get_file_extension(filename: str) -> str:
    """
    Get file extension.

    Args:
        filename: Name of file

    Returns:
        File extension without dot
    """
    return filename.rsplit(".", 1)[1].lower() if "." in filename else ""


def generate_unique_filename(original_filename: str) -> str:
    """
    Generate a unique filename using UUID.

    Args:
        original_filename: Original filename

    Returns:
        Unique filename
    """
    ext = get_file_extension(original_filename)
    unique_name = f"{uuid.uuid4()}.{ext}" if ext else str(uuid.uuid4())
    return unique_name


def resolve_media_type(declared: Optional[str], filename: str) -> str:
    """
    Normalise the declared content type of an upload.

    Parameters are stripped (``text/plain; charset=utf-8`` -> ``text/plain``)
    and a missing or generic type is guessed from the filename.
    """
    media_type = (declared or "").split(";", 1)[0].strip().lower()
    if media_type in GENERIC_MEDIA_TYPES:
        media_type = mimetypes.guess_type(filename)[0] or media_type
    return MEDIA_TYPE_ALIASES.get(media_type, media_type)


def validate_upload(filename: str, media_type: str, file_size: int, max_size: int) -> None:
    """
    Reject uploads outside the allow-list or over the size ceiling.

    Raises:
        ValidationError: If the upload is not acceptable
    """
    if not filename or not os.path.basename(filename):
        raise ValidationError("No file uploaded")

    if media_type not in ALLOWED_MEDIA_TYPES:
        raise ValidationError("Invalid file type. Only PDF, DOC, DOCX, TXT, and RTF files are allowed.")

    if file_size > max_size:
        raise ValidationError(f"File size exceeds maximum allowed size of {max_size} bytes")
