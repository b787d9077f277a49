import io
import base64
import logging
from dataclasses import dataclass
from typing import Optional

import fitz  # PyMuPDF
from PIL import Image, UnidentifiedImageError

from studybuddy.core.config import settings
from studybuddy.core.errors import FileValidationError, UnsupportedFileError

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
PDF_MIME = "application/pdf"
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".gif")
MIN_IMAGE_SIDE = 50

_PIL_FORMAT_TO_MIME = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


@dataclass(frozen=True)
class InlineFile:
    """A validated upload, ready to be attached to a model request."""
    filename: str
    mime_type: str
    data: bytes

    @property
    def base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_part(self) -> dict:
        """Inline-data part for a Gemini `contents` list."""
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}


def read_upload(
    content: bytes,
    filename: Optional[str],
    content_type: Optional[str] = None,
) -> InlineFile:
    """
    Validate an uploaded PDF or image and wrap it as an InlineFile.
    Raises FileValidationError (UnsupportedFileError for unknown types).
    """
    filename = filename or "upload"
    lowered = filename.lower()
    content_type = (content_type or "").lower()

    # ── Validate file size ────────────────────────────
    if len(content) == 0:
        raise FileValidationError("Uploaded file is empty.")

    max_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise FileValidationError(
            f"File too large ({len(content) / (1024*1024):.1f} MB). "
            f"Maximum is {settings.MAX_FILE_SIZE_MB} MB."
        )

    if lowered.endswith(".pdf") or content_type == PDF_MIME:
        _validate_pdf(content)
        mime_type = PDF_MIME
    elif lowered.endswith(IMAGE_EXTENSIONS) or content_type.startswith("image/"):
        mime_type = _validate_image(content)
    else:
        raise UnsupportedFileError("Unsupported format. Use PDF, PNG, JPG, JPEG, WEBP, or GIF.")

    logger.info(f"[UPLOAD] ✓ {filename} accepted as {mime_type} ({len(content)} bytes)")
    return InlineFile(filename=filename, mime_type=mime_type, data=content)


def _validate_pdf(content: bytes) -> int:
    """Magic bytes + page-count check. Returns the page count."""
    if not content[:4].startswith(PDF_MAGIC):
        raise FileValidationError("File does not appear to be a valid PDF (invalid magic bytes).")

    try:
        with fitz.open(stream=content, filetype="pdf") as doc:
            pages = doc.page_count
    except Exception as e:
        raise FileValidationError(f"PDF could not be opened: {e}") from e

    if pages == 0:
        raise FileValidationError("PDF has no pages.")
    if pages > settings.MAX_PDF_PAGES:
        raise FileValidationError(f"PDF too large (>{settings.MAX_PDF_PAGES} pages).")
    return pages


def _validate_image(content: bytes) -> str:
    """Open with Pillow, check dimensions. Returns the detected mime type."""
    try:
        with Image.open(io.BytesIO(content)) as image:
            image_format = image.format
            w, h = image.size
    except (UnidentifiedImageError, OSError) as e:
        raise FileValidationError(f"Image could not be read: {e}") from e

    mime_type = _PIL_FORMAT_TO_MIME.get(image_format or "")
    if mime_type is None:
        raise UnsupportedFileError(f"Unsupported image format: {image_format}")

    if w < MIN_IMAGE_SIDE or h < MIN_IMAGE_SIDE:
        raise FileValidationError("Image too small to contain readable content.")

    return mime_type
