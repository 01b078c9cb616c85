"""Conversion of uploaded files into reference documents.

PDFs go through pypdf text extraction; PDFs without extractable text
(scans) and other binary files are kept as base64 payloads.
"""

import base64
import io
import logging
import mimetypes

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from legalbrief.models import BinaryPayload, ReferenceDocument

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"
PDF_MIME_TYPE = "application/pdf"
TEXT_MIME_TYPES = frozenset({"application/json", "application/xml", "application/rtf"})


class DocumentParseError(Exception):
    """Raised when an uploaded file cannot be turned into a document."""


def _validate_bytes(content: bytes) -> None:
    if not content:
        raise DocumentParseError("Empty file provided")

    if len(content) > MAX_FILE_SIZE:
        size_mb = len(content) / (1024 * 1024)
        raise DocumentParseError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")


def guess_mime_type(filename: str, declared: str | None = None) -> str:
    """Resolve a usable MIME type from the declared type or the filename."""
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or "application/octet-stream"


def extract_pdf_text(content: bytes) -> str:
    """Extract text from all pages of a PDF.

    Raises:
        DocumentParseError: If the file is not a readable PDF.
    """
    if not content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise DocumentParseError("Invalid PDF: file does not start with PDF header")

    try:
        reader = PdfReader(io.BytesIO(content))
        pages = list(reader.pages)
    except PdfReadError as e:
        raise DocumentParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise DocumentParseError(f"Failed to read PDF: {e}") from e

    if not pages:
        raise DocumentParseError("PDF contains no pages")

    text_parts: list[str] = []
    for i, page in enumerate(pages):
        try:
            page_text = page.extract_text()
        except Exception as e:
            logger.warning(f"Failed to extract text from page {i + 1}: {e}")
            continue
        if page_text:
            text_parts.append(page_text)

    return "\n\n".join(text_parts)


def _binary_document(filename: str, mime_type: str, content: bytes) -> ReferenceDocument:
    payload = BinaryPayload(
        mime_type=mime_type,
        base64_data=base64.b64encode(content).decode("ascii"),
    )
    return ReferenceDocument(name=filename, mime_type=mime_type, binary_payload=payload)


def build_document(filename: str, content: bytes, content_type: str | None = None) -> ReferenceDocument:
    """Turn an uploaded file into a ReferenceDocument.

    Args:
        filename: Original filename.
        content: Raw file bytes.
        content_type: MIME type declared by the client, if any.

    Returns:
        A text document when text is available, otherwise a binary one.

    Raises:
        DocumentParseError: If the file is empty, too large, or undecodable.
    """
    if not filename:
        raise DocumentParseError("Filename is required")
    _validate_bytes(content)
    mime_type = guess_mime_type(filename, content_type)

    if mime_type == PDF_MIME_TYPE:
        text = extract_pdf_text(content)
        if not text.strip():
            logger.warning(f"{filename} has no extractable text, keeping it as binary")
            return _binary_document(filename, mime_type, content)
        return ReferenceDocument(name=filename, mime_type=mime_type, text_content=text)

    if mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES:
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DocumentParseError(f"Text file is not valid UTF-8: {e}") from e
        return ReferenceDocument(name=filename, mime_type=mime_type, text_content=text)

    return _binary_document(filename, mime_type, content)
