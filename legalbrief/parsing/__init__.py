"""Document ingestion for uploaded reference files.

Responsibilities:
    - Size and format validation
    - PDF text extraction with pypdf
    - UTF-8 decoding of text files
    - Base64 payloads for scans, images and other binary files

Output is a ReferenceDocument ready for prompt context.
"""

from legalbrief.parsing.ingest import MAX_FILE_SIZE, DocumentParseError, build_document

__all__ = ["MAX_FILE_SIZE", "DocumentParseError", "build_document"]
