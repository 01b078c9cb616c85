"""Reference document endpoints.

Handles file upload, validation, ingestion and the in-memory registry.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from legalbrief.agent.service import AssistantService, get_assistant_service
from legalbrief.models.schemas import DocumentSummary
from legalbrief.parsing import MAX_FILE_SIZE, DocumentParseError, build_document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

# 10MB limit matches the ingestion constant
MAX_UPLOAD_SIZE = MAX_FILE_SIZE


async def _read_and_validate_size(file: UploadFile) -> bytes:
    """Read file content and validate size.

    Raises:
        HTTPException: 413 if file exceeds size limit.
    """
    content = await file.read()

    if len(content) > MAX_UPLOAD_SIZE:
        size_mb = len(content) / (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)",
        )

    return content


@router.post("", response_model=DocumentSummary, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: UploadFile,
    service: AssistantService = Depends(get_assistant_service),
) -> DocumentSummary:
    """Upload a reference document.

    PDFs are text-extracted, text files decoded, anything else kept as
    a binary attachment.

    Raises:
        400: Missing filename, empty or corrupt file.
        413: File exceeds 10MB limit.
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )

    content = await _read_and_validate_size(file)

    try:
        document = build_document(file.filename, content, file.content_type)
    except DocumentParseError as e:
        logger.warning(f"Document parse error for {file.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    service.add_document(document)
    return DocumentSummary.from_document(document)


@router.get("", response_model=list[DocumentSummary])
async def list_documents(
    service: AssistantService = Depends(get_assistant_service),
) -> list[DocumentSummary]:
    return [DocumentSummary.from_document(doc) for doc in service.list_documents()]


@router.delete("/{doc_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    doc_id: str,
    service: AssistantService = Depends(get_assistant_service),
) -> None:
    if not service.remove_document(doc_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown document: {doc_id}",
        )
