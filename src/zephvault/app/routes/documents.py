"""Document vault API plus storage diagnostics for the PDF viewer."""

import logging
import mimetypes
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.enums import DocumentCategory
from zephvault.domain.models import Document
from zephvault.domain.schemas import CheckPdfAccessRequest, ExtractPdfTextRequest
from zephvault.infra.database import get_db
from zephvault.infra.storage import StorageError, StorageGateway, get_storage
from zephvault.services import document_service, file_access_service
from zephvault.services.document_service import DocumentNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])
diagnostics_router = APIRouter(prefix="/api", tags=["documents"])

_CATEGORIES = {c.value for c in DocumentCategory}


# ---------------------------------------------------------------------------
# Vault
# ---------------------------------------------------------------------------


@router.get("")
async def list_documents(
    category: Optional[str] = Query(None, description="Filter by document category"),
    db: AsyncSession = Depends(get_db),
):
    views = await document_service.list_document_views(db, category=category)
    return {"documents": [v.to_dict() for v in views]}


@router.get("/{document_id}")
async def get_document(document_id: str, db: AsyncSession = Depends(get_db)):
    try:
        view = await document_service.get_document_view(db, document_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    return view.to_dict()


@router.post("", status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    category: str = Form("general"),
    uploaded_by: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    storage: StorageGateway = Depends(get_storage),
):
    """Store an uploaded file in the bucket and record it."""
    if category not in _CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown category: {category}")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    content_type = (
        file.content_type
        or mimetypes.guess_type(file.filename or "")[0]
        or "application/octet-stream"
    )
    try:
        document = await document_service.upload_document(
            db,
            storage,
            file.filename or "upload",
            content,
            category=category,
            content_type=content_type,
            uploaded_by=uploaded_by,
        )
    except StorageError as e:
        logger.error("Upload failed: %s", e)
        raise HTTPException(status_code=502, detail="Failed to store file")

    view = await document_service.get_document_view(db, document.id)
    return view.to_dict()


def _content_disposition(file_name: str) -> str:
    """Attachment header that survives quotes and non-latin-1 names."""
    fallback = "".join(
        ch if 32 <= ord(ch) < 127 and ch not in '"\\' else "_" for ch in file_name
    )
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    storage: StorageGateway = Depends(get_storage),
):
    try:
        document, content = await document_service.download_document(db, storage, document_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except StorageError as e:
        logger.error("Download of %s failed: %s", document_id, e)
        raise HTTPException(status_code=502, detail="Failed to download file")

    media_type = mimetypes.guess_type(document.file_name)[0] or "application/octet-stream"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": _content_disposition(document.file_name)},
    )


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    storage: StorageGateway = Depends(get_storage),
):
    try:
        await document_service.delete_document(db, storage, document_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except StorageError as e:
        logger.error("Storage delete for %s failed: %s", document_id, e)
        raise HTTPException(status_code=502, detail="Failed to delete stored file")
    return {"success": True}


# ---------------------------------------------------------------------------
# Viewer diagnostics
# ---------------------------------------------------------------------------


@diagnostics_router.post("/check-pdf-access")
async def check_pdf_access(
    body: CheckPdfAccessRequest,
    db: AsyncSession = Depends(get_db),
    storage: StorageGateway = Depends(get_storage),
):
    """Explain why a stored file may not load in the viewer."""
    document = await db.get(Document, body.document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found in database")

    report = await file_access_service.check_file_access(storage, body.file_url)
    return {
        "success": True,
        "document": {
            "id": document.id,
            "fileName": document.file_name,
            "fileUrl": document.file_url,
            "category": document.category,
        },
        **report,
    }


@diagnostics_router.post("/extract-pdf-text")
async def extract_pdf_text(
    body: ExtractPdfTextRequest,
    storage: StorageGateway = Depends(get_storage),
):
    text = await file_access_service.extract_text(
        storage, body.document.file_name, body.document.file_url
    )
    return {"text": text, "success": True}
