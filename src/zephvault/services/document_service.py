"""Document vault: listing, upload and deletion of stored documents."""

import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.models import Document, Property, Unit
from zephvault.infra.storage import StorageGateway
from zephvault.services.document_content import file_extension

logger = logging.getLogger(__name__)


class DocumentNotFoundError(LookupError):
    """Raised when a document id does not resolve to a document row."""


@dataclass
class DocumentView:
    """Document row plus unit/property labels and display helpers."""

    id: str
    file_name: str
    file_url: str
    category: str
    unit_id: Optional[str]
    ai_summary: Optional[str]
    uploaded_by: Optional[str]
    created_at: Optional[datetime]
    unit_number: Optional[str]
    property_name: Optional[str]
    file_extension: str
    summary_length: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data


def summary_length_bucket(summary: Optional[str]) -> str:
    if not summary:
        return "none"
    if len(summary) < 500:
        return "short"
    if len(summary) < 2000:
        return "medium"
    return "long"


def _view_query():
    return (
        select(Document, Unit, Property)
        .outerjoin(Unit, Document.unit_id == Unit.id)
        .outerjoin(Property, Unit.property_id == Property.id)
    )


def _to_view(doc: Document, unit: Optional[Unit], prop: Optional[Property]) -> DocumentView:
    return DocumentView(
        id=doc.id,
        file_name=doc.file_name,
        file_url=doc.file_url,
        category=doc.category,
        unit_id=doc.unit_id,
        ai_summary=doc.ai_summary,
        uploaded_by=doc.uploaded_by,
        created_at=doc.created_at,
        unit_number=unit.unit_number if unit else None,
        property_name=prop.name if prop else None,
        file_extension=file_extension(doc.file_name).lstrip("."),
        summary_length=summary_length_bucket(doc.ai_summary),
    )


async def list_document_views(db: AsyncSession, category: Optional[str] = None) -> list[DocumentView]:
    """All documents, newest first."""
    stmt = _view_query().order_by(Document.created_at.desc())
    if category:
        stmt = stmt.where(Document.category == category)
    result = await db.execute(stmt)
    return [_to_view(d, u, p) for d, u, p in result.all()]


async def get_document_view(db: AsyncSession, document_id: str) -> DocumentView:
    result = await db.execute(_view_query().where(Document.id == document_id))
    row = result.first()
    if row is None:
        raise DocumentNotFoundError(document_id)
    return _to_view(*row)


def storage_path_for_upload(file_name: str, category: str, now_ms: Optional[int] = None) -> str:
    """``{category}/{epoch-millis}.{ext}``; the original name stays on the row."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    ext = file_extension(file_name)
    return f"{category}/{now_ms}{ext}"


async def upload_document(
    db: AsyncSession,
    storage: StorageGateway,
    file_name: str,
    content: bytes,
    category: str = "general",
    content_type: str = "application/octet-stream",
    uploaded_by: Optional[str] = None,
) -> Document:
    """Store the file, then record it. StorageError propagates."""
    path = storage_path_for_upload(file_name, category)
    public_url = await storage.upload(path, content, content_type=content_type)

    document = Document(
        file_name=file_name,
        file_url=public_url,
        category=category,
        uploaded_by=uploaded_by,
    )
    db.add(document)
    await db.commit()
    logger.info("Uploaded document %s as %s", file_name, path)
    return document


async def download_document(
    db: AsyncSession,
    storage: StorageGateway,
    document_id: str,
) -> tuple[Document, bytes]:
    document = await db.get(Document, document_id)
    if document is None:
        raise DocumentNotFoundError(document_id)
    path = storage.path_for(document.file_url) or document.file_url
    return document, await storage.download(path)


async def delete_document(db: AsyncSession, storage: StorageGateway, document_id: str) -> None:
    """Remove the stored object first, then the row."""
    document = await db.get(Document, document_id)
    if document is None:
        raise DocumentNotFoundError(document_id)

    path = storage.path_for(document.file_url)
    if path:
        await storage.remove([path])
    else:
        logger.warning("Document %s has no bucket path; deleting row only", document_id)

    await db.delete(document)
    await db.commit()
    logger.info("Deleted document %s (%s)", document_id, document.file_name)
