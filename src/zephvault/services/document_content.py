"""Resolves what text is known about a document before prompting.

Precedence, highest first: user-pasted excerpt, freshly read ``.txt``/``.md``
content, the cached ``ai_summary``, bare metadata. Other file types (PDF,
Word...) are never parsed; without an excerpt or summary they get a fixed
placeholder asking for a manual excerpt. Storage failures degrade to
metadata and are never raised.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Iterable, Optional

from zephvault.agents.prompts.documents import NO_SESSION_DOCUMENTS
from zephvault.infra.storage import StorageGateway

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({".txt", ".md"})

MANUAL_EXTRACTION_PLACEHOLDER = (
    "This file type requires manual extraction: no text content was extracted "
    "automatically, so the analysis is based on the filename and metadata only. "
    "Paste the relevant sections of the document as an excerpt for a detailed analysis."
)

SESSION_SEPARATOR = "\n---\n"


class ContextSource(str, Enum):
    EXCERPT = "excerpt"
    FILE_CONTENT = "file_content"
    CACHED_SUMMARY = "cached_summary"
    MANUAL_EXTRACTION = "manual_extraction"
    METADATA = "metadata"


@dataclass
class DocumentContext:
    """Assembled prompt context for one document."""

    text: str
    sources: list[ContextSource] = field(default_factory=list)

    @property
    def primary_source(self) -> ContextSource:
        return self.sources[0] if self.sources else ContextSource.METADATA


def file_extension(file_name: str) -> str:
    """Lower-case suffix including the dot, e.g. ``.pdf``; empty when absent."""
    return PurePosixPath(file_name or "").suffix.lower()


def is_text_file(file_name: str) -> bool:
    return file_extension(file_name) in TEXT_EXTENSIONS


def _metadata_header(document: Any) -> str:
    return (
        "Document Information:\n"
        f"File Name: {document.file_name}\n"
        f"Category: {document.category}\n"
        f"Document ID: {document.id}"
    )


class DocumentContentResolver:
    """Turns a document record (ORM row or request ref) into prompt context."""

    def __init__(self, storage: Optional[StorageGateway] = None) -> None:
        self._storage = storage

    async def read_text_content(self, document: Any) -> Optional[str]:
        """Download and decode a text/markdown file. None on any failure."""
        file_url = getattr(document, "file_url", None)
        if self._storage is None or not file_url:
            return None

        path = self._storage.path_for(file_url)
        if path is None:
            logger.warning(
                "Document %s has no bucket path in its URL: %s", document.id, file_url
            )
            return None

        try:
            raw = await self._storage.download(path)
        except Exception as exc:
            logger.warning("Could not read content of document %s: %s", document.id, exc)
            return None

        text = raw.decode("utf-8", errors="replace")
        logger.info("Read %d chars of text content for document %s", len(text), document.id)
        return text

    async def resolve(self, document: Any, excerpt: Optional[str] = None) -> DocumentContext:
        """Assemble the context for *document*, highest-precedence section first.

        Args:
            document: Anything with ``id``, ``file_name``, ``category`` and
                optionally ``file_url`` / ``ai_summary``.
            excerpt: Text the user pasted from the document.
        """
        sections = [_metadata_header(document)]
        sources: list[ContextSource] = []

        excerpt = (excerpt or "").strip()
        if excerpt:
            sections.append(f"Document Excerpt (User Provided):\n{excerpt}")
            sources.append(ContextSource.EXCERPT)

        if is_text_file(document.file_name):
            content = await self.read_text_content(document)
            if content and content.strip():
                sections.append(f"Document Content:\n{content}")
                sources.append(ContextSource.FILE_CONTENT)

        summary = (getattr(document, "ai_summary", None) or "").strip()
        if summary:
            sections.append(f"Previous Summary:\n{summary}")
            sources.append(ContextSource.CACHED_SUMMARY)

        if not is_text_file(document.file_name) and not sources:
            sections.append(f"Document Content:\n{MANUAL_EXTRACTION_PLACEHOLDER}")
            sources.append(ContextSource.MANUAL_EXTRACTION)

        if not sources:
            sources.append(ContextSource.METADATA)

        return DocumentContext(text="\n\n".join(sections), sources=sources)

    def resolve_session(self, documents: Iterable[Any]) -> str:
        """Metadata and cached summaries for several documents. No storage reads."""
        blocks = []
        for doc in documents:
            block = f"Document: {doc.file_name}\nCategory: {doc.category}\n"
            if getattr(doc, "ai_summary", None):
                block += f"Previous Summary: {doc.ai_summary}\n"
            blocks.append(block)
        return SESSION_SEPARATOR.join(blocks) if blocks else NO_SESSION_DOCUMENTS
