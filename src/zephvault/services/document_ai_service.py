"""AI workflows over documents: analysis, summaries and both chat modes.

Each workflow resolves document context, composes messages with the shared
PromptComposer, runs one agent call and, for analysis/summary, caches the
output on the document.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.agents.base import AgentResult
from zephvault.agents.document_analysis_agent import DocumentAnalysisAgent
from zephvault.agents.document_chat_agent import DocumentChatAgent
from zephvault.agents.session_chat_agent import SessionChatAgent
from zephvault.agents.summary_agent import DocumentSummaryAgent
from zephvault.domain.models import Document
from zephvault.domain.schemas import DocumentRef
from zephvault.services.document_content import DocumentContentResolver, DocumentContext
from zephvault.services.document_service import DocumentNotFoundError
from zephvault.services.prompt_composer import PromptComposer, PromptKind
from zephvault.services.summary_service import persist_summary

logger = logging.getLogger(__name__)


class SummaryPersistError(RuntimeError):
    """Raised when a summary that must be stored could not be."""


@dataclass
class AnalysisOutcome:
    result: AgentResult
    context: DocumentContext
    persisted: bool = False


async def _load_document(db: AsyncSession, document_id: str) -> Document:
    document = await db.get(Document, document_id)
    if document is None:
        raise DocumentNotFoundError(document_id)
    return document


async def analyze_document(
    db: AsyncSession,
    resolver: DocumentContentResolver,
    composer: PromptComposer,
    document_id: str,
    excerpt: Optional[str] = None,
    agent: Optional[DocumentAnalysisAgent] = None,
) -> AnalysisOutcome:
    """Analyze one document and cache the result as its ``ai_summary``.

    The document lookup is fatal (DocumentNotFoundError). The cache write
    is not: ``persisted`` reports whether it landed.
    """
    document = await _load_document(db, document_id)
    context = await resolver.resolve(document, excerpt=excerpt)
    logger.info(
        "Analyzing document %s (%s): context=%d chars, primary source=%s",
        document.id,
        document.file_name,
        len(context.text),
        context.primary_source.value,
    )

    messages = composer.compose(PromptKind.DOCUMENT_ANALYSIS, context.text)
    result = await (agent or DocumentAnalysisAgent()).analyze(messages)

    outcome = AnalysisOutcome(result=result, context=context)
    if result.ok:
        outcome.persisted = await persist_summary(db, document.id, result.data)
        if not outcome.persisted:
            logger.info("Returning analysis for %s without caching it", document.id)
    return outcome


async def summarize_document(
    db: AsyncSession,
    resolver: DocumentContentResolver,
    composer: PromptComposer,
    document_id: str,
    agent: Optional[DocumentSummaryAgent] = None,
) -> AgentResult:
    """Five-bullet summary; unlike analysis the write-back is required."""
    document = await _load_document(db, document_id)
    context = await resolver.resolve(document)
    messages = composer.compose(
        PromptKind.DOCUMENT_SUMMARY, context.text, category=document.category
    )
    result = await (agent or DocumentSummaryAgent()).summarize(messages)
    if result.ok and not await persist_summary(db, document.id, result.data):
        raise SummaryPersistError(f"Failed to save summary for document {document.id}")
    return result


async def chat_with_document(
    db: AsyncSession,
    resolver: DocumentContentResolver,
    composer: PromptComposer,
    document: DocumentRef,
    message: str,
    history: Optional[Iterable[Any]] = None,
    agent: Optional[DocumentChatAgent] = None,
) -> AgentResult:
    """Answer *message* about one document.

    Prefers the stored row; if it cannot be loaded the metadata sent by the
    client is used instead.
    """
    source: Any = document
    try:
        stored = await db.get(Document, document.id)
        if stored is not None:
            source = stored
        else:
            logger.warning("Document %s not found, chatting on request metadata", document.id)
    except Exception as exc:
        logger.warning("Could not load document %s, using fallback: %s", document.id, exc)

    context = await resolver.resolve(source)
    messages = composer.compose(
        PromptKind.DOCUMENT_CHAT,
        context.text,
        history=history,
        user_message=message,
        file_name=source.file_name,
        category=source.category,
    )
    return await (agent or DocumentChatAgent()).reply(messages)


async def _refresh_summaries(db: AsyncSession, documents: list[DocumentRef]) -> list[Any]:
    """Swap in stored rows so freshly cached summaries reach the prompt."""
    ids = [doc.id for doc in documents]
    if not ids:
        return []
    try:
        result = await db.execute(select(Document).where(Document.id.in_(ids)))
        stored = {row.id: row for row in result.scalars().all()}
    except Exception as exc:
        logger.warning("Could not refresh session documents: %s", exc)
        return list(documents)

    refreshed = []
    for doc in documents:
        row = stored.get(doc.id)
        if row is not None and row.ai_summary:
            refreshed.append(row)
        else:
            refreshed.append(doc)
    return refreshed


async def chat_with_session(
    db: AsyncSession,
    resolver: DocumentContentResolver,
    composer: PromptComposer,
    documents: list[DocumentRef],
    message: str,
    history: Optional[Iterable[Any]] = None,
    is_initial: bool = False,
    agent: Optional[SessionChatAgent] = None,
) -> AgentResult:
    """Conversational Q&A across all documents of a chat session."""
    session_documents = await _refresh_summaries(db, documents)
    context = resolver.resolve_session(session_documents)
    messages = composer.compose(
        PromptKind.SESSION_CHAT,
        context,
        history=history,
        user_message=message,
        document_count=len(documents),
        is_initial=is_initial,
    )
    result = await (agent or SessionChatAgent()).reply(messages)
    logger.info(
        "Session chat: documents=%d, message_len=%d, initial=%s, ok=%s",
        len(documents),
        len(message or ""),
        is_initial,
        result.ok,
    )
    return result
