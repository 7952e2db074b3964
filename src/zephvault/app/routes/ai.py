"""AI document endpoints: analysis, summaries and chat."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.agents import base as agent_errors
from zephvault.agents.base import AgentResult
from zephvault.app.config import get_settings
from zephvault.domain.schemas import (
    AnalyzeDocumentRequest,
    ChatRequest,
    DocumentChatRequest,
    SummarizeDocumentRequest,
)
from zephvault.infra import openai_client
from zephvault.infra.database import get_db
from zephvault.infra.storage import StorageGateway, get_storage
from zephvault.services import document_ai_service
from zephvault.services.document_ai_service import SummaryPersistError
from zephvault.services.document_content import DocumentContentResolver
from zephvault.services.document_service import DocumentNotFoundError
from zephvault.services.prompt_composer import PromptComposer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["ai"])

_FAILURE_STATUS = {
    agent_errors.MISSING_CREDENTIALS: 500,
    agent_errors.AUTHENTICATION: 401,
    agent_errors.RATE_LIMIT: 429,
    agent_errors.QUOTA: 503,
    agent_errors.GENERIC: 502,
}

_FAILURE_DETAIL = {
    agent_errors.MISSING_CREDENTIALS: "OpenAI API key not configured",
    agent_errors.AUTHENTICATION: "OpenAI API key is invalid or missing",
    agent_errors.RATE_LIMIT: "Rate limit exceeded. Please try again in a moment.",
    agent_errors.QUOTA: "OpenAI quota exhausted. Please check the billing settings.",
}


def require_llm_credentials() -> None:
    """Reject AI requests before any lookup when no OpenAI key is configured."""
    if not openai_client.has_credentials():
        raise HTTPException(
            status_code=500,
            detail=_FAILURE_DETAIL[agent_errors.MISSING_CREDENTIALS],
        )


def get_resolver(storage: StorageGateway = Depends(get_storage)) -> DocumentContentResolver:
    return DocumentContentResolver(storage)


def get_composer() -> PromptComposer:
    return PromptComposer(firm_name=get_settings().firm_name)


def _raise_for_agent_failure(result: AgentResult) -> None:
    """Turn a failed AgentResult into the matching HTTP error."""
    if result.ok:
        return
    status = _FAILURE_STATUS.get(result.error_code, 502)
    detail = _FAILURE_DETAIL.get(result.error_code, result.error or "AI request failed")
    raise HTTPException(status_code=status, detail=detail)


@router.post("/ai-analyze-document", dependencies=[Depends(require_llm_credentials)])
async def analyze_document(
    body: AnalyzeDocumentRequest,
    db: AsyncSession = Depends(get_db),
    resolver: DocumentContentResolver = Depends(get_resolver),
    composer: PromptComposer = Depends(get_composer),
):
    """Forensic analysis of one document; the result is cached as its summary."""
    try:
        outcome = await document_ai_service.analyze_document(
            db,
            resolver,
            composer,
            body.document.id,
            excerpt=body.document_excerpt,
        )
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Could not fetch document details")

    _raise_for_agent_failure(outcome.result)
    return {
        "summary": outcome.result.data,
        "message": "Document analysis completed successfully",
    }


@router.post("/ai-chat", dependencies=[Depends(require_llm_credentials)])
async def session_chat(
    body: ChatRequest,
    db: AsyncSession = Depends(get_db),
    resolver: DocumentContentResolver = Depends(get_resolver),
    composer: PromptComposer = Depends(get_composer),
):
    result = await document_ai_service.chat_with_session(
        db,
        resolver,
        composer,
        body.documents,
        body.message,
        history=body.conversation_history,
        is_initial=body.is_initial,
    )
    _raise_for_agent_failure(result)
    return {"response": result.data, "tokensUsed": result.tokens_used}


@router.post("/ai-document-chat", dependencies=[Depends(require_llm_credentials)])
async def document_chat(
    body: DocumentChatRequest,
    db: AsyncSession = Depends(get_db),
    resolver: DocumentContentResolver = Depends(get_resolver),
    composer: PromptComposer = Depends(get_composer),
):
    result = await document_ai_service.chat_with_document(
        db,
        resolver,
        composer,
        body.document,
        body.message,
        history=body.conversation_history,
    )
    _raise_for_agent_failure(result)
    return {"message": result.data, "documentId": body.document.id}


@router.post("/summarize-document", dependencies=[Depends(require_llm_credentials)])
async def summarize_document(
    body: SummarizeDocumentRequest,
    db: AsyncSession = Depends(get_db),
    resolver: DocumentContentResolver = Depends(get_resolver),
    composer: PromptComposer = Depends(get_composer),
):
    """Five-bullet summary, stored on the document."""
    if not body.document_id:
        raise HTTPException(status_code=400, detail="Document ID is required")

    try:
        result = await document_ai_service.summarize_document(
            db, resolver, composer, body.document_id
        )
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Document not found")
    except SummaryPersistError as exc:
        logger.error("%s", exc)
        raise HTTPException(status_code=500, detail="Failed to save summary")

    _raise_for_agent_failure(result)
    return {
        "success": True,
        "summary": result.data,
        "message": "Summary generated successfully",
    }
