"""Writes AI output back onto ``Document.ai_summary``."""

import logging

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from zephvault.domain.models import Document

logger = logging.getLogger(__name__)


async def persist_summary(db: AsyncSession, document_id: str, summary: str) -> bool:
    """Best-effort cache write. Returns False instead of raising.

    There is no version check: when two analyses of the same document run
    at once, whichever commits last is what the cache holds.
    """
    try:
        result = await db.execute(
            update(Document).where(Document.id == document_id).values(ai_summary=summary)
        )
        await db.commit()
    except Exception as exc:
        logger.error("Error storing AI summary for document %s: %s", document_id, exc)
        try:
            await db.rollback()
        except Exception as rollback_exc:
            logger.warning("Rollback after summary write failed: %s", rollback_exc)
        return False

    if result.rowcount == 0:
        logger.warning("AI summary not stored: document %s no longer exists", document_id)
        return False

    logger.info("Stored AI summary for document %s (%d chars)", document_id, len(summary))
    return True
