"""Builds role-tagged message lists for every document agent.

One composer serves all prompt kinds: a system message (template + resolved
context + disclaimer), bounded chat history, then the new user turn.
Document text and user text are inserted verbatim.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from zephvault.agents.prompts.documents import (
    ANALYSIS_SYSTEM_PROMPT,
    ANALYSIS_USER_PROMPT,
    DOCUMENT_CHAT_SYSTEM_PROMPT,
    LEGAL_DISCLAIMER,
    SESSION_CHAT_SYSTEM_PROMPT,
    SESSION_INITIAL_USER_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_USER_PROMPT,
)
from zephvault.domain.schemas import ChatMessage

# Only the most recent turns are replayed to the model.
HISTORY_LIMIT = 10


class PromptKind(str, Enum):
    DOCUMENT_ANALYSIS = "document_analysis"
    DOCUMENT_CHAT = "document_chat"
    SESSION_CHAT = "session_chat"
    DOCUMENT_SUMMARY = "document_summary"


_CHAT_KINDS = {PromptKind.DOCUMENT_CHAT, PromptKind.SESSION_CHAT}

HistoryItem = Union[ChatMessage, dict]


def _as_message(item: HistoryItem) -> dict:
    if isinstance(item, ChatMessage):
        return {"role": item.role.value, "content": item.content}
    role = item.get("role", "user")
    return {"role": getattr(role, "value", role), "content": item.get("content", "")}


@dataclass
class PromptComposer:
    """Parameterised prompt builder shared by all AI endpoints."""

    firm_name: str

    def system_prompt(
        self,
        kind: PromptKind,
        context: str,
        file_name: str = "",
        category: str = "",
    ) -> str:
        if kind is PromptKind.DOCUMENT_ANALYSIS:
            body = ANALYSIS_SYSTEM_PROMPT.format(firm_name=self.firm_name, context=context)
        elif kind is PromptKind.DOCUMENT_CHAT:
            body = DOCUMENT_CHAT_SYSTEM_PROMPT.format(
                file_name=file_name, category=category, context=context
            )
        elif kind is PromptKind.SESSION_CHAT:
            body = SESSION_CHAT_SYSTEM_PROMPT.format(firm_name=self.firm_name, context=context)
        else:
            body = SUMMARY_SYSTEM_PROMPT.format(firm_name=self.firm_name, context=context)
        return f"{body}\n\n{LEGAL_DISCLAIMER}"

    def user_turn(
        self,
        kind: PromptKind,
        user_message: Optional[str] = None,
        category: str = "",
        document_count: int = 0,
        is_initial: bool = False,
    ) -> str:
        if kind is PromptKind.DOCUMENT_ANALYSIS:
            return ANALYSIS_USER_PROMPT
        if kind is PromptKind.DOCUMENT_SUMMARY:
            return SUMMARY_USER_PROMPT.format(category=category or "legal")
        if kind is PromptKind.SESSION_CHAT and is_initial and document_count > 0:
            return SESSION_INITIAL_USER_PROMPT.format(count=document_count)
        return user_message or ""

    def compose(
        self,
        kind: PromptKind,
        context: str,
        history: Optional[Iterable[HistoryItem]] = None,
        user_message: Optional[str] = None,
        file_name: str = "",
        category: str = "",
        document_count: int = 0,
        is_initial: bool = False,
    ) -> list[dict]:
        """Return ``[system, *recent_history, user]`` for *kind*.

        History is ignored for the one-shot kinds (analysis, summary).
        """
        messages = [
            {
                "role": "system",
                "content": self.system_prompt(kind, context, file_name=file_name, category=category),
            }
        ]

        if kind in _CHAT_KINDS and history:
            recent = list(history)[-HISTORY_LIMIT:]
            messages.extend(_as_message(item) for item in recent)

        messages.append(
            {
                "role": "user",
                "content": self.user_turn(
                    kind,
                    user_message=user_message,
                    category=category,
                    document_count=document_count,
                    is_initial=is_initial,
                ),
            }
        )
        return messages
