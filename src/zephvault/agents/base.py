"""Base agent class for all ZephVault AI agents.

Every document agent (analysis, per-document chat, session chat, summary)
inherits from BaseAgent, which provides:

- OpenAI chat-completion access via the infra.openai_client wrapper
- A standard AgentResult return type (Result pattern)
- Categorised failures (missing key, auth, rate limit, quota, generic)
- Automatic latency measurement and token tracking
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import openai

logger = logging.getLogger(__name__)

EMPTY_COMPLETION_FALLBACK = (
    "I apologize, but I was unable to generate a response. Please try again."
)


# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

MISSING_CREDENTIALS = "missing_credentials"
AUTHENTICATION = "authentication"
RATE_LIMIT = "rate_limit"
QUOTA = "quota"
GENERIC = "generic"


def classify_openai_error(exc: Exception) -> str:
    """Map an exception raised by the OpenAI SDK to an error code."""
    if isinstance(exc, openai.AuthenticationError):
        return AUTHENTICATION
    if isinstance(exc, openai.RateLimitError):
        # Quota exhaustion arrives as a 429 too; only the body code differs.
        if getattr(exc, "code", None) == "insufficient_quota":
            return QUOTA
        return RATE_LIMIT
    return GENERIC


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class AgentResult:
    """Standard result type for all agent operations.

    Follows the Result pattern: every agent call returns an AgentResult
    instead of raising exceptions. Callers check ``result.ok`` to
    determine success or failure.

    Attributes:
        ok: True if the operation succeeded.
        data: The response payload (completion text).
        error: Human-readable error description when ``ok`` is False.
        error_code: One of the module-level error codes when ``ok`` is False.
        tokens_used: Total tokens consumed (prompt + completion).
        latency_ms: Wall-clock time for the operation in milliseconds.
    """

    ok: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    tokens_used: int = 0
    latency_ms: int = 0

    @classmethod
    def success(
        cls,
        data: Any,
        tokens_used: int = 0,
        latency_ms: int = 0,
    ) -> "AgentResult":
        """Create a successful result."""
        return cls(
            ok=True,
            data=data,
            tokens_used=tokens_used,
            latency_ms=latency_ms,
        )

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str = GENERIC,
        latency_ms: int = 0,
    ) -> "AgentResult":
        """Create a failure result."""
        return cls(ok=False, error=error, error_code=error_code, latency_ms=latency_ms)


# ---------------------------------------------------------------------------
# Base agent
# ---------------------------------------------------------------------------

class BaseAgent:
    """Base class for all ZephVault agents.

    Subclasses fix the sampling parameters for their use case and call
    ``chat`` with a message list built by the PromptComposer.

    Example::

        class DocumentChatAgent(BaseAgent):
            def __init__(self):
                super().__init__(agent_name="document_chat", temperature=0.3)

            async def reply(self, messages: list[dict]) -> AgentResult:
                return await self.chat(messages)
    """

    def __init__(
        self,
        agent_name: str,
        model_name: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ):
        """Initialise the agent.

        Args:
            agent_name: A short, unique name for this agent (used in logs).
            model_name: The OpenAI model identifier. Defaults to
                ``settings.openai_model`` at call time.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Completion token cap.
        """
        self.agent_name = agent_name
        self.model_name = model_name
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _resolve_model(self) -> str:
        if self.model_name:
            return self.model_name
        from zephvault.app.config import get_settings

        return get_settings().openai_model

    # ------------------------------------------------------------------
    # Core generation
    # ------------------------------------------------------------------

    async def chat(self, messages: list[dict]) -> AgentResult:
        """Send a role-tagged message list and return the first choice.

        Args:
            messages: ``{"role": ..., "content": ...}`` dicts, system
                message first, new user turn last.

        Returns:
            An ``AgentResult`` with the completion text in ``data``.
        """
        from zephvault.infra.openai_client import get_client, has_credentials

        if not has_credentials():
            logger.error("[%s] OpenAI API key not configured", self.agent_name)
            return AgentResult.failure(
                "OpenAI API key not configured", error_code=MISSING_CREDENTIALS
            )
        if not messages:
            return AgentResult.failure("No messages provided for chat.")

        start_time = time.time()
        try:
            client = get_client()
            completion = await client.chat.completions.create(
                model=self._resolve_model(),
                messages=messages,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                stream=False,
            )
            latency_ms = int((time.time() - start_time) * 1000)

            tokens_used = 0
            usage = getattr(completion, "usage", None)
            if usage is not None:
                tokens_used = getattr(usage, "total_tokens", 0) or 0

            response_text = None
            if completion.choices:
                response_text = completion.choices[0].message.content
            if not response_text:
                response_text = EMPTY_COMPLETION_FALLBACK

            logger.info(
                "[%s] Chat succeeded: tokens=%d, latency=%dms, messages=%d",
                self.agent_name,
                tokens_used,
                latency_ms,
                len(messages),
            )

            return AgentResult.success(
                data=response_text,
                tokens_used=tokens_used,
                latency_ms=latency_ms,
            )

        except Exception as exc:
            latency_ms = int((time.time() - start_time) * 1000)
            error_code = classify_openai_error(exc)
            logger.error(
                "[%s] Chat failed after %dms (%s): %s",
                self.agent_name,
                latency_ms,
                error_code,
                exc,
            )
            return AgentResult.failure(str(exc), error_code=error_code, latency_ms=latency_ms)
