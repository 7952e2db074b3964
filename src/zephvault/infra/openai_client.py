"""OpenAI client factory for ZephVault agents."""

from functools import lru_cache

from openai import AsyncOpenAI

from zephvault.app.config import get_settings

# Hard limit per completion call; the SDK's own retries are disabled so a
# failed call surfaces to the caller straight away.
REQUEST_TIMEOUT_SECONDS = 120.0


def has_credentials() -> bool:
    """True when an OpenAI API key is configured."""
    return bool(get_settings().openai_api_key)


@lru_cache
def get_client() -> AsyncOpenAI:
    """Return the process-wide AsyncOpenAI client.

    Callers must check ``has_credentials()`` first; the SDK refuses to
    build a client without a key.
    """
    settings = get_settings()
    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        timeout=REQUEST_TIMEOUT_SECONDS,
        max_retries=0,
    )
