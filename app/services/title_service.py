from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from app.core.errors import RelayError

logger = logging.getLogger(__name__)

# A conversation's first exchange leaves exactly this many stored messages.
FIRST_EXCHANGE_MESSAGE_COUNT = 2

TITLE_MAX_LENGTH = 255

_TITLE_SYSTEM_PROMPT = (
    "You generate short titles for chat conversations.\n"
    "- Reply with a title of 3 to 5 words that summarizes the user's message.\n"
    "- Use the same language as the user's message.\n"
    "- Output ONLY the title (no quotes, no trailing punctuation, no commentary)."
)


class Completer(Protocol):
    def complete(
        self,
        messages: list[dict],
        *,
        model: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str: ...


def clean_title(raw: str) -> str:
    title = raw.strip()
    # first line only, models sometimes add an explanation below
    title = title.splitlines()[0] if title else ""
    title = title.strip().rstrip(".").strip().strip("\"'«»").strip().rstrip(".").strip()
    return title[:TITLE_MAX_LENGTH]


def generate_title(
    client: Completer,
    user_message: str,
    *,
    model: str,
    max_tokens: int = 20,
    temperature: float = 0.7,
) -> str:
    raw = client.complete(
        [
            {"role": "system", "content": _TITLE_SYSTEM_PROMPT},
            {"role": "user", "content": user_message},
        ],
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return clean_title(raw)


def maybe_generate_title(
    client: Completer,
    message_count: int,
    user_message: str,
    *,
    model: str,
    max_tokens: int = 20,
    temperature: float = 0.7,
) -> Optional[str]:
    """Title for the conversation if this was its first exchange, else None.

    Failures of the title call are logged and reported as None; they never
    fail the exchange itself.
    """
    if message_count != FIRST_EXCHANGE_MESSAGE_COUNT:
        return None

    try:
        title = generate_title(
            client,
            user_message,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except (RelayError, httpx.HTTPError) as e:
        logger.warning("Title generation failed; keeping current title. error=%s", str(e))
        return None

    if not title:
        logger.warning("Title generation returned an empty title; keeping current title.")
        return None
    return title
