"""Completion relay: history + persona + new message in, assistant reply out."""
from __future__ import annotations

import logging
from typing import Optional

from app.core.config import Settings
from app.core.errors import ConfigurationError
from app.schemas.chat_schema import ChatRequest
from app.services.chat_store import ChatStore
from app.services.title_service import Completer, maybe_generate_title

logger = logging.getLogger(__name__)


def resolve_system_prompt(store: ChatStore, persona_id: Optional[str]) -> Optional[dict]:
    """System message for the persona, or None when there is no usable persona."""
    if not persona_id:
        return None
    instructions = store.persona_instructions(persona_id)
    if not instructions:
        logger.info("Persona %s not found; continuing without a system prompt", persona_id)
        return None
    return {"role": "system", "content": instructions}


def build_messages(system_prompt: Optional[dict], history: list[dict], user_message: str) -> list[dict]:
    # The provider is stateless: every call carries the whole context.
    messages: list[dict] = []
    if system_prompt is not None:
        messages.append(system_prompt)
    messages.extend(history)
    messages.append({"role": "user", "content": user_message})
    return messages


class ChatRelay:
    def __init__(self, settings: Settings, store: ChatStore, client: Completer):
        self.settings = settings
        self.store = store
        self.client = client

    def resolve_model(self, requested: Optional[str]) -> str:
        return requested or self.settings.DEFAULT_CHAT_MODEL

    def handle(self, request: ChatRequest) -> str:
        if not self.settings.OPENROUTER_API_KEY:
            raise ConfigurationError("OPENROUTER_API_KEY not configured")

        conversation_id = request.conversation_id
        model = self.resolve_model(request.model)

        history = self.store.history(conversation_id)
        system_prompt = resolve_system_prompt(self.store, request.persona_id)
        messages = build_messages(system_prompt, history, request.message)

        reply = self.client.complete(messages, model=model)

        self.store.insert_message(conversation_id, role="user", content=request.message)
        self.store.insert_message(conversation_id, role="assistant", content=reply, model=model)

        count = self.store.count_messages(conversation_id)
        title = maybe_generate_title(
            self.client,
            count,
            request.message,
            model=self.settings.TITLE_MODEL or model,
            max_tokens=self.settings.TITLE_MAX_TOKENS,
            temperature=self.settings.TITLE_TEMPERATURE,
        )
        self.store.touch_conversation(conversation_id, title=title, model=model)

        logger.info(
            "Chat exchange stored: conversation=%s model=%s history=%d titled=%s",
            conversation_id, model, len(history), title is not None,
        )
        return reply
