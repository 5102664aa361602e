"""
AI Client: single OpenAI-compatible connection
================================================
One AIClient is built when the app starts (see main.lifespan) and handed to
every feature handler through the get_ai_client dependency. Nothing here is
re-created per request.

Default provider is Groq through its OpenAI-compatible endpoint; point
AI_BASE_URL / AI_MODEL elsewhere to swap providers.

A single attempt is made per call. Timeouts and transport retries belong
to the underlying SDK; provider failures surface as AIProviderError.
"""

import logging

import openai
from fastapi import Request
from openai import OpenAI

from .config import Settings
from .errors import AIProviderError

logger = logging.getLogger(__name__)


def strip_think(text: str) -> str:
    """Remove a closed <think>...</think> block emitted by reasoning models.

    If the block is not closed (truncated by max_tokens), returns the
    original text."""
    if "</think>" in text:
        after = text.split("</think>", 1)[1].strip()
        return after if after else text
    return text


class AIClient:
    def __init__(self, config: Settings):
        self.model = config.AI_MODEL
        self.max_tokens = config.AI_MAX_TOKENS
        self.temperature = config.AI_TEMPERATURE
        self._client = OpenAI(
            api_key=config.AI_API_KEY or "missing",
            base_url=config.AI_BASE_URL,
            max_retries=0,
        )

    def chat(
        self,
        messages: list[dict],
        system: str = "",
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        full_messages = []
        if system:
            full_messages.append({"role": "system", "content": system})
        full_messages.extend(messages)

        logger.info("[ai] → %s (%d messages)", self.model, len(full_messages))
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=full_messages,
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature if temperature is None else temperature,
            )
        except openai.OpenAIError as e:
            logger.error("[ai] provider call failed: %s", e)
            raise AIProviderError() from e

        return strip_think(response.choices[0].message.content or "")

    def chat_single(
        self,
        prompt: str,
        system: str = "",
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Convenience wrapper for a single user turn."""
        return self.chat(
            messages=[{"role": "user", "content": prompt}],
            system=system,
            max_tokens=max_tokens,
            temperature=temperature,
        )


def get_ai_client(request: Request) -> AIClient:
    return request.app.state.ai_client
