import logging
from typing import Any

from ..ai_client import AIClient
from ..parsers.json_extractor import extract
from ..parsers.normalizer import FeatureSchema, normalize

logger = logging.getLogger(__name__)

JSON_ONLY = "Always respond with strict JSON only. No markdown, no text outside JSON."


def ask_json(ai: AIClient, prompt: str, system: str, **kwargs) -> Any:
    """One completion, recovered as structured data.

    Raises MalformedModelOutput when no parse strategy succeeds."""
    response_text = ai.chat_single(prompt=prompt, system=f"{system}\n{JSON_ONLY}", **kwargs)
    extraction = extract(response_text)
    logger.debug("[ai] parsed response via %s", extraction.strategy)
    return extraction.value


def ask_normalized(ai: AIClient, prompt: str, system: str, schema: FeatureSchema, **kwargs) -> dict:
    return normalize(ask_json(ai, prompt, system, **kwargs), schema)
