"""
Roadmap Generator
=================
Asks the model for a multi-week plan per interest and returns it in the
canonical shape POST /roadmaps accepts. Nothing is saved here; the client
picks which generated roadmap to keep.

A model that breaks the four-steps-per-week rule, or returns no roadmap at
all, is treated as an upstream failure (502).
"""

import logging

from ..ai_client import AIClient
from ..errors import MalformedModelOutput, SchemaValidationError
from ..parsers.normalizer import STEPS_PER_WEEK, normalize_roadmaps, weeks_payload
from .structured import ask_json

logger = logging.getLogger(__name__)

MENTOR_SYSTEM = "You are a professional mentor who designs practical, week-by-week learning plans."


def build_prompt(interests: list[str]) -> str:
    return f"""You are an expert career mentor. Create a detailed learning roadmap for each user interest.
- Each roadmap must cover at least 6 weeks.
- Each week should have exactly {STEPS_PER_WEEK} learning steps (clear, actionable, increasing depth).
- Return strictly in JSON format like this:
{{
  "Interest Name": {{
    "Week 1": ["Step 1", "Step 2", "Step 3", "Step 4"],
    "Week 2": ["Step 1", "Step 2", "Step 3", "Step 4"]
  }}
}}
User interests: {", ".join(interests)}"""


def generate_roadmaps(ai: AIClient, interests: list[str]) -> dict[str, list[dict]]:
    """{interest: [{title, steps: [str]}]} for every roadmap the model produced."""
    data = ask_json(ai, build_prompt(interests), MENTOR_SYSTEM)

    try:
        roadmaps = normalize_roadmaps(data)
    except SchemaValidationError as e:
        logger.warning("[roadmap] generated roadmap rejected: %s", e.message)
        raise MalformedModelOutput(str(data), message=f"AI roadmap rejected: {e.message}") from e

    if not roadmaps:
        raise MalformedModelOutput(str(data), message="AI returned no roadmaps")

    return {interest: weeks_payload(weeks) for interest, weeks in roadmaps.items()}
