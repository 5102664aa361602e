"""
Schema Normalizer
=================
Maps whatever shape the model produced onto one canonical shape per feature.

Each feature is declared as a FeatureSchema: its collections (lists of
records), free-text fields and 0-100 scores, each with the key aliases the
model is known to use. One generic pass applies the rules:

  - first alias present wins (keys compared trimmed and lower-cased)
  - a bare string where a record is expected becomes {primary: value, other: ""}
  - a missing or non-list collection becomes []
  - records with an empty primary field are dropped

Empty results are not an error here; feature handlers decide.

Roadmaps have their own canonical form (weeks of exactly four steps) and
their own entry points below.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from ..errors import SchemaValidationError

logger = logging.getLogger(__name__)

STEPS_PER_WEEK = 4

_FIRST_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class Collection:
    name: str
    aliases: tuple
    fields: dict
    primary: str


@dataclass(frozen=True)
class FeatureSchema:
    collections: tuple
    texts: dict = field(default_factory=dict)
    scores: dict = field(default_factory=dict)


def _described(name: str, aliases: tuple, primary: str, primary_aliases: tuple, description_aliases=None):
    return Collection(
        name=name,
        aliases=aliases,
        fields={
            primary: primary_aliases,
            "description": description_aliases or ("description", "desc", "details", "reason", "why"),
        },
        primary=primary,
    )


_SKILL_KEYS = ("skill", "name", "title", "technology")
_TITLE_KEYS = ("title", "name", "role", "trend", "suggestion", "recommendation", "action")

INTERVIEW = FeatureSchema(
    collections=(
        Collection(
            name="questions",
            aliases=("questions", "interview_questions", "interviewquestions", "items", "qa"),
            fields={
                "question": ("question", "q", "prompt"),
                "answer": ("answer", "a", "sample_answer", "sampleanswer", "ideal_answer", "response"),
            },
            primary="question",
        ),
    ),
)

INSIGHTS = FeatureSchema(
    collections=(
        _described("trends", ("trends", "market_trends", "markettrends", "industry_trends"), "title", _TITLE_KEYS),
        _described("skills", ("skills", "in_demand_skills", "indemandskills", "top_skills", "topskills"), "skill", _SKILL_KEYS),
        _described("roles", ("roles", "career_paths", "careerpaths", "job_roles", "jobroles"), "title", _TITLE_KEYS),
    ),
    texts={"summary": ("summary", "overview", "outlook", "salary_outlook")},
)

SKILL_GAP = FeatureSchema(
    collections=(
        _described("matchingSkills", ("matchingskills", "matching_skills", "existing_skills", "strengths"), "skill", _SKILL_KEYS),
        _described("missingSkills", ("missingskills", "missing_skills", "skill_gaps", "skillgaps", "gaps"), "skill", _SKILL_KEYS),
        _described("recommendations", ("recommendations", "next_steps", "nextsteps", "suggestions"), "title", _TITLE_KEYS),
    ),
)

JD_MATCH = FeatureSchema(
    collections=(
        _described("matchedSkills", ("matchedskills", "matched_skills", "matching_skills", "matchingskills"), "skill", _SKILL_KEYS),
        _described("missingSkills", ("missingskills", "missing_skills", "missing_keywords", "gaps"), "skill", _SKILL_KEYS),
        _described("suggestions", ("suggestions", "improvements", "recommendations", "tips"), "title", _TITLE_KEYS),
    ),
    scores={"matchScore": ("matchscore", "match_score", "score", "match_percentage", "match")},
)

RESUME_SCORE = FeatureSchema(
    collections=(
        _described("suggestions", ("suggestions", "improvements", "feedback", "tips"), "title", _TITLE_KEYS),
    ),
    scores={"score": ("score", "resume_score", "resumescore", "overall_score", "rating")},
)


def normalize(data: Any, schema: FeatureSchema) -> dict:
    """Coerce a loosely-typed model payload into `schema`'s canonical shape."""
    if isinstance(data, list) and schema.collections:
        # A bare list stands for the first collection
        data = {schema.collections[0].aliases[0]: data}
    if not isinstance(data, dict):
        data = {}

    result = {}
    for collection in schema.collections:
        items = _pick(data, collection.aliases)
        if not isinstance(items, list):
            items = []
        records = (_record(item, collection) for item in items)
        result[collection.name] = [r for r in records if r is not None]

    for name, aliases in schema.texts.items():
        result[name] = _text(_pick(data, aliases))

    for name, aliases in schema.scores.items():
        result[name] = coerce_score(_pick(data, aliases))

    return result


def coerce_score(value: Any) -> int:
    """Integer 0-100; anything unreadable is 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, str):
        match = _FIRST_NUMBER.search(value)
        if not match:
            return 0
        value = float(match.group())
    if not isinstance(value, (int, float)):
        return 0
    return max(0, min(100, int(round(value))))


def normalize_key(label: str) -> str:
    """Trimmed, whitespace-collapsed, lower-cased form used as a natural key."""
    return " ".join(str(label).split()).lower()


def _pick(data: dict, aliases: tuple) -> Any:
    lowered = {}
    for key, value in data.items():
        if isinstance(key, str):
            lowered.setdefault(key.strip().lower(), value)
    for alias in aliases:
        if lowered.get(alias) is not None:
            return lowered[alias]
    return None


def _record(item: Any, collection: Collection) -> dict | None:
    if isinstance(item, dict):
        record = {name: _text(_pick(item, aliases)) for name, aliases in collection.fields.items()}
    elif isinstance(item, (str, int, float)) and not isinstance(item, bool):
        record = {name: "" for name in collection.fields}
        record[collection.primary] = _text(item)
    else:
        return None
    return record if record[collection.primary] else None


def _text(value: Any) -> str:
    if value is None or isinstance(value, (dict, bool)):
        return ""
    if isinstance(value, list):
        return ", ".join(_text(v) for v in value if _text(v))
    return str(value).strip()


# ── Roadmaps ─────────────────────────────────────────────────────────────────

_WEEK_TITLE_KEYS = ("title", "week", "name")
_WEEK_STEP_KEYS = ("steps", "tasks", "items", "milestones")
_STEP_TEXT_KEYS = ("text", "step", "title", "task", "description")


def normalize_weeks(weeks: Any) -> list[dict]:
    """
    Canonical week list from either accepted external shape:

        {"Week 1": ["a", "b", "c", "d"], ...}
        [{"title": "Week 1", "steps": ["a", "b", "c", "d"]}, ...]

    Both produce identical output. Titles are normalized with normalize_key;
    a title that repeats after normalization keeps its first occurrence.
    Every step starts incomplete. Raises SchemaValidationError if any week
    does not hold exactly STEPS_PER_WEEK steps.
    """
    if isinstance(weeks, dict):
        pairs = list(weeks.items())
    elif isinstance(weeks, list):
        pairs = []
        for week in weeks:
            if not isinstance(week, dict):
                raise SchemaValidationError("Each week must be an object with a title and steps")
            pairs.append((_pick(week, _WEEK_TITLE_KEYS), _pick(week, _WEEK_STEP_KEYS)))
    else:
        raise SchemaValidationError("weeks must be an object of step lists or a list of weeks")

    canonical = []
    seen = set()
    for position, (title, steps) in enumerate(pairs, start=1):
        title = normalize_key(title) if title not in (None, "") else f"week {position}"
        if title in seen:
            logger.warning("[roadmap] dropping duplicate week %r", title)
            continue
        seen.add(title)

        texts = [_step_text(s) for s in (steps if isinstance(steps, list) else [])]
        texts = [t for t in texts if t]
        if len(texts) != STEPS_PER_WEEK:
            raise SchemaValidationError(
                f"Week '{title}' must have exactly {STEPS_PER_WEEK} steps, got {len(texts)}"
            )
        canonical.append({
            "title": title,
            "steps": [{"text": t, "completed": False, "completed_at": None} for t in texts],
        })
    return canonical


def normalize_roadmaps(data: Any) -> dict[str, list[dict]]:
    """
    Generated roadmaps keyed by interest label:
    {"Data Science": {"Week 1": [...4 steps]}, ...}, optionally wrapped in
    {"roadmaps": ...}. Interests repeating after normalize_key keep their
    first occurrence. Raises SchemaValidationError on a malformed week.
    """
    if isinstance(data, dict):
        wrapped = _pick(data, ("roadmaps", "roadmap"))
        if isinstance(wrapped, dict):
            data = wrapped
    if not isinstance(data, dict):
        return {}

    roadmaps = {}
    seen = set()
    for interest, weeks in data.items():
        label = " ".join(str(interest).split())
        key = normalize_key(label)
        if not key or key in seen or not isinstance(weeks, (dict, list)):
            continue
        seen.add(key)
        roadmaps[label] = normalize_weeks(weeks)
    return roadmaps


def weeks_payload(weeks: list[dict]) -> list[dict]:
    """Client-facing week list, in the array shape POST /roadmaps accepts."""
    return [{"title": w["title"], "steps": [s["text"] for s in w["steps"]]} for w in weeks]


def _step_text(step: Any) -> str:
    if isinstance(step, dict):
        return _text(_pick(step, _STEP_TEXT_KEYS))
    return _text(step)
