"""
Resume Agent
============
Resume scoring and resume ↔ job-description matching.

Scoring never fails on a bad completion: if the model text cannot be
recovered as JSON, a score and suggestions are mined from the raw text
instead. JD matching has no such fallback and surfaces a 502.
"""

import json
import logging
import re

from ..ai_client import AIClient
from ..errors import MalformedModelOutput
from ..parsers.normalizer import JD_MATCH, RESUME_SCORE, normalize
from .structured import ask_json, ask_normalized

logger = logging.getLogger(__name__)

REVIEWER_SYSTEM = "You are a professional resume reviewer. Give a score (0-100) and 3-5 suggestions."

MATCHER_SYSTEM = """You are an ATS and hiring-manager hybrid.
Compare the resume against the job description honestly: credit only skills the resume shows."""

DEFAULT_SCORE = 50
DEFAULT_SUGGESTIONS = [
    "Add measurable achievements.",
    "Use strong action verbs.",
    "Tailor resume for specific roles.",
]

_FIRST_INT = re.compile(r"\d{1,3}")
_BULLET = re.compile(r"^[\s\-*•\d.)]+")

JD_MATCH_EXAMPLE = json.dumps({
    "match_score": 68,
    "matched_skills": [{"skill": "Python", "description": "3 years, used in two projects"}],
    "missing_skills": [{"skill": "Kubernetes", "description": "Listed as required"}],
    "suggestions": [{"title": "Mention CI/CD work", "description": "JD stresses deployment automation"}],
}, indent=4)

# Keep prompts within a sane context budget
MAX_RESUME_CHARS = 12000
MAX_JD_CHARS = 6000


def score_resume(ai: AIClient, resume_text: str) -> dict:
    """{"score": 0-100, "suggestions": [str]}. Degrades instead of raising on bad output."""
    prompt = f"""Review this resume.

RESUME:
{resume_text[:MAX_RESUME_CHARS]}

Return ONLY this JSON:
{{
    "score": 72,
    "suggestions": ["Quantify the impact of the CRM project", "Move skills above education"]
}}"""

    try:
        data = ask_json(ai, prompt, REVIEWER_SYSTEM)
    except MalformedModelOutput as e:
        logger.warning("[resume] unparseable review, falling back to text heuristics")
        return fallback_review(e.raw_text)

    result = normalize(data, RESUME_SCORE)
    suggestions = [s["title"] for s in result["suggestions"]]
    return {"score": result["score"], "suggestions": suggestions or list(DEFAULT_SUGGESTIONS)}


def fallback_review(raw_text: str) -> dict:
    """First number in the text is the score (capped at 100, else 50);
    remaining lines become suggestions."""
    match = _FIRST_INT.search(raw_text or "")
    score = min(100, int(match.group())) if match else DEFAULT_SCORE

    suggestions = []
    for line in re.split(r"\n|•", raw_text or ""):
        line = _BULLET.sub("", line).strip()
        if len(line) > 5 and "score" not in line.lower():
            suggestions.append(line)

    return {"score": score, "suggestions": suggestions[:5] or list(DEFAULT_SUGGESTIONS)}


def match_job_description(ai: AIClient, resume_text: str, job_description: str) -> dict:
    prompt = f"""Match this resume against the job description.

RESUME:
{resume_text[:MAX_RESUME_CHARS]}

JOB DESCRIPTION:
{job_description[:MAX_JD_CHARS]}

Return ONLY this JSON:
{JD_MATCH_EXAMPLE}"""

    result = ask_normalized(ai, prompt, MATCHER_SYSTEM, JD_MATCH)
    if not (result["matchedSkills"] or result["missingSkills"] or result["suggestions"] or result["matchScore"]):
        raise MalformedModelOutput("", message="AI returned no match analysis")
    return result
