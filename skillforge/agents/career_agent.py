"""
Career Agent
============
Interview practice, skill-gap analysis and career insights. All three
surface a 502 when the model returns nothing usable.
"""

import json

from ..ai_client import AIClient
from ..errors import MalformedModelOutput
from ..parsers.normalizer import INSIGHTS, INTERVIEW, SKILL_GAP
from .structured import ask_normalized

CAREER_SYSTEM = """You are an elite career mentor.
Give specific, actionable, honest advice, never generic platitudes."""

DEFAULT_QUESTION_COUNT = 5

INTERVIEW_EXAMPLE = json.dumps({
    "questions": [{"question": "...", "answer": "..."}],
}, indent=4)

SKILL_GAP_EXAMPLE = json.dumps({
    "matching_skills": [{"skill": "SQL", "description": "Already strong"}],
    "missing_skills": [{"skill": "Airflow", "description": "Core orchestration tool for the role"}],
    "recommendations": [{"title": "Build an ETL side project", "description": "Shows end-to-end pipeline skills"}],
}, indent=4)

INSIGHTS_EXAMPLE = json.dumps({
    "summary": "Two sentences on the outlook",
    "trends": [{"title": "...", "description": "..."}],
    "skills": [{"skill": "...", "description": "..."}],
    "roles": [{"title": "...", "description": "..."}],
}, indent=4)


def interview_questions(ai: AIClient, role: str, count: int = DEFAULT_QUESTION_COUNT) -> dict:
    prompt = f"""Write {count} interview questions for a {role} candidate, each with a strong sample answer.

Return ONLY this JSON:
{INTERVIEW_EXAMPLE}"""

    result = ask_normalized(ai, prompt, CAREER_SYSTEM, INTERVIEW)
    if not result["questions"]:
        raise MalformedModelOutput("", message="AI returned no interview questions")
    return result


def skill_gap(ai: AIClient, target_role: str, skills: list[str], resume_text: str = "") -> dict:
    background = f"Current skills: {', '.join(skills)}" if skills else ""
    if resume_text:
        background += f"\n\nRESUME:\n{resume_text[:8000]}"

    prompt = f"""Analyse the skill gap for someone targeting the role: {target_role}
{background}

Return ONLY this JSON:
{SKILL_GAP_EXAMPLE}"""

    result = ask_normalized(ai, prompt, CAREER_SYSTEM, SKILL_GAP)
    if not any(result[name] for name in ("matchingSkills", "missingSkills", "recommendations")):
        raise MalformedModelOutput("", message="AI returned no skill gap analysis")
    return result


def career_insights(ai: AIClient, interest: str) -> dict:
    prompt = f"""Give current career insights for someone interested in: {interest}

Return ONLY this JSON:
{INSIGHTS_EXAMPLE}"""

    result = ask_normalized(ai, prompt, CAREER_SYSTEM, INSIGHTS)
    if not (result["summary"] or result["trends"] or result["skills"] or result["roles"]):
        raise MalformedModelOutput("", message="AI returned no career insights")
    return result
