import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import Field
from sqlalchemy.orm import Session

from ..deps import get_current_user
from ..schemas import CamelModel
from ...agents import career_agent, resume_agent, roadmap_agent
from ...ai_client import AIClient, get_ai_client
from ...config import settings
from ...database import get_db
from ...errors import ValidationError
from ...models import User
from ...parsers.resume_parser import extract_resume_text
from ...progress.badges import award_score_badges

logger = logging.getLogger(__name__)

router = APIRouter()

# Legacy dashboard figure recorded whenever roadmaps are generated
GENERATED_ROADMAP_PROGRESS = 10


class GenerateRoadmapRequest(CamelModel):
    interests: List[str] = []


class MatchJDRequest(CamelModel):
    job_description: str = ""
    resume_text: Optional[str] = None


class InterviewRequest(CamelModel):
    role: str = ""
    count: int = Field(default=career_agent.DEFAULT_QUESTION_COUNT, ge=1, le=20)


class SkillGapRequest(CamelModel):
    target_role: str = ""
    skills: List[str] = []
    resume_text: Optional[str] = None


class InsightsRequest(CamelModel):
    interest: str = ""


def _required(value: Optional[str], message: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(message)
    return value


@router.post("/generate-roadmap")
def generate_roadmap(
    request: GenerateRoadmapRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai: AIClient = Depends(get_ai_client),
):
    interests = [i.strip() for i in request.interests if i and i.strip()]
    if not interests:
        raise ValidationError("No interests provided")

    roadmaps = roadmap_agent.generate_roadmaps(ai, interests)

    user.roadmap_progress = GENERATED_ROADMAP_PROGRESS
    db.commit()
    return {"roadmaps": roadmaps, "progress": GENERATED_ROADMAP_PROGRESS}


@router.post("/analyze-resume")
def analyze_resume(
    file: Optional[UploadFile] = File(None),
    text: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai: AIClient = Depends(get_ai_client),
):
    """Score a resume (uploaded PDF/DOCX/TXT, or pasted text) and award badges."""
    if file is not None and file.filename:
        data = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
        if len(data) > settings.MAX_UPLOAD_BYTES:
            raise ValidationError("File too large (max 5 MB)")
        extracted = extract_resume_text(file.filename, file.content_type, data)
    else:
        extracted = text

    extracted = (extracted or "").strip()
    if not extracted:
        raise ValidationError("No resume text found!")

    review = resume_agent.score_resume(ai, extracted)

    user.resume_score = review["score"]
    user.resume_text = extracted
    db.commit()

    award_score_badges(db, user.id, review["score"])
    db.refresh(user)
    return {**review, "badges": user.badges or []}


@router.post("/match-jd")
def match_resume_with_jd(
    request: MatchJDRequest,
    user: User = Depends(get_current_user),
    ai: AIClient = Depends(get_ai_client),
):
    job_description = _required(request.job_description, "Job description is required")
    resume_text = _required(
        request.resume_text or user.resume_text,
        "Resume text is required (analyze a resume first or send resumeText)",
    )
    return resume_agent.match_job_description(ai, resume_text, job_description)


@router.post("/interview")
def generate_interview_questions(
    request: InterviewRequest,
    user: User = Depends(get_current_user),
    ai: AIClient = Depends(get_ai_client),
):
    role = _required(request.role, "Role is required")
    return career_agent.interview_questions(ai, role, count=request.count)


@router.post("/skill-gap")
def analyze_skill_gap(
    request: SkillGapRequest,
    user: User = Depends(get_current_user),
    ai: AIClient = Depends(get_ai_client),
):
    target_role = _required(request.target_role, "Target role is required")
    skills = [s.strip() for s in request.skills if s and s.strip()]
    resume_text = request.resume_text or user.resume_text or ""
    return career_agent.skill_gap(ai, target_role, skills, resume_text=resume_text)


@router.post("/insights")
def get_career_insights(
    request: InsightsRequest,
    user: User = Depends(get_current_user),
    ai: AIClient = Depends(get_ai_client),
):
    interest = _required(request.interest, "Interest is required")
    return career_agent.career_insights(ai, interest)
