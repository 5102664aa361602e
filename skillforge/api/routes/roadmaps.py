from fastapi import APIRouter, Depends
from pydantic import Field, StrictBool
from typing import Any, Optional
from sqlalchemy.orm import Session

from ..schemas import CamelModel
from ...auth import get_current_user_id
from ...database import get_db
from ...progress import roadmaps as engine
from ...progress.streaks import user_streaks

router = APIRouter()


class RoadmapRequest(CamelModel):
    interest: str = ""
    weeks: Optional[dict[str, Any] | list[Any]] = None


class ToggleStepRequest(CamelModel):
    week_index: int
    step_index: int
    completed: Optional[StrictBool] = Field(default=None)


@router.post("")
def create_or_replace_roadmap(
    request: RoadmapRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Save (or replace) the roadmap for an interest. Max 10 per user."""
    roadmap = engine.create_or_replace(db, user_id, request.interest, request.weeks)
    return {"roadmap": engine.with_progress(roadmap)}


@router.get("")
def list_roadmaps(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return {"roadmaps": [engine.with_progress(r) for r in engine.list_roadmaps(db, user_id)]}


@router.get("/streak")
def get_streaks(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Current & longest streak across ALL of the user's roadmaps."""
    return user_streaks(db, user_id).to_dict()


@router.get("/{roadmap_id}")
def get_roadmap(
    roadmap_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    roadmap = engine.load_owned_roadmap(db, user_id, roadmap_id)
    return {"roadmap": engine.with_progress(roadmap)}


@router.patch("/{roadmap_id}/step")
def toggle_step(
    roadmap_id: int,
    request: ToggleStepRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Set a step's completion; toggles when `completed` is omitted."""
    roadmap = engine.toggle_step(
        db,
        user_id,
        roadmap_id,
        week_index=request.week_index,
        step_index=request.step_index,
        completed=request.completed,
    )
    return {"roadmap": engine.with_progress(roadmap)}


@router.get("/{roadmap_id}/logs")
def get_progress_logs(
    roadmap_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return {"logs": engine.progress_logs(db, user_id, roadmap_id)}


@router.get("/{roadmap_id}/streak")
def get_roadmap_streaks(
    roadmap_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Streaks over one roadmap's snapshots (kept after the roadmap is deleted)."""
    return user_streaks(db, user_id, roadmap_id=roadmap_id).to_dict()


@router.delete("/{roadmap_id}")
def delete_roadmap(
    roadmap_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    engine.delete_roadmap(db, user_id, roadmap_id)
    return {"message": "Roadmap deleted successfully"}
