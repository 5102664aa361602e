from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import get_current_user
from ...database import get_db
from ...models import User
from ...progress.roadmaps import average_progress
from ...progress.streaks import user_streaks

router = APIRouter()


@router.get("")
def get_dashboard(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Resume score, average roadmap progress, interests and streaks."""
    streaks = user_streaks(db, user.id)
    return {
        "resumeScore": user.resume_score or 0,
        "roadmapProgress": average_progress(db, user.id),
        "interests": user.interests or [],
        **streaks.to_dict(),
    }
