import logging

from sqlalchemy.orm import Session

from ..errors import NotFound
from ..models import User

logger = logging.getLogger(__name__)

# (threshold, label): each threshold is checked independently
SCORE_BADGES = (
    (80, "Resume Pro"),
    (95, "Resume Elite"),
)


def assign_badge(db: Session, user_id: int, label: str) -> bool:
    """Append `label` to the user's badges unless already held.

    Returns True if the badge was newly added."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    badges = list(user.badges or [])
    if label in badges:
        return False

    user.badges = badges + [label]
    db.commit()
    logger.info("[badges] user %s earned %r", user_id, label)
    return True


def award_score_badges(db: Session, user_id: int, score: int) -> list[str]:
    """Assign every resume badge whose threshold `score` reaches."""
    earned = []
    for threshold, label in SCORE_BADGES:
        if score >= threshold and assign_badge(db, user_id, label):
            earned.append(label)
    return earned
