"""
Roadmap Progress Engine
=======================
Saved roadmaps, step completion and the daily progress snapshots that feed
streaks and charts.

Rules:
  - A roadmap belongs to one user; every lookup goes through
    load_owned_roadmap, which answers NotFound for both "no such id" and
    "someone else's id".
  - (user, normalized interest) is the natural key. Saving an existing
    interest replaces the whole week/step structure and resets progress.
  - MAX_ROADMAPS applies only when a new interest is saved.
  - Progress is never stored on the roadmap; it is recomputed from steps.
  - After every change the day's snapshot is upserted in its own
    transaction. A failure in between leaves the snapshot stale until the
    next change, which is acceptable for display-only data.
  - Deleting a roadmap keeps its snapshots.
"""

import copy
import logging
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..errors import InvalidIndex, NotFound, QuotaExceeded, ValidationError
from ..models import ProgressLog, Roadmap
from ..models.roadmap import MAX_INTEREST_LENGTH
from ..parsers.normalizer import normalize_key, normalize_weeks

logger = logging.getLogger(__name__)


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def progress_percent(roadmap: Roadmap) -> int:
    """round(100 * completed / total), 0 for a roadmap with no steps."""
    steps = [s for w in (roadmap.weeks or []) for s in w.get("steps", [])]
    if not steps:
        return 0
    done = sum(1 for s in steps if s.get("completed"))
    return _round_half_up(100 * done, len(steps))


def with_progress(roadmap: Roadmap) -> dict:
    return {
        "id": roadmap.id,
        "interest": roadmap.interest,
        "weeks": [
            {
                "title": week["title"],
                "steps": [
                    {
                        "text": step["text"],
                        "completed": bool(step.get("completed")),
                        "completedAt": step.get("completed_at"),
                    }
                    for step in week.get("steps", [])
                ],
            }
            for week in roadmap.weeks or []
        ],
        "progress": progress_percent(roadmap),
        "createdAt": roadmap.created_at.isoformat() if roadmap.created_at else None,
        "updatedAt": roadmap.updated_at.isoformat() if roadmap.updated_at else None,
    }


def load_owned_roadmap(db: Session, owner_id: int, roadmap_id: int) -> Roadmap:
    roadmap = (
        db.query(Roadmap)
        .filter(Roadmap.id == roadmap_id, Roadmap.user_id == owner_id)
        .first()
    )
    if roadmap is None:
        raise NotFound("Roadmap not found")
    return roadmap


def list_roadmaps(db: Session, owner_id: int) -> list[Roadmap]:
    return (
        db.query(Roadmap)
        .filter(Roadmap.user_id == owner_id)
        .order_by(Roadmap.updated_at.desc(), Roadmap.id.desc())
        .all()
    )


def create_or_replace(
    db: Session,
    owner_id: int,
    interest: str,
    weeks,
    max_roadmaps: int | None = None,
) -> Roadmap:
    """Save `weeks` as the owner's roadmap for `interest`, replacing any
    roadmap already saved under the same normalized interest."""
    limit = settings.MAX_ROADMAPS if max_roadmaps is None else max_roadmaps
    label = " ".join(str(interest or "").split())
    if not label or weeks is None:
        raise ValidationError("interest and weeks are required")
    if max(len(label), len(normalize_key(label))) > MAX_INTEREST_LENGTH:
        raise ValidationError(f"interest must be at most {MAX_INTEREST_LENGTH} characters")

    # Validates the whole structure before anything is written
    canonical = normalize_weeks(weeks)
    key = normalize_key(label)

    roadmap = _find_by_interest(db, owner_id, key)
    if roadmap is None:
        count = db.query(Roadmap).filter(Roadmap.user_id == owner_id).count()
        if count >= limit:
            raise QuotaExceeded(f"You can only save up to {limit} roadmaps.")
        roadmap = Roadmap(user_id=owner_id, interest_key=key)
        db.add(roadmap)

    roadmap.interest = label
    roadmap.weeks = canonical
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request created the same interest first; replace it
        db.rollback()
        roadmap = _find_by_interest(db, owner_id, key)
        if roadmap is None:
            raise
        roadmap.interest = label
        roadmap.weeks = canonical
        db.commit()

    db.refresh(roadmap)
    logger.info("[roadmap] saved %r for user %s (%d weeks)", label, owner_id, len(canonical))
    upsert_today_log(db, owner_id, roadmap.id, progress_percent(roadmap))
    return roadmap


def toggle_step(
    db: Session,
    owner_id: int,
    roadmap_id: int,
    week_index: int,
    step_index: int,
    completed: bool | None = None,
) -> Roadmap:
    """Set a step's completion to `completed`, or flip it when omitted."""
    roadmap = load_owned_roadmap(db, owner_id, roadmap_id)

    weeks = copy.deepcopy(roadmap.weeks or [])
    if not 0 <= week_index < len(weeks):
        raise InvalidIndex("Invalid weekIndex")
    steps = weeks[week_index].get("steps") or []
    if not 0 <= step_index < len(steps):
        raise InvalidIndex("Invalid stepIndex")

    step = steps[step_index]
    value = (not step.get("completed")) if completed is None else bool(completed)
    step["completed"] = value
    step["completed_at"] = datetime.utcnow().isoformat() if value else None

    # Reassign so the JSON column is flagged dirty
    roadmap.weeks = weeks
    db.commit()
    db.refresh(roadmap)

    upsert_today_log(db, owner_id, roadmap.id, progress_percent(roadmap))
    return roadmap


def delete_roadmap(db: Session, owner_id: int, roadmap_id: int) -> None:
    roadmap = load_owned_roadmap(db, owner_id, roadmap_id)
    db.delete(roadmap)
    db.commit()
    logger.info("[roadmap] deleted %s for user %s (snapshots kept)", roadmap_id, owner_id)


def upsert_today_log(
    db: Session,
    owner_id: int,
    roadmap_id: int,
    progress: int,
    today: date | None = None,
) -> None:
    """Record `progress` as the (owner, roadmap) snapshot for today."""
    day = today or datetime.utcnow().date()
    match = db.query(ProgressLog).filter(
        ProgressLog.user_id == owner_id,
        ProgressLog.roadmap_id == roadmap_id,
        ProgressLog.day == day,
    )

    log = match.first()
    if log is not None:
        log.progress = progress
        db.commit()
        return

    db.add(ProgressLog(user_id=owner_id, roadmap_id=roadmap_id, day=day, progress=progress))
    try:
        db.commit()
    except IntegrityError:
        # Lost the insert race; the unique row exists now
        db.rollback()
        match.update({ProgressLog.progress: progress}, synchronize_session=False)
        db.commit()


def progress_logs(db: Session, owner_id: int, roadmap_id: int) -> list[dict]:
    """Snapshots ascending by day. Scoped by owner only, so history of a
    deleted roadmap stays readable."""
    rows = (
        db.query(ProgressLog.day, ProgressLog.progress)
        .filter(ProgressLog.user_id == owner_id, ProgressLog.roadmap_id == roadmap_id)
        .order_by(ProgressLog.day.asc())
        .all()
    )
    return [{"date": day.isoformat(), "progress": progress} for day, progress in rows]


def average_progress(db: Session, owner_id: int) -> int:
    roadmaps = list_roadmaps(db, owner_id)
    if not roadmaps:
        return 0
    total = sum(progress_percent(r) for r in roadmaps)
    return _round_half_up(total, len(roadmaps))


def _find_by_interest(db: Session, owner_id: int, interest_key: str) -> Roadmap | None:
    return (
        db.query(Roadmap)
        .filter(Roadmap.user_id == owner_id, Roadmap.interest_key == interest_key)
        .first()
    )
