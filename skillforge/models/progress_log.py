from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime
from ..database import Base


class ProgressLog(Base):
    """One progress snapshot per (user, roadmap, day).

    roadmap_id is not a foreign key; snapshots outlive the
    roadmap they were taken from and keep feeding streaks and charts.
    """

    __tablename__ = "progress_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "roadmap_id", "day", name="uq_progress_log_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    roadmap_id = Column(Integer, index=True, nullable=False)
    day = Column(Date, nullable=False)
    progress = Column(Integer, nullable=False)  # 0-100
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
