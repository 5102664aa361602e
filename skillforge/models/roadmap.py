from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base

MAX_INTEREST_LENGTH = 100


class Roadmap(Base):
    __tablename__ = "roadmaps"
    __table_args__ = (
        UniqueConstraint("user_id", "interest_key", name="uq_roadmap_owner_interest"),
        # Ids are never reused: snapshots outlive their roadmap
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    interest = Column(String(MAX_INTEREST_LENGTH), nullable=False)      # Display label
    interest_key = Column(String(MAX_INTEREST_LENGTH), nullable=False)  # Normalized natural key
    # [{title, steps: [{text, completed, completed_at}]}]
    weeks = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="roadmaps")
