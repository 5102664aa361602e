from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    interests = Column(JSON, default=list)     # ["Data Science", "Cloud & DevOps"]
    profile_pic = Column(String(500), default="")  # URL only
    resume_score = Column(Integer, default=0)  # 0-100, last resume analysis
    roadmap_progress = Column(Integer, default=0)  # Legacy cache, set by roadmap generation
    badges = Column(JSON, default=list)        # Ordered, unique labels
    resume_text = Column(Text, default="")     # Extracted text of last analysed resume
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    roadmaps = relationship("Roadmap", back_populates="user", cascade="all, delete-orphan")
