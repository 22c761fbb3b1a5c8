from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Integer, JSON, String
from sqlalchemy.sql import func

from skillgap.database import Base


class SkillGapAnalysis(Base):
    __tablename__ = "skill_gap_analyses"

    # UUID string
    id = Column(String(36), primary_key=True)

    user_id = Column(String(255), nullable=False, index=True)
    target_role = Column(String(255), nullable=False, index=True)
    target_role_code = Column(String(32), nullable=True)
    content_hash = Column(String(64), nullable=False, index=True)

    # Stored as list[PrioritizedSkillGap.model_dump()]
    critical_gaps = Column(JSON, nullable=False)
    nice_to_have_gaps = Column(JSON, nullable=False)
    existing_skills = Column(JSON, nullable=False)
    # Stored as list[TransferableSkill.model_dump()]
    transferable_skills = Column(JSON, nullable=True)
    # Stored as list[RoadmapPhase.model_dump()]
    roadmap = Column(JSON, nullable=False)

    weekly_availability_hours = Column(Float, nullable=False)
    learning_velocity = Column(Float, nullable=False, default=1.0)
    transition_type = Column(String(32), nullable=False)
    # Percentage of gaps closed, refreshed from the learner skill history.
    completion_progress = Column(Float, nullable=False, default=0)
    affiliate_click_count = Column(Integer, nullable=False, default=0)
    analysis_version = Column(String(16), nullable=False, default="1.1")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
