from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func

from skillgap.database import Base


class LearnerSkillRecord(Base):
    __tablename__ = "learner_skills"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=True)
    # not-started | learning | practicing | mastered
    status = Column(String(32), nullable=False, default="not-started", index=True)
    progress = Column(Float, nullable=False, default=0)
    time_spent = Column(Float, nullable=False, default=0)
    estimated_time_to_target = Column(Float, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
