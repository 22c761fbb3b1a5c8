from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.sql import func

from skillgap.database import Base


class OccupationProfile(Base):
    __tablename__ = "occupation_profiles"

    id = Column(Integer, primary_key=True, index=True)
    # Taxonomy occupation code, e.g. an O*NET SOC code "15-1252.00".
    code = Column(String(32), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=False, index=True)

    # Stored as list[{skill_name, skill_code, importance, level, category}]
    skills = Column(JSON, nullable=False)

    cache_version = Column(String(32), nullable=True)
    cached_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
