from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from skillgap.database import Base


class AffiliateClickRecord(Base):
    __tablename__ = "affiliate_clicks"

    id = Column(Integer, primary_key=True, index=True)
    analysis_id = Column(String(36), nullable=False, index=True)
    user_id = Column(String(255), nullable=True, index=True)
    skill_name = Column(String(255), nullable=False)
    course_provider = Column(String(64), nullable=False, index=True)
    course_url = Column(String(1024), nullable=False)
    course_title = Column(String(512), nullable=True)
    # Epoch milliseconds stamped by track_affiliate_click.
    timestamp = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
