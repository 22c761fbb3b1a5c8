# course.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from skillgap.schemas.skill_gap import PrioritizedSkillGap


class Course(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    provider: str
    url: str
    affiliate_url: str | None = None
    # "Free" or a display price such as "$49".
    price: str
    rating: float = Field(ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    estimated_hours: float = Field(default=0, ge=0)
    level: str = "Beginner"
    topics: list[str] = Field(default_factory=list)
    is_quick_win: bool = False


class CourseRecommendation(BaseModel):
    skill_name: str
    skill_priority_score: float
    courses: list[Course] = Field(default_factory=list)


class UserPreferences(BaseModel):
    providers: list[str] | None = None
    max_price: float | None = Field(default=None, ge=0)


class CourseRecommendationsRequest(BaseModel):
    user_id: str = Field(min_length=1)
    analysis_id: str = Field(min_length=1)
    skill_gaps: list[PrioritizedSkillGap] = Field(default_factory=list)
    preferences: UserPreferences | None = None


class CourseRecommendationsResponse(BaseModel):
    recommendations: list[CourseRecommendation] = Field(default_factory=list)
    disclosure: str


class AffiliateClick(BaseModel):
    analysis_id: str = Field(min_length=1)
    skill_name: str = Field(min_length=1)
    course_provider: str = Field(min_length=1)
    course_url: str = Field(min_length=1)
    course_title: str | None = None


class AffiliateClickRequest(AffiliateClick):
    user_id: str | None = None


class AffiliateClickEvent(AffiliateClick):
    # Epoch milliseconds.
    timestamp: int


class DisclosureResponse(BaseModel):
    disclosure: str
