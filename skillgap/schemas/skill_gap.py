# skill_gap.py
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProficiencyTier = Literal["beginner", "intermediate", "advanced", "expert"]
ComplexityTier = Literal["basic", "intermediate", "advanced"]
SkillStatus = Literal["not-started", "learning", "practicing", "mastered"]
TransitionType = Literal["lateral", "upward", "career-change"]


class LearnerSkill(BaseModel):
    name: str = Field(min_length=1)
    level: ProficiencyTier = "intermediate"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


class TargetRoleSkill(BaseModel):
    skill_name: str = Field(min_length=1)
    skill_code: str | None = None
    # Taxonomy importance on a 1-100 scale.
    importance: float = Field(ge=0, le=100)
    # Taxonomy complexity level on a 0-7 scale.
    level: float = Field(ge=0, le=7)
    category: str = ""


class TimelineEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    estimated_hours: int
    weeks_to_complete: int
    complexity_tier: ComplexityTier


class SkillGap(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_name: str = Field(min_length=1)
    taxonomy_code: str | None = None
    taxonomy_level: float | None = Field(default=None, ge=0, le=7)
    importance: float = Field(ge=0, le=1)
    current_level: int = Field(ge=0, le=100)
    target_level: int = Field(ge=0, le=100)
    time_to_acquire_hours: float = Field(ge=0)
    market_demand: float = Field(ge=0, le=1)
    career_capital_score: float = Field(ge=0, le=1)


class PrioritizedSkillGap(SkillGap):
    # Weighted percentage; not clamped after weighting.
    priority_score: float
    timeline: TimelineEstimate | None = None


class GapAnalysisResult(BaseModel):
    critical_gaps: list[SkillGap] = Field(default_factory=list)
    nice_to_have_gaps: list[SkillGap] = Field(default_factory=list)
    existing_skills: list[str] = Field(default_factory=list)


class TimelineGap(BaseModel):
    skill_name: str | None = None
    taxonomy_level: float = Field(ge=0, le=7)
    current_level: int = Field(ge=0, le=100)
    target_level: int = Field(ge=0, le=100)


class RoadmapPhase(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase_number: int = Field(ge=1, le=3)
    skill_names: list[str] = Field(default_factory=list)
    estimated_duration_weeks: int
    milestone_title: str


class TransferableSkill(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill_name: str
    current_level: int = Field(ge=0, le=100)
    # Similarity scaled by the matched requirement's 1-100 importance.
    applicability_to_target: int = Field(ge=0, le=100)
    transfer_rationale: str
    confidence: float = Field(ge=0, le=1)


class HistoricalSkill(BaseModel):
    name: str
    status: SkillStatus
    progress: float = Field(default=0, ge=0, le=100)
    time_spent: float = 0
    estimated_time_to_target: float = 0


class GapClosure(BaseModel):
    total: int = 0
    closed: int = 0


class CompletionProgress(BaseModel):
    # Percentage of gaps closed, 0-100.
    completion_progress: int = Field(ge=0, le=100)
    closed_gaps: int
    total_gaps: int
    critical_gaps: GapClosure
    nice_to_have_gaps: GapClosure
    closed_gap_names: list[str] = Field(default_factory=list)
    open_gap_names: list[str] = Field(default_factory=list)


# API payloads


class AnalyzeRequest(BaseModel):
    user_id: str = Field(min_length=1)
    target_role: str = Field(min_length=1)
    target_role_code: str | None = None
    learner_skills: list[LearnerSkill] = Field(default_factory=list)
    # When omitted, requirements are resolved through the occupational taxonomy.
    target_skills: list[TargetRoleSkill] | None = None
    weekly_availability_hours: float = Field(gt=0)
    resume_text: str | None = None


class AnalysisResponse(BaseModel):
    analysis_id: str
    cached: bool = False
    target_role: str
    target_role_code: str | None = None
    critical_gaps: list[PrioritizedSkillGap] = Field(default_factory=list)
    nice_to_have_gaps: list[PrioritizedSkillGap] = Field(default_factory=list)
    existing_skills: list[str] = Field(default_factory=list)
    transferable_skills: list[TransferableSkill] = Field(default_factory=list)
    roadmap: list[RoadmapPhase] = Field(default_factory=list)
    learning_velocity: float = 1.0
    transition_type: TransitionType
    completion_progress: float = 0
    weekly_availability_hours: float


class AnalysisSummary(BaseModel):
    analysis_id: str
    target_role: str
    transition_type: TransitionType
    critical_gap_count: int
    nice_to_have_gap_count: int
    affiliate_click_count: int = 0


class PrioritizeRequest(BaseModel):
    gaps: list[SkillGap] = Field(default_factory=list)
    learning_velocity: float = 1.0


class TimelineRequest(BaseModel):
    gap: TimelineGap
    weekly_availability_hours: float
    learning_velocity: float = 1.0


class RoadmapRequest(BaseModel):
    gaps: list[PrioritizedSkillGap] = Field(default_factory=list)
    weekly_availability_hours: float


class SkillHistoryCreate(BaseModel):
    name: str = Field(min_length=1)
    category: str | None = None
    status: SkillStatus = "not-started"
    progress: float = Field(default=0, ge=0, le=100)
    time_spent: float = Field(default=0, ge=0)
    estimated_time_to_target: float = Field(default=0, ge=0)


class SkillHistoryRead(SkillHistoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str


class LearningVelocityResponse(BaseModel):
    user_id: str
    learning_velocity: float
    completed_skill_count: int


class ProgressResponse(CompletionProgress):
    analysis_id: str
    previous_progress: float
    progress_change: float
