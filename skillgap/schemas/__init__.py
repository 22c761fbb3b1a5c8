# __init__.py
from skillgap.schemas.course import (
	AffiliateClick,
	AffiliateClickEvent,
	AffiliateClickRequest,
	Course,
	CourseRecommendation,
	CourseRecommendationsRequest,
	CourseRecommendationsResponse,
	DisclosureResponse,
	UserPreferences,
)
from skillgap.schemas.skill_gap import (
	AnalysisResponse,
	AnalysisSummary,
	AnalyzeRequest,
	GapAnalysisResult,
	HistoricalSkill,
	LearnerSkill,
	PrioritizedSkillGap,
	RoadmapPhase,
	SkillGap,
	TargetRoleSkill,
	TimelineEstimate,
	TimelineGap,
)
from skillgap.schemas.taxonomy import OccupationSearchResult, OccupationSkills

__all__ = [
	"AffiliateClick",
	"AffiliateClickEvent",
	"AffiliateClickRequest",
	"Course",
	"CourseRecommendation",
	"CourseRecommendationsRequest",
	"CourseRecommendationsResponse",
	"DisclosureResponse",
	"UserPreferences",
	"AnalysisResponse",
	"AnalysisSummary",
	"AnalyzeRequest",
	"GapAnalysisResult",
	"HistoricalSkill",
	"LearnerSkill",
	"PrioritizedSkillGap",
	"RoadmapPhase",
	"SkillGap",
	"TargetRoleSkill",
	"TimelineEstimate",
	"TimelineGap",
	"OccupationSearchResult",
	"OccupationSkills",
]
