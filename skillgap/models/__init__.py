# __init__.py
from skillgap.models.affiliate_click import AffiliateClickRecord
from skillgap.models.learner_skill import LearnerSkillRecord
from skillgap.models.occupation_profile import OccupationProfile
from skillgap.models.skill_gap_analysis import SkillGapAnalysis

__all__ = [
	"AffiliateClickRecord",
	"LearnerSkillRecord",
	"OccupationProfile",
	"SkillGapAnalysis",
]
