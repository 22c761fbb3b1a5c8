"""Skill gap analysis, prioritization and learning-timeline estimation.

Every function here is pure: inputs are value objects, outputs are new value
objects, nothing is read from or written to storage.

Priority score::

    (importance * 0.30
     + (1 - min(hours, 400) / 400) * 0.25
     + market_demand * 0.20
     + career_capital * 0.15
     + min(velocity / 2, 1) * 0.10) * 100
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from skillgap.exceptions import InvalidInputError
from skillgap.schemas.skill_gap import (
    ComplexityTier,
    CompletionProgress,
    GapAnalysisResult,
    GapClosure,
    HistoricalSkill,
    LearnerSkill,
    PrioritizedSkillGap,
    RoadmapPhase,
    SkillGap,
    TargetRoleSkill,
    TimelineEstimate,
    TimelineGap,
    TransferableSkill,
    TransitionType,
)
from skillgap.utils.rounding import round_half_up

PROFICIENCY_LEVELS: dict[str, int] = {
    "beginner": 25,
    "intermediate": 50,
    "advanced": 75,
    "expert": 100,
}

HIGH_DEMAND_CATEGORIES: tuple[str, ...] = ("technical skills", "computer skills", "systems skills")
HIGH_DEMAND = 0.8
BASELINE_DEMAND = 0.5

CRITICAL_IMPORTANCE = 0.7
MAX_TAXONOMY_LEVEL = 7

MAX_HOURS_FOR_SCORING = 400.0
WEIGHT_IMPORTANCE = 0.30
WEIGHT_TIME = 0.25
WEIGHT_MARKET_DEMAND = 0.20
WEIGHT_CAREER_CAPITAL = 0.15
WEIGHT_VELOCITY = 0.10

TRANSFER_LEVELS: dict[str, int] = {
    "beginner": 25,
    "intermediate": 50,
    "advanced": 75,
    "expert": 95,
}
DEFAULT_TRANSFER_LEVEL = 50
MIN_TRANSFER_SIMILARITY = 0.5
CONTAINED_NAME_SIMILARITY = 0.9

CLOSED_GAP_STATUSES: tuple[str, ...] = ("mastered", "practicing")

MILESTONE_TITLES: tuple[str, str, str] = (
    "Critical Skills Foundation",
    "Core Competencies Development",
    "Advanced Skills Mastery",
)


def _require_availability(weekly_availability_hours: float) -> float:
    value = float(weekly_availability_hours)
    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"weekly_availability_hours must be positive, got {weekly_availability_hours!r}")
    return value


def _require_velocity(learning_velocity: float) -> float:
    value = float(learning_velocity)
    if not math.isfinite(value) or value < 0:
        raise InvalidInputError(f"learning_velocity must be a non-negative number, got {learning_velocity!r}")
    return value


def _require_taxonomy_level(level: float) -> float:
    value = float(level)
    if not math.isfinite(value) or value < 0 or value > MAX_TAXONOMY_LEVEL:
        raise InvalidInputError(f"taxonomy level must be within 0-{MAX_TAXONOMY_LEVEL}, got {level!r}")
    return value


def proficiency_to_level(tier: str) -> int:
    return PROFICIENCY_LEVELS.get((tier or "").lower(), 0)


def taxonomy_to_level(level: float) -> int:
    """Map a 0-7 taxonomy level onto the 0-100 proficiency scale."""
    return int(round_half_up(_require_taxonomy_level(level) / MAX_TAXONOMY_LEVEL * 100))


def base_complexity_hours(level: float) -> tuple[int, ComplexityTier]:
    if level <= 3:
        return 60, "basic"
    if level <= 5:
        return 120, "intermediate"
    return 280, "advanced"


def estimate_market_demand(category: str) -> float:
    category_lower = (category or "").lower()
    if any(keyword in category_lower for keyword in HIGH_DEMAND_CATEGORIES):
        return HIGH_DEMAND
    return BASELINE_DEMAND


def career_capital(importance: float, level: float) -> float:
    # Rarer (more complex) skills carry more career capital.
    return min(importance * (level / MAX_TAXONOMY_LEVEL), 1.0)


def analyze_gap(
    learner_skills: Sequence[LearnerSkill],
    target_role_skills: Sequence[TargetRoleSkill],
    weekly_availability_hours: float,
) -> GapAnalysisResult:
    """Split a role's required skills into critical gaps, nice-to-have gaps and existing skills.

    Matching is by exact, case-insensitive name. Every target skill lands in
    exactly one of the three lists, in input order.
    """
    _require_availability(weekly_availability_hours)

    learner_by_name = {skill.name.strip().lower(): skill for skill in learner_skills}
    result = GapAnalysisResult()

    for target in target_role_skills:
        level = _require_taxonomy_level(target.level)
        target_level = taxonomy_to_level(level)
        learner = learner_by_name.get(target.skill_name.strip().lower())
        current_level = proficiency_to_level(learner.level) if learner else 0

        if current_level >= target_level:
            result.existing_skills.append(target.skill_name)
            continue

        importance = target.importance / 100
        gap = SkillGap(
            skill_name=target.skill_name,
            taxonomy_code=target.skill_code,
            taxonomy_level=level,
            importance=importance,
            current_level=current_level,
            target_level=target_level,
            time_to_acquire_hours=base_complexity_hours(level)[0],
            market_demand=estimate_market_demand(target.category),
            career_capital_score=career_capital(importance, level),
        )
        if importance >= CRITICAL_IMPORTANCE:
            result.critical_gaps.append(gap)
        else:
            result.nice_to_have_gaps.append(gap)

    return result


def score_gap(gap: SkillGap, learning_velocity: float = 1.0) -> float:
    velocity = _require_velocity(learning_velocity)
    time_score = 1 - min(gap.time_to_acquire_hours, MAX_HOURS_FOR_SCORING) / MAX_HOURS_FOR_SCORING
    velocity_score = min(velocity / 2, 1)
    score = (
        gap.importance * WEIGHT_IMPORTANCE
        + time_score * WEIGHT_TIME
        + gap.market_demand * WEIGHT_MARKET_DEMAND
        + gap.career_capital_score * WEIGHT_CAREER_CAPITAL
        + velocity_score * WEIGHT_VELOCITY
    ) * 100
    return round_half_up(score, 2)


def prioritize_gaps(gaps: Iterable[SkillGap], learning_velocity: float = 1.0) -> list[PrioritizedSkillGap]:
    """Score gaps and return them highest priority first; ties keep input order."""
    _require_velocity(learning_velocity)
    prioritized = [
        PrioritizedSkillGap(**gap.model_dump(), priority_score=score_gap(gap, learning_velocity))
        for gap in gaps
    ]
    # sorted() is stable, including with reverse=True.
    return sorted(prioritized, key=lambda item: item.priority_score, reverse=True)


def _velocity_multiplier(learning_velocity: float) -> float:
    if learning_velocity > 1.2:
        return 0.8
    if learning_velocity >= 0.8:
        return 1.0
    return 1.3


def _gap_multiplier(current_level: int, target_level: int) -> float:
    gap_percentage = (target_level - current_level) / target_level * 100
    if gap_percentage <= 30:
        return 1.0
    if gap_percentage <= 60:
        return 1.5
    return 2.0


def estimate_timeline(
    gap: TimelineGap,
    weekly_availability_hours: float,
    learning_velocity: float = 1.0,
) -> TimelineEstimate:
    """Estimate hours and weeks to close one gap.

    Independent of `SkillGap.time_to_acquire_hours`: the base hours come from
    the taxonomy level and are scaled by learning speed and by how far the
    learner is from the target.
    """
    availability = _require_availability(weekly_availability_hours)
    velocity = _require_velocity(learning_velocity)
    level = _require_taxonomy_level(gap.taxonomy_level)
    if gap.target_level <= 0:
        raise InvalidInputError("target_level must be greater than zero to estimate a timeline")
    if not 0 <= gap.current_level <= 100 or gap.target_level > 100:
        raise InvalidInputError("current_level and target_level must be within 0-100")

    base_hours, tier = base_complexity_hours(level)
    estimated_hours = int(
        round_half_up(base_hours * _velocity_multiplier(velocity) * _gap_multiplier(gap.current_level, gap.target_level))
    )
    return TimelineEstimate(
        estimated_hours=estimated_hours,
        weeks_to_complete=math.ceil(estimated_hours / availability),
        complexity_tier=tier,
    )


def generate_roadmap(
    prioritized_gaps: Sequence[PrioritizedSkillGap],
    weekly_availability_hours: float,
) -> list[RoadmapPhase]:
    """Cut the ranked gaps into up to three contiguous phases.

    The first two phases each take ceil(n / 3) gaps and the third takes the
    rest, so short lists can leave later phases empty; empty phases are not
    emitted.
    """
    availability = _require_availability(weekly_availability_hours)
    gaps = list(prioritized_gaps)
    chunk = math.ceil(len(gaps) / 3)
    buckets = (gaps[:chunk], gaps[chunk : chunk * 2], gaps[chunk * 2 :])

    roadmap: list[RoadmapPhase] = []
    for index, bucket in enumerate(buckets):
        if not bucket:
            continue
        total_hours = sum(gap.time_to_acquire_hours for gap in bucket)
        roadmap.append(
            RoadmapPhase(
                phase_number=index + 1,
                skill_names=[gap.skill_name for gap in bucket],
                estimated_duration_weeks=math.ceil(total_hours / availability),
                milestone_title=MILESTONE_TITLES[index],
            )
        )
    return roadmap


def is_completed_skill(skill: HistoricalSkill) -> bool:
    return skill.status == "mastered" or (skill.status == "practicing" and skill.progress == 100)


def calculate_learning_velocity(history: Iterable[HistoricalSkill]) -> float:
    """Average ratio of actual to estimated learning time over completed skills.

    1.0 means an average learner and is returned when there is nothing to
    average.
    """
    ratios: list[float] = []
    for skill in history:
        if skill.time_spent < 0 or skill.estimated_time_to_target < 0:
            raise InvalidInputError(f"learning hours for {skill.name!r} must not be negative")
        if not is_completed_skill(skill) or skill.estimated_time_to_target <= 0:
            continue
        ratios.append(skill.time_spent / skill.estimated_time_to_target)

    if not ratios:
        return 1.0
    return round_half_up(sum(ratios) / len(ratios), 2)


def determine_transition_type(critical_gap_count: int, transferable_skill_count: int) -> TransitionType:
    if transferable_skill_count > 0:
        gap_ratio = critical_gap_count / transferable_skill_count
    else:
        gap_ratio = float(critical_gap_count)

    if gap_ratio > 2.0:
        return "career-change"
    if gap_ratio > 1.0:
        return "upward"
    return "lateral"


def skill_name_similarity(first: str, second: str) -> float:
    """1.0 for equal names, 0.9 when one contains the other, else word-set Jaccard."""
    a = first.strip().lower()
    b = second.strip().lower()
    if a == b:
        return 1.0
    if a in b or b in a:
        return CONTAINED_NAME_SIMILARITY

    words_a = set(a.split())
    words_b = set(b.split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def detect_transferable_skills(
    learner_skills: Sequence[LearnerSkill],
    target_role_skills: Sequence[TargetRoleSkill],
) -> list[TransferableSkill]:
    """Pair learner skills with similarly named role requirements.

    One learner skill may transfer to several requirements and yields one entry
    per match. Results are ordered by confidence, highest first, keeping
    learner-skill order among equals.
    """
    transferable: list[TransferableSkill] = []
    for learner in learner_skills:
        if not learner.name.strip():
            continue
        for target in target_role_skills:
            similarity = skill_name_similarity(learner.name, target.skill_name)
            if similarity <= MIN_TRANSFER_SIMILARITY:
                continue
            if similarity > CONTAINED_NAME_SIMILARITY:
                rationale = f"Direct match with target skill: {target.skill_name}"
            else:
                rationale = f"Similar to target skill: {target.skill_name}"
            transferable.append(
                TransferableSkill(
                    skill_name=learner.name,
                    current_level=TRANSFER_LEVELS.get(learner.level, DEFAULT_TRANSFER_LEVEL),
                    applicability_to_target=int(round_half_up(similarity * target.importance)),
                    transfer_rationale=rationale,
                    confidence=similarity,
                )
            )
    return sorted(transferable, key=lambda item: item.confidence, reverse=True)


def _gap_closure(names: Sequence[str], statuses: dict[str, str]) -> GapClosure:
    closed = sum(1 for name in names if statuses.get(name.strip().lower()) in CLOSED_GAP_STATUSES)
    return GapClosure(total=len(names), closed=closed)


def calculate_completion_progress(
    critical_gap_names: Sequence[str],
    nice_to_have_gap_names: Sequence[str],
    history: Iterable[HistoricalSkill],
) -> CompletionProgress:
    """Share of an analysis' gaps the learner now practices or has mastered.

    Skills match by case-insensitive name; when a skill appears more than once
    in the history the last entry wins.
    """
    statuses = {skill.name.strip().lower(): skill.status for skill in history}
    all_names = [*critical_gap_names, *nice_to_have_gap_names]

    closed_names: list[str] = []
    open_names: list[str] = []
    for name in all_names:
        if statuses.get(name.strip().lower()) in CLOSED_GAP_STATUSES:
            closed_names.append(name)
        else:
            open_names.append(name)

    total = len(all_names)
    progress = int(round_half_up(len(closed_names) / total * 100)) if total else 0
    return CompletionProgress(
        completion_progress=progress,
        closed_gaps=len(closed_names),
        total_gaps=total,
        critical_gaps=_gap_closure(critical_gap_names, statuses),
        nice_to_have_gaps=_gap_closure(nice_to_have_gap_names, statuses),
        closed_gap_names=closed_names,
        open_gap_names=open_names,
    )
