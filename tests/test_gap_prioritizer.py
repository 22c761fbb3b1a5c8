from __future__ import annotations

import pytest

from skillgap.exceptions import InvalidInputError
from skillgap.schemas.skill_gap import (
    HistoricalSkill,
    LearnerSkill,
    PrioritizedSkillGap,
    SkillGap,
    TargetRoleSkill,
    TimelineGap,
)
from skillgap.services import gap_prioritizer
from skillgap.services.gap_prioritizer import (
    analyze_gap,
    calculate_completion_progress,
    calculate_learning_velocity,
    detect_transferable_skills,
    determine_transition_type,
    estimate_timeline,
    generate_roadmap,
    prioritize_gaps,
    skill_name_similarity,
)


def _target(name: str, importance: float, level: float, category: str = "Basic Skills") -> TargetRoleSkill:
    return TargetRoleSkill(skill_name=name, skill_code=f"code-{name}", importance=importance, level=level, category=category)


def _gap(name: str, **overrides) -> SkillGap:
    values = {
        "skill_name": name,
        "importance": 0.5,
        "current_level": 0,
        "target_level": 80,
        "time_to_acquire_hours": 120,
        "market_demand": 0.5,
        "career_capital_score": 0.5,
    }
    values.update(overrides)
    return SkillGap(**values)


def _prioritized(name: str, score: float, hours: float = 60) -> PrioritizedSkillGap:
    return PrioritizedSkillGap(**_gap(name, time_to_acquire_hours=hours).model_dump(), priority_score=score)


def test_analyze_gap_partitions_every_target_skill() -> None:
    learner = [LearnerSkill(name="python", level="advanced"), LearnerSkill(name="Writing", level="beginner")]
    targets = [
        _target("Python", 80, 5, "Technical Skills"),
        _target("Programming", 90, 6, "Technical Skills"),
        _target("Writing", 50, 3),
        _target("Negotiation", 30, 2),
    ]

    result = analyze_gap(learner, targets, weekly_availability_hours=10)

    assert result.existing_skills == ["Python"]
    assert [g.skill_name for g in result.critical_gaps] == ["Programming"]
    assert [g.skill_name for g in result.nice_to_have_gaps] == ["Writing", "Negotiation"]
    names = result.existing_skills + [g.skill_name for g in result.critical_gaps + result.nice_to_have_gaps]
    assert sorted(names) == sorted(t.skill_name for t in targets)


def test_analyze_gap_builds_gap_values() -> None:
    learner = [LearnerSkill(name="writing", level="beginner")]
    targets = [_target("Programming", 90, 6, "Technical Skills"), _target("Writing", 50, 3)]

    result = analyze_gap(learner, targets, weekly_availability_hours=5)

    programming = result.critical_gaps[0]
    assert programming.current_level == 0
    assert programming.target_level == 86
    assert programming.importance == pytest.approx(0.9)
    assert programming.time_to_acquire_hours == 280
    assert programming.market_demand == 0.8
    assert programming.career_capital_score == pytest.approx(0.9 * 6 / 7)
    assert programming.taxonomy_code == "code-Programming"

    writing = result.nice_to_have_gaps[0]
    assert writing.current_level == 25
    assert writing.target_level == 43
    assert writing.time_to_acquire_hours == 60
    assert writing.market_demand == 0.5


def test_analyze_gap_never_records_met_skills_as_gaps() -> None:
    learner = [LearnerSkill(name="Leadership", level="expert")]
    targets = [_target("Leadership", 95, 7), _target("Listening", 90, 0)]

    result = analyze_gap(learner, targets, weekly_availability_hours=10)

    # Level 0 requires nothing, so even an unlisted skill is already met.
    assert result.existing_skills == ["Leadership", "Listening"]
    assert result.critical_gaps == []
    assert result.nice_to_have_gaps == []


def test_analyze_gap_importance_threshold_is_inclusive() -> None:
    result = analyze_gap([], [_target("A", 70, 4), _target("B", 69, 4)], weekly_availability_hours=10)
    assert [g.skill_name for g in result.critical_gaps] == ["A"]
    assert [g.skill_name for g in result.nice_to_have_gaps] == ["B"]


def test_analyze_gap_empty_requirements() -> None:
    result = analyze_gap([LearnerSkill(name="Python")], [], weekly_availability_hours=10)
    assert result.critical_gaps == [] and result.nice_to_have_gaps == [] and result.existing_skills == []


def test_analyze_gap_rejects_non_positive_availability() -> None:
    with pytest.raises(InvalidInputError):
        analyze_gap([], [_target("A", 70, 4)], weekly_availability_hours=0)


def test_prioritize_gaps_example_scenario() -> None:
    gaps = [
        _gap("Excel", importance=0.4, current_level=50, target_level=70, time_to_acquire_hours=40,
             market_demand=0.5, career_capital_score=0.3),
        _gap("Python", importance=0.9, current_level=20, target_level=80, time_to_acquire_hours=100,
             market_demand=0.8, career_capital_score=0.7),
    ]

    ranked = prioritize_gaps(gaps, learning_velocity=1.0)

    assert [g.skill_name for g in ranked] == ["Python", "Excel"]
    assert ranked[0].priority_score == pytest.approx(77.25)
    assert ranked[1].priority_score == pytest.approx(54.0)
    assert all(g.priority_score > 0 for g in ranked)


def test_prioritize_gaps_dominant_gap_ranks_first() -> None:
    weak = _gap("Weak", importance=0.3, time_to_acquire_hours=300, market_demand=0.4, career_capital_score=0.2)
    strong = _gap("Strong", importance=0.8, time_to_acquire_hours=60, market_demand=0.8, career_capital_score=0.6)
    assert prioritize_gaps([weak, strong])[0].skill_name == "Strong"


def test_prioritize_gaps_caps_time_and_velocity_terms() -> None:
    slow = prioritize_gaps([_gap("A", time_to_acquire_hours=400)])[0].priority_score
    slower = prioritize_gaps([_gap("A", time_to_acquire_hours=1000)])[0].priority_score
    assert slow == slower

    at_cap = prioritize_gaps([_gap("A")], learning_velocity=2.0)[0].priority_score
    past_cap = prioritize_gaps([_gap("A")], learning_velocity=5.0)[0].priority_score
    assert at_cap == past_cap


def test_prioritize_gaps_ties_keep_input_order() -> None:
    gaps = [_gap("First"), _gap("Second"), _gap("Third")]
    assert [g.skill_name for g in prioritize_gaps(gaps)] == ["First", "Second", "Third"]


def test_prioritize_gaps_velocity_never_lowers_score() -> None:
    gap = _gap("A")
    scores = [prioritize_gaps([gap], learning_velocity=v)[0].priority_score for v in (0.0, 0.5, 1.0, 1.5, 2.0, 3.0)]
    assert scores == sorted(scores)


def test_prioritize_gaps_rejects_negative_velocity() -> None:
    with pytest.raises(InvalidInputError):
        prioritize_gaps([_gap("A")], learning_velocity=-0.1)


def test_prioritize_gaps_scores_round_to_two_places() -> None:
    score = prioritize_gaps([_gap("A", importance=0.333, career_capital_score=0.111)])[0].priority_score
    assert round(score, 2) == score


@pytest.mark.parametrize(
    ("level", "hours", "tier"),
    [(3, 120, "basic"), (4, 240, "intermediate"), (5, 240, "intermediate"), (6, 560, "advanced")],
)
def test_estimate_timeline_tiers(level: int, hours: int, tier: str) -> None:
    estimate = estimate_timeline(
        TimelineGap(taxonomy_level=level, current_level=0, target_level=100),
        weekly_availability_hours=10,
        learning_velocity=1.0,
    )
    assert estimate.estimated_hours == hours
    assert estimate.complexity_tier == tier
    assert estimate.weeks_to_complete == -(-hours // 10)


def test_estimate_timeline_velocity_lowers_hours() -> None:
    gap = TimelineGap(taxonomy_level=4, current_level=50, target_level=100)
    hours = [estimate_timeline(gap, 10, v).estimated_hours for v in (0.5, 1.0, 1.5)]
    assert hours == [234, 180, 144]


def test_estimate_timeline_gap_size_boundaries() -> None:
    small = estimate_timeline(TimelineGap(taxonomy_level=2, current_level=80, target_level=100), 7, 1.0)
    medium = estimate_timeline(TimelineGap(taxonomy_level=2, current_level=50, target_level=100), 7, 1.0)
    large = estimate_timeline(TimelineGap(taxonomy_level=2, current_level=39, target_level=100), 7, 1.0)
    assert (small.estimated_hours, medium.estimated_hours, large.estimated_hours) == (60, 90, 120)
    assert small.weeks_to_complete == 9


def test_estimate_timeline_invalid_inputs() -> None:
    gap = TimelineGap(taxonomy_level=4, current_level=0, target_level=50)
    with pytest.raises(InvalidInputError):
        estimate_timeline(gap, weekly_availability_hours=0, learning_velocity=1.0)
    with pytest.raises(InvalidInputError):
        estimate_timeline(gap, weekly_availability_hours=5, learning_velocity=-1)
    with pytest.raises(InvalidInputError):
        estimate_timeline(TimelineGap(taxonomy_level=4, current_level=0, target_level=0), 5, 1.0)


def test_generate_roadmap_splits_into_thirds() -> None:
    gaps = [_prioritized(f"S{i}", 90 - i) for i in range(7)]

    roadmap = generate_roadmap(gaps, weekly_availability_hours=10)

    assert [phase.skill_names for phase in roadmap] == [["S0", "S1", "S2"], ["S3", "S4", "S5"], ["S6"]]
    assert [phase.milestone_title for phase in roadmap] == list(gap_prioritizer.MILESTONE_TITLES)
    assert [phase.estimated_duration_weeks for phase in roadmap] == [18, 18, 6]


def test_generate_roadmap_omits_empty_phases() -> None:
    roadmap = generate_roadmap([_prioritized(f"S{i}", 50) for i in range(4)], weekly_availability_hours=10)
    assert [phase.phase_number for phase in roadmap] == [1, 2]
    assert sum(len(phase.skill_names) for phase in roadmap) == 4

    single = generate_roadmap([_prioritized("Only", 50, hours=25)], weekly_availability_hours=10)
    assert len(single) == 1
    assert single[0].estimated_duration_weeks == 3

    assert generate_roadmap([], weekly_availability_hours=10) == []


def test_generate_roadmap_rejects_non_positive_availability() -> None:
    with pytest.raises(InvalidInputError):
        generate_roadmap([_prioritized("A", 50)], weekly_availability_hours=-5)


def test_learning_velocity_defaults_to_average() -> None:
    assert calculate_learning_velocity([]) == 1.0
    history = [
        HistoricalSkill(name="A", status="learning", progress=40, time_spent=5, estimated_time_to_target=10),
        HistoricalSkill(name="B", status="mastered", time_spent=5, estimated_time_to_target=0),
    ]
    assert calculate_learning_velocity(history) == 1.0


def test_learning_velocity_mean_of_completed_skills() -> None:
    history = [
        HistoricalSkill(name="A", status="mastered", time_spent=8, estimated_time_to_target=10),
        HistoricalSkill(name="B", status="mastered", time_spent=12, estimated_time_to_target=10),
    ]
    assert calculate_learning_velocity(history) == 1.0


def test_learning_velocity_counts_finished_practice_only() -> None:
    history = [
        HistoricalSkill(name="A", status="practicing", progress=100, time_spent=15, estimated_time_to_target=10),
        HistoricalSkill(name="B", status="practicing", progress=90, time_spent=50, estimated_time_to_target=10),
        HistoricalSkill(name="C", status="mastered", time_spent=2, estimated_time_to_target=3),
    ]
    # (1.5 + 0.6667) / 2
    assert calculate_learning_velocity(history) == 1.08


def test_learning_velocity_rejects_negative_hours() -> None:
    with pytest.raises(InvalidInputError):
        calculate_learning_velocity([HistoricalSkill(name="A", status="mastered", time_spent=-1, estimated_time_to_target=4)])


@pytest.mark.parametrize(
    ("critical", "transferable", "expected"),
    [(5, 2, "career-change"), (3, 2, "upward"), (2, 2, "lateral"), (3, 0, "career-change"), (0, 0, "lateral")],
)
def test_determine_transition_type(critical: int, transferable: int, expected: str) -> None:
    assert determine_transition_type(critical, transferable) == expected


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        ("Python", " python ", 1.0),
        ("SQL", "PostgreSQL", 0.9),
        ("project management", "management consulting", pytest.approx(1 / 3)),
        ("data analysis", "analysis data", 1.0),
        ("Excel", "Negotiation", 0.0),
    ],
)
def test_skill_name_similarity(first: str, second: str, expected: float) -> None:
    assert skill_name_similarity(first, second) == expected


def test_detect_transferable_skills() -> None:
    learner = [
        LearnerSkill(name="Project Management", level="expert"),
        LearnerSkill(name="python", level="beginner"),
        LearnerSkill(name="Cooking", level="advanced"),
    ]
    targets = [
        _target("Python", 80, 5, "Technical Skills"),
        _target("Management", 60, 4),
        _target("Time Management", 50, 3),
    ]

    transferable = detect_transferable_skills(learner, targets)

    assert [(t.skill_name, t.confidence) for t in transferable] == [
        ("python", 1.0),
        ("Project Management", 0.9),
    ]
    direct, similar = transferable
    assert direct.applicability_to_target == 80
    assert direct.current_level == 25
    assert direct.transfer_rationale == "Direct match with target skill: Python"
    assert similar.applicability_to_target == 54
    assert similar.current_level == 95
    assert similar.transfer_rationale == "Similar to target skill: Management"


def test_detect_transferable_skills_requires_more_than_half_overlap() -> None:
    # "time management" vs "project management": one shared word of three.
    learner = [LearnerSkill(name="Project Management")]
    assert detect_transferable_skills(learner, [_target("Time Management", 50, 3)]) == []
    assert detect_transferable_skills([], [_target("Python", 80, 5)]) == []


def test_completion_progress_counts_practiced_and_mastered_gaps() -> None:
    history = [
        HistoricalSkill(name="programming", status="practicing", progress=40),
        HistoricalSkill(name="Statistics", status="mastered"),
        HistoricalSkill(name="Writing", status="mastered"),
        HistoricalSkill(name="Writing", status="learning"),
        HistoricalSkill(name="SQL", status="not-started"),
    ]

    progress = calculate_completion_progress(["Programming", "SQL", "Statistics"], ["Writing"], history)

    assert progress.completion_progress == 50
    assert (progress.closed_gaps, progress.total_gaps) == (2, 4)
    assert (progress.critical_gaps.total, progress.critical_gaps.closed) == (3, 2)
    assert (progress.nice_to_have_gaps.total, progress.nice_to_have_gaps.closed) == (1, 0)
    assert progress.closed_gap_names == ["Programming", "Statistics"]
    assert progress.open_gap_names == ["SQL", "Writing"]


def test_completion_progress_rounds_and_handles_no_gaps() -> None:
    history = [HistoricalSkill(name="A", status="mastered"), HistoricalSkill(name="B", status="mastered")]
    assert calculate_completion_progress(["A", "B", "C"], [], history).completion_progress == 67
    assert calculate_completion_progress(["A"], ["C", "D"], history).completion_progress == 33

    empty = calculate_completion_progress([], [], history)
    assert (empty.completion_progress, empty.total_gaps, empty.closed_gaps) == (0, 0, 0)
