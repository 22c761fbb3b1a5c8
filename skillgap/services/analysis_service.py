# analysis_service.py
from __future__ import annotations

import asyncio
import logging
from uuid import uuid4

from sqlalchemy.orm import Session

from skillgap.exceptions import NotFoundError
from skillgap.models.learner_skill import LearnerSkillRecord
from skillgap.models.skill_gap_analysis import SkillGapAnalysis
from skillgap.schemas.skill_gap import (
    AnalysisResponse,
    AnalyzeRequest,
    HistoricalSkill,
    PrioritizedSkillGap,
    ProgressResponse,
    RoadmapPhase,
    TargetRoleSkill,
    TimelineGap,
    TransferableSkill,
)
from skillgap.services import gap_prioritizer
from skillgap.services.taxonomy_provider import OccupationTaxonomy
from skillgap.utils.content_hash import analysis_content_hash

logger = logging.getLogger(__name__)

ANALYSIS_VERSION = "1.1"


def load_skill_history(db: Session, user_id: str) -> list[HistoricalSkill]:
    rows = (
        db.query(LearnerSkillRecord)
        .filter(LearnerSkillRecord.user_id == user_id)
        .order_by(LearnerSkillRecord.id)
        .all()
    )
    return [
        HistoricalSkill(
            name=row.name,
            status=row.status,
            progress=row.progress or 0,
            time_spent=row.time_spent or 0,
            estimated_time_to_target=row.estimated_time_to_target or 0,
        )
        for row in rows
    ]


def _attach_timelines(
    gaps: list[PrioritizedSkillGap],
    weekly_availability_hours: float,
    learning_velocity: float,
) -> list[PrioritizedSkillGap]:
    result: list[PrioritizedSkillGap] = []
    for gap in gaps:
        if gap.taxonomy_level is None:
            result.append(gap)
            continue
        timeline = gap_prioritizer.estimate_timeline(
            TimelineGap(
                skill_name=gap.skill_name,
                taxonomy_level=gap.taxonomy_level,
                current_level=gap.current_level,
                target_level=gap.target_level,
            ),
            weekly_availability_hours,
            learning_velocity,
        )
        result.append(gap.model_copy(update={"timeline": timeline}))
    return result


def analysis_to_response(row: SkillGapAnalysis, *, cached: bool) -> AnalysisResponse:
    return AnalysisResponse(
        analysis_id=row.id,
        cached=cached,
        target_role=row.target_role,
        target_role_code=row.target_role_code,
        critical_gaps=[PrioritizedSkillGap.model_validate(g) for g in row.critical_gaps or []],
        nice_to_have_gaps=[PrioritizedSkillGap.model_validate(g) for g in row.nice_to_have_gaps or []],
        existing_skills=list(row.existing_skills or []),
        transferable_skills=[TransferableSkill.model_validate(t) for t in row.transferable_skills or []],
        roadmap=[RoadmapPhase.model_validate(p) for p in row.roadmap or []],
        learning_velocity=row.learning_velocity,
        transition_type=row.transition_type,
        completion_progress=row.completion_progress or 0,
        weekly_availability_hours=row.weekly_availability_hours,
    )


def find_cached_analysis(db: Session, user_id: str, content_hash: str, target_role: str) -> SkillGapAnalysis | None:
    return (
        db.query(SkillGapAnalysis)
        .filter(
            SkillGapAnalysis.user_id == user_id,
            SkillGapAnalysis.content_hash == content_hash,
            SkillGapAnalysis.target_role == target_role,
        )
        .order_by(SkillGapAnalysis.created_at.desc())
        .first()
    )


def _save_analysis(db: Session, row: SkillGapAnalysis) -> SkillGapAnalysis:
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


async def _resolve_target_skills(
    payload: AnalyzeRequest, taxonomy: OccupationTaxonomy
) -> tuple[list[TargetRoleSkill], str | None]:
    if payload.target_skills is not None:
        return list(payload.target_skills), payload.target_role_code
    occupation = await taxonomy.resolve_role(payload.target_role, payload.target_role_code)
    return list(occupation.skills), occupation.occupation_code


async def run_analysis(db: Session, payload: AnalyzeRequest, taxonomy: OccupationTaxonomy) -> AnalysisResponse:
    """Analyze, prioritize and persist a learner's gaps for a role.

    Session work runs in a worker thread so the event loop stays free for the
    taxonomy's remote calls. A stored analysis built from the same inputs and
    the same learning velocity is returned as-is with `cached=True`.
    """
    history = await asyncio.to_thread(load_skill_history, db, payload.user_id)
    velocity = gap_prioritizer.calculate_learning_velocity(history)

    content_hash = analysis_content_hash(
        payload.learner_skills,
        payload.target_role,
        payload.resume_text,
        target_skills=payload.target_skills,
        target_role_code=payload.target_role_code,
        weekly_availability_hours=payload.weekly_availability_hours,
        learning_velocity=velocity,
    )
    cached = await asyncio.to_thread(find_cached_analysis, db, payload.user_id, content_hash, payload.target_role)
    if cached is not None:
        logger.info("Using cached skill gap analysis %s", cached.id)
        return analysis_to_response(cached, cached=True)

    target_skills, role_code = await _resolve_target_skills(payload, taxonomy)
    availability = payload.weekly_availability_hours

    gap_analysis = gap_prioritizer.analyze_gap(payload.learner_skills, target_skills, availability)
    transferable = gap_prioritizer.detect_transferable_skills(payload.learner_skills, target_skills)

    critical = _attach_timelines(
        gap_prioritizer.prioritize_gaps(gap_analysis.critical_gaps, velocity), availability, velocity
    )
    nice_to_have = _attach_timelines(
        gap_prioritizer.prioritize_gaps(gap_analysis.nice_to_have_gaps, velocity), availability, velocity
    )
    roadmap = gap_prioritizer.generate_roadmap([*critical, *nice_to_have], availability)
    transition_type = gap_prioritizer.determine_transition_type(len(critical), len(transferable))

    row = SkillGapAnalysis(
        id=str(uuid4()),
        user_id=payload.user_id,
        target_role=payload.target_role,
        target_role_code=role_code,
        content_hash=content_hash,
        critical_gaps=[gap.model_dump() for gap in critical],
        nice_to_have_gaps=[gap.model_dump() for gap in nice_to_have],
        existing_skills=list(gap_analysis.existing_skills),
        transferable_skills=[skill.model_dump() for skill in transferable],
        roadmap=[phase.model_dump() for phase in roadmap],
        weekly_availability_hours=availability,
        learning_velocity=velocity,
        transition_type=transition_type,
        completion_progress=0,
        affiliate_click_count=0,
        analysis_version=ANALYSIS_VERSION,
    )
    row = await asyncio.to_thread(_save_analysis, db, row)
    logger.info(
        "Saved skill gap analysis %s (%d critical, %d nice-to-have, %d transferable)",
        row.id,
        len(critical),
        len(nice_to_have),
        len(transferable),
    )
    return analysis_to_response(row, cached=False)


def update_completion_progress(db: Session, analysis_id: str) -> ProgressResponse:
    """Recompute an analysis' completion from its owner's skill history and store it."""
    row = db.query(SkillGapAnalysis).filter(SkillGapAnalysis.id == analysis_id).one_or_none()
    if row is None:
        raise NotFoundError(f"Analysis {analysis_id} not found")

    progress = gap_prioritizer.calculate_completion_progress(
        [gap["skill_name"] for gap in row.critical_gaps or []],
        [gap["skill_name"] for gap in row.nice_to_have_gaps or []],
        load_skill_history(db, row.user_id),
    )
    previous = row.completion_progress or 0
    row.completion_progress = progress.completion_progress
    db.commit()

    logger.info(
        "Analysis %s progress %s -> %s (%d/%d gaps closed)",
        analysis_id,
        previous,
        progress.completion_progress,
        progress.closed_gaps,
        progress.total_gaps,
    )
    return ProgressResponse(
        **progress.model_dump(),
        analysis_id=analysis_id,
        previous_progress=previous,
        progress_change=progress.completion_progress - previous,
    )
