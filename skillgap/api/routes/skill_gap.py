from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from skillgap.api.dependencies import get_taxonomy
from skillgap.database import get_db
from skillgap.exceptions import InvalidInputError, NotFoundError
from skillgap.models.skill_gap_analysis import SkillGapAnalysis
from skillgap.schemas.skill_gap import (
    AnalysisResponse,
    AnalysisSummary,
    AnalyzeRequest,
    PrioritizedSkillGap,
    PrioritizeRequest,
    ProgressResponse,
    RoadmapPhase,
    RoadmapRequest,
    TimelineEstimate,
    TimelineRequest,
)
from skillgap.services import analysis_service, gap_prioritizer
from skillgap.services.taxonomy_provider import OccupationTaxonomy


router = APIRouter(prefix="/skill-gap", tags=["skill-gap"])


@router.post("/analyze", response_model=AnalysisResponse)
async def analyze_skill_gap(
    payload: AnalyzeRequest,
    db: Session = Depends(get_db),
    taxonomy: OccupationTaxonomy = Depends(get_taxonomy),
) -> AnalysisResponse:
    try:
        return await analysis_service.run_analysis(db, payload, taxonomy)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/prioritize", response_model=list[PrioritizedSkillGap])
def prioritize(payload: PrioritizeRequest) -> list[PrioritizedSkillGap]:
    try:
        return gap_prioritizer.prioritize_gaps(payload.gaps, payload.learning_velocity)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/timeline", response_model=TimelineEstimate)
def timeline(payload: TimelineRequest) -> TimelineEstimate:
    try:
        return gap_prioritizer.estimate_timeline(
            payload.gap, payload.weekly_availability_hours, payload.learning_velocity
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/roadmap", response_model=list[RoadmapPhase])
def roadmap(payload: RoadmapRequest) -> list[RoadmapPhase]:
    try:
        return gap_prioritizer.generate_roadmap(payload.gaps, payload.weekly_availability_hours)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/history", response_model=list[AnalysisSummary])
def analysis_history(
    user_id: str = Query(min_length=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[AnalysisSummary]:
    rows = (
        db.query(SkillGapAnalysis)
        .filter(SkillGapAnalysis.user_id == user_id)
        .order_by(SkillGapAnalysis.created_at.desc())
        .limit(limit)
        .all()
    )
    return [
        AnalysisSummary(
            analysis_id=row.id,
            target_role=row.target_role,
            transition_type=row.transition_type,
            critical_gap_count=len(row.critical_gaps or []),
            nice_to_have_gap_count=len(row.nice_to_have_gaps or []),
            affiliate_click_count=row.affiliate_click_count or 0,
        )
        for row in rows
    ]


@router.get("/{analysis_id}", response_model=AnalysisResponse)
def get_analysis(analysis_id: str, db: Session = Depends(get_db)) -> AnalysisResponse:
    row = db.query(SkillGapAnalysis).filter(SkillGapAnalysis.id == analysis_id).one_or_none()
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")
    return analysis_service.analysis_to_response(row, cached=True)


@router.post("/{analysis_id}/progress", response_model=ProgressResponse)
def refresh_progress(analysis_id: str, db: Session = Depends(get_db)) -> ProgressResponse:
    try:
        return analysis_service.update_completion_progress(db, analysis_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
