from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from skillgap.database import get_db
from skillgap.exceptions import InvalidInputError
from skillgap.models.learner_skill import LearnerSkillRecord
from skillgap.schemas.skill_gap import LearningVelocityResponse, SkillHistoryCreate, SkillHistoryRead
from skillgap.services.analysis_service import load_skill_history
from skillgap.services.gap_prioritizer import calculate_learning_velocity, is_completed_skill


router = APIRouter(prefix="/users/{user_id}", tags=["skill-history"])


@router.get("/skills", response_model=list[SkillHistoryRead])
def list_skills(user_id: str, db: Session = Depends(get_db)) -> list[SkillHistoryRead]:
    rows = (
        db.query(LearnerSkillRecord)
        .filter(LearnerSkillRecord.user_id == user_id)
        .order_by(LearnerSkillRecord.id)
        .all()
    )
    return [SkillHistoryRead.model_validate(row) for row in rows]


@router.post("/skills", response_model=SkillHistoryRead, status_code=status.HTTP_201_CREATED)
def record_skill(user_id: str, payload: SkillHistoryCreate, db: Session = Depends(get_db)) -> SkillHistoryRead:
    row = LearnerSkillRecord(user_id=user_id, **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return SkillHistoryRead.model_validate(row)


@router.get("/learning-velocity", response_model=LearningVelocityResponse)
def learning_velocity(user_id: str, db: Session = Depends(get_db)) -> LearningVelocityResponse:
    history = load_skill_history(db, user_id)
    try:
        velocity = calculate_learning_velocity(history)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    completed = [s for s in history if is_completed_skill(s)]
    return LearningVelocityResponse(user_id=user_id, learning_velocity=velocity, completed_skill_count=len(completed))
