from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skillgap.api.dependencies import get_course_cache, get_course_providers, get_http_client
from skillgap.database import get_db
from skillgap.models.affiliate_click import AffiliateClickRecord
from skillgap.models.skill_gap_analysis import SkillGapAnalysis
from skillgap.schemas.course import (
    AffiliateClickEvent,
    AffiliateClickRequest,
    Course,
    CourseRecommendationsRequest,
    CourseRecommendationsResponse,
    DisclosureResponse,
)
from skillgap.services import course_ranker, recommendation_service
from skillgap.services.course_providers import CourseProvider
from skillgap.utils.ttl_cache import TTLCache


logger = logging.getLogger(__name__)

router = APIRouter(tags=["courses"])


@router.post("/recommendations/courses", response_model=CourseRecommendationsResponse)
async def recommend_courses(
    payload: CourseRecommendationsRequest,
    providers: dict[str, CourseProvider] = Depends(get_course_providers),
    client: httpx.AsyncClient = Depends(get_http_client),
    cache: TTLCache[list[Course]] = Depends(get_course_cache),
) -> CourseRecommendationsResponse:
    return await recommendation_service.get_course_recommendations(
        payload.skill_gaps,
        user_id=payload.user_id,
        analysis_id=payload.analysis_id,
        providers=providers,
        client=client,
        preferences=payload.preferences,
        cache=cache,
    )


@router.get("/affiliate/disclosure", response_model=DisclosureResponse)
def affiliate_disclosure() -> DisclosureResponse:
    return DisclosureResponse(disclosure=course_ranker.get_disclosure())


@router.post("/affiliate/clicks", response_model=AffiliateClickEvent, status_code=status.HTTP_201_CREATED)
def record_affiliate_click(payload: AffiliateClickRequest, db: Session = Depends(get_db)) -> AffiliateClickEvent:
    event = course_ranker.track_affiliate_click(payload)
    db.add(
        AffiliateClickRecord(
            analysis_id=event.analysis_id,
            user_id=payload.user_id,
            skill_name=event.skill_name,
            course_provider=event.course_provider,
            course_url=event.course_url,
            course_title=event.course_title,
            timestamp=event.timestamp,
        )
    )
    analysis = db.query(SkillGapAnalysis).filter(SkillGapAnalysis.id == event.analysis_id).one_or_none()
    if analysis is not None:
        analysis.affiliate_click_count = (analysis.affiliate_click_count or 0) + 1
    else:
        logger.info("Affiliate click for unknown analysis %s", event.analysis_id)
    db.commit()
    return event
