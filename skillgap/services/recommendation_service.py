# recommendation_service.py
from __future__ import annotations

import asyncio
import logging
import re
from typing import Mapping, Sequence

import httpx

from skillgap.config import settings
from skillgap.schemas.course import Course, CourseRecommendation, CourseRecommendationsResponse, UserPreferences
from skillgap.schemas.skill_gap import PrioritizedSkillGap
from skillgap.services.course_providers import CourseProvider
from skillgap.services.course_ranker import (
    FREE_PRICE,
    TOP_COURSES_PER_SKILL,
    generate_affiliate_link,
    get_disclosure,
    is_quick_win,
    prioritize_courses,
)
from skillgap.utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

_PRICE_RE = re.compile(r"(\d+(?:\.\d+)?)")


def course_price_value(price: str) -> float | None:
    if price == FREE_PRICE:
        return 0.0
    # "$1,299.00" is 1299.0, not 1.0.
    match = _PRICE_RE.search((price or "").replace(",", ""))
    return float(match.group(1)) if match else None


def _within_budget(course: Course, max_price: float | None) -> bool:
    if max_price is None:
        return True
    value = course_price_value(course.price)
    return value is not None and value <= max_price


async def fetch_courses_for_skill(
    skill_name: str,
    providers: Mapping[str, CourseProvider],
    client: httpx.AsyncClient,
    preferences: UserPreferences | None = None,
    cache: TTLCache[list[Course]] | None = None,
) -> list[Course]:
    names = (preferences.providers if preferences and preferences.providers else None) or settings.default_course_providers
    courses: list[Course] = []
    for name in names:
        provider = providers.get(name)
        if provider is None:
            logger.warning("Unknown course provider %s", name)
            continue
        key = (name, skill_name.lower())
        found = cache.get(key) if cache is not None else None
        if found is None:
            found = await provider.search(client, skill_name)
            if cache is not None and found:
                cache.set(key, found)
        courses.extend(found)

    max_price = preferences.max_price if preferences else None
    return [course for course in courses if _within_budget(course, max_price)]


async def _recommend_for_gap(
    gap: PrioritizedSkillGap,
    user_id: str,
    analysis_id: str,
    providers: Mapping[str, CourseProvider],
    client: httpx.AsyncClient,
    preferences: UserPreferences | None,
    cache: TTLCache[list[Course]] | None,
) -> CourseRecommendation:
    courses = await fetch_courses_for_skill(gap.skill_name, providers, client, preferences, cache)
    linked = [generate_affiliate_link(course, user_id, analysis_id, gap.skill_name) for course in courses]
    ranked = [
        course.model_copy(update={"is_quick_win": is_quick_win(course, gap)})
        for course in prioritize_courses(linked, gap)
    ]
    return CourseRecommendation(
        skill_name=gap.skill_name,
        skill_priority_score=gap.priority_score,
        courses=ranked[:TOP_COURSES_PER_SKILL],
    )


async def get_course_recommendations(
    skill_gaps: Sequence[PrioritizedSkillGap],
    user_id: str,
    analysis_id: str,
    providers: Mapping[str, CourseProvider],
    client: httpx.AsyncClient,
    preferences: UserPreferences | None = None,
    cache: TTLCache[list[Course]] | None = None,
) -> CourseRecommendationsResponse:
    # Skills are fetched concurrently; ordering is fixed afterwards by priority.
    recommendations = await asyncio.gather(
        *(
            _recommend_for_gap(gap, user_id, analysis_id, providers, client, preferences, cache)
            for gap in skill_gaps
        )
    )
    ordered = sorted(recommendations, key=lambda item: item.skill_priority_score, reverse=True)
    return CourseRecommendationsResponse(recommendations=ordered, disclosure=get_disclosure())
