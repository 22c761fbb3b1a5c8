"""Course scoring, affiliate links and click stamping for skill gap recommendations."""

from __future__ import annotations

import time
from typing import Iterable

from skillgap.config import settings
from skillgap.schemas.course import AffiliateClick, AffiliateClickEvent, Course
from skillgap.schemas.skill_gap import PrioritizedSkillGap
from skillgap.utils.rounding import round_half_up

FTC_DISCLOSURE = (
    "We may earn a commission from course purchases made through our links, "
    "at no additional cost to you."
)

TRACKING_PREFIX = "careerosapp"
UTM_SOURCE = "careerosapp"

MAX_REVIEW_COUNT = 10_000
FREE_PRICE = "Free"
QUICK_WIN_MIN_PRIORITY = 70
QUICK_WIN_MAX_HOURS = 20
TOP_COURSES_PER_SKILL = 3


def tracking_tag(user_id: str, analysis_id: str, skill_name: str) -> str:
    return f"{TRACKING_PREFIX}-{user_id}-{analysis_id}-{skill_name}"


def generate_affiliate_link(course: Course, user_id: str, analysis_id: str, skill_name: str) -> Course:
    """Return a copy of `course` with `affiliate_url` set; `url` is left untouched."""
    tag = tracking_tag(user_id, analysis_id, skill_name)

    if course.provider == "Coursera":
        affiliate_url = (
            f"{course.url}?utm_source={UTM_SOURCE}&utm_campaign={tag}"
            f"&affiliateId={settings.coursera_affiliate_id}"
        )
    elif course.provider == "Udemy":
        affiliate_url = (
            f"{course.url}?couponCode={settings.udemy_affiliate_id}"
            f"&utm_source={UTM_SOURCE}&utm_campaign={tag}"
        )
    else:
        affiliate_url = f"{course.url}?utm_source={UTM_SOURCE}&utm_campaign={tag}"

    return course.model_copy(update={"affiliate_url": affiliate_url})


def score_course(course: Course, gap: PrioritizedSkillGap) -> int:
    """Composite 0-100 score from rating, social proof, price and gap priority."""
    rating_score = course.rating / 5
    review_score = min(course.review_count, MAX_REVIEW_COUNT) / MAX_REVIEW_COUNT
    price_score = 1.0 if course.price == FREE_PRICE else 0.5
    # Clamped so externally supplied scores cannot push the composite outside 0-100.
    priority_score = min(max(gap.priority_score / 100, 0.0), 1.0)

    composite = rating_score * 0.35 + review_score * 0.25 + price_score * 0.20 + priority_score * 0.20
    return int(round_half_up(composite * 100))


def prioritize_courses(courses: Iterable[Course], gap: PrioritizedSkillGap) -> list[Course]:
    scored = [(course, score_course(course, gap)) for course in courses]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [course for course, _ in scored]


def is_quick_win(course: Course, gap: PrioritizedSkillGap) -> bool:
    return gap.priority_score >= QUICK_WIN_MIN_PRIORITY and course.estimated_hours <= QUICK_WIN_MAX_HOURS


def track_affiliate_click(event: AffiliateClick) -> AffiliateClickEvent:
    return AffiliateClickEvent(**event.model_dump(include=set(AffiliateClick.model_fields)), timestamp=int(time.time() * 1000))


def get_disclosure() -> str:
    return FTC_DISCLOSURE
