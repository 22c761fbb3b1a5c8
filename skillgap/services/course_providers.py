"""Course search clients for external learning platforms.

Providers never raise to their caller: a missing credential, an HTTP error or
a payload that does not parse yields an empty list and a log line.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Iterable

import httpx
from pydantic import ValidationError

from skillgap.config import Settings, settings as default_settings
from skillgap.schemas.course import Course

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


def _leading_int(value: Any, default: int) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    match = _LEADING_INT_RE.match(str(value or ""))
    return int(match.group(1)) if match else default


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def map_coursera_level(level: str | None) -> str:
    value = (level or "").lower()
    if "beginner" in value:
        return "Beginner"
    if "intermediate" in value:
        return "Intermediate"
    if "advanced" in value:
        return "Advanced"
    return "Beginner"


def map_udemy_level(level: str | None) -> str:
    value = (level or "").lower()
    if "beginner" in value or "all" in value:
        return "Beginner"
    if "intermediate" in value:
        return "Intermediate"
    if "expert" in value or "advanced" in value:
        return "Advanced"
    return "Beginner"


class CourseProvider(ABC):
    """A course catalogue searchable by skill name."""

    name: str = ""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def search(self, client: httpx.AsyncClient, skill_name: str, limit: int = 10) -> list[Course]:
        """Return matching courses, or [] when the catalogue cannot be reached."""


class HttpCourseProvider(CourseProvider):
    """Provider backed by a JSON search endpoint; subclasses map the payload."""

    async def search(self, client: httpx.AsyncClient, skill_name: str, limit: int = 10) -> list[Course]:
        if not self.is_configured():
            logger.warning("%s credentials not configured", self.name)
            return []
        try:
            response = await self._request(client, skill_name, limit)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("%s API error: %s", self.name, exc.response.status_code)
            return []
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching %s courses: %s", self.name, exc)
            return []

        if not isinstance(payload, dict):
            logger.error("Unexpected %s payload type: %s", self.name, type(payload).__name__)
            return []

        courses: list[Course] = []
        for item in self._items(payload):
            if not isinstance(item, dict):
                continue
            try:
                courses.append(self._to_course(item))
            except (ValidationError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed %s course: %s", self.name, exc)
        return courses

    @abstractmethod
    async def _request(self, client: httpx.AsyncClient, skill_name: str, limit: int) -> httpx.Response:
        ...

    @abstractmethod
    def _items(self, payload: dict[str, Any]) -> Iterable[Any]:
        ...

    @abstractmethod
    def _to_course(self, item: dict[str, Any]) -> Course:
        ...


class CourseraProvider(HttpCourseProvider):
    name = "Coursera"
    base_url = "https://api.coursera.org/api/courses.v1"

    def is_configured(self) -> bool:
        return bool(self.settings.coursera_api_key)

    async def _request(self, client: httpx.AsyncClient, skill_name: str, limit: int) -> httpx.Response:
        return await client.get(
            self.base_url,
            params={"q": "search", "query": skill_name, "limit": str(limit)},
            headers={"Authorization": f"Bearer {self.settings.coursera_api_key}"},
        )

    def _items(self, payload: dict[str, Any]) -> Iterable[Any]:
        return _as_list(payload.get("elements"))

    def _to_course(self, item: dict[str, Any]) -> Course:
        difficulty = item.get("productDifficultyLevel")
        return Course(
            title=item.get("name") or "Untitled Course",
            provider=self.name,
            url=f"https://www.coursera.org/learn/{item.get('slug')}",
            price="Free" if difficulty == "Free" else f"${item.get('price') or 49}",
            rating=item.get("averageProductRating") or 4.0,
            review_count=item.get("numProductRatings") or 0,
            estimated_hours=_leading_int(item.get("workload"), 20),
            level=map_coursera_level(difficulty),
            topics=list(item.get("domainTypes") or []),
        )


class UdemyProvider(HttpCourseProvider):
    name = "Udemy"
    base_url = "https://www.udemy.com/api-2.0/courses/"

    def is_configured(self) -> bool:
        return bool(self.settings.udemy_client_id and self.settings.udemy_client_secret)

    async def _request(self, client: httpx.AsyncClient, skill_name: str, limit: int) -> httpx.Response:
        return await client.get(
            self.base_url,
            params={"search": skill_name, "page_size": str(limit), "ordering": "relevance"},
            auth=(self.settings.udemy_client_id or "", self.settings.udemy_client_secret or ""),
        )

    def _items(self, payload: dict[str, Any]) -> Iterable[Any]:
        return _as_list(payload.get("results"))

    def _to_course(self, item: dict[str, Any]) -> Course:
        price = item.get("price")
        instructors = item.get("visible_instructors") or []
        return Course(
            title=item.get("title") or "Untitled Course",
            provider=self.name,
            url=f"https://www.udemy.com{item.get('url') or ''}",
            price="Free" if price == "Free" else f"${price or 19.99}",
            rating=item.get("rating") or 4.0,
            review_count=item.get("num_reviews") or 0,
            estimated_hours=_leading_int(item.get("content_info_short"), 10),
            level=map_udemy_level(item.get("instructional_level")),
            topics=[i.get("display_name") for i in instructors if i.get("display_name")],
        )


class LinkedInLearningProvider(CourseProvider):
    name = "LinkedIn Learning"

    async def search(self, client: httpx.AsyncClient, skill_name: str, limit: int = 10) -> list[Course]:
        # Requires an enterprise partnership; no public search API.
        logger.warning("LinkedIn Learning integration not available")
        return []


PROVIDER_CLASSES: dict[str, type[CourseProvider]] = {
    CourseraProvider.name: CourseraProvider,
    UdemyProvider.name: UdemyProvider,
    LinkedInLearningProvider.name: LinkedInLearningProvider,
}


def build_course_providers(settings: Settings | None = None) -> dict[str, CourseProvider]:
    return {name: cls(settings) for name, cls in PROVIDER_CLASSES.items()}
