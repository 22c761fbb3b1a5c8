# dependencies.py
import httpx
from fastapi import Request

from skillgap.schemas.course import Course
from skillgap.services.course_providers import CourseProvider
from skillgap.services.taxonomy_provider import OccupationTaxonomy
from skillgap.utils.ttl_cache import TTLCache


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_course_providers(request: Request) -> dict[str, CourseProvider]:
    return request.app.state.course_providers


def get_course_cache(request: Request) -> TTLCache[list[Course]]:
    return request.app.state.course_cache


def get_taxonomy(request: Request) -> OccupationTaxonomy:
    return request.app.state.taxonomy
