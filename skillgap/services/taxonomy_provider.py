"""Occupational taxonomy lookups (O*NET) with a persisted and an in-process cache.

Lookup order for an occupation code: in-process TTL cache, a fresh
`occupation_profiles` row, the O*NET web service (written through to the
table), and finally a stale row. When all of these come up empty a
`NotFoundError` is raised.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import httpx
from sqlalchemy.orm import Session

from skillgap.config import Settings, onet_configured, settings as default_settings
from skillgap.database import SessionLocal
from skillgap.exceptions import NotFoundError
from skillgap.models.occupation_profile import OccupationProfile
from skillgap.schemas.skill_gap import TargetRoleSkill
from skillgap.schemas.taxonomy import OccupationSearchResult, OccupationSkills
from skillgap.utils.rounding import round_half_up
from skillgap.utils.ttl_cache import TTLCache

logger = logging.getLogger(__name__)

ONET_CACHE_VERSION = "29.0"
MAX_SEARCH_RESULTS = 20


def normalize_importance(value: float) -> float:
    """O*NET importance runs 1-5; scale it to 1-100."""
    return round_half_up(value / 5 * 100)


def _clamp_level(value: float) -> float:
    return min(max(float(value), 0.0), 7.0)


def _category_for(element_id: str) -> str:
    return "Basic Skills" if element_id.startswith("2.A") else "Technical Skills"


def _as_aware(value: datetime) -> datetime:
    # sqlite drops tzinfo on the way back out.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _profile_to_schema(row: OccupationProfile) -> OccupationSkills:
    return OccupationSkills(
        occupation_code=row.code,
        occupation_title=row.title,
        skills=[TargetRoleSkill.model_validate(item) for item in (row.skills or [])],
        cache_version=row.cache_version,
    )


class OccupationTaxonomy:
    def __init__(
        self,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        client: httpx.AsyncClient | None = None,
        cache: TTLCache[OccupationSkills] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.session_factory = session_factory
        self.client = client
        self.cache = cache if cache is not None else TTLCache(self.settings.taxonomy_cache_ttl_seconds, maxsize=512)

    # Persisted cache

    def _load_profile(self, code: str) -> OccupationProfile | None:
        with self.session_factory() as db:
            return db.query(OccupationProfile).filter(OccupationProfile.code == code).one_or_none()

    def _is_fresh(self, row: OccupationProfile) -> bool:
        if row.cached_at is None:
            return False
        max_age = timedelta(days=self.settings.taxonomy_db_ttl_days)
        return datetime.now(timezone.utc) - _as_aware(row.cached_at) < max_age

    def store_occupation(self, occupation: OccupationSkills) -> None:
        """Insert or refresh the persisted profile for an occupation."""
        skills = [skill.model_dump() for skill in occupation.skills]
        with self.session_factory() as db:
            row = db.query(OccupationProfile).filter(OccupationProfile.code == occupation.occupation_code).one_or_none()
            if row is None:
                row = OccupationProfile(code=occupation.occupation_code)
                db.add(row)
            row.title = occupation.occupation_title
            row.skills = skills
            row.cache_version = occupation.cache_version
            row.cached_at = datetime.now(timezone.utc)
            db.commit()
        self.cache.set(occupation.occupation_code, occupation)
        logger.info("Cached occupation data for %s", occupation.occupation_code)

    # Remote O*NET

    async def _fetch_onet(self, endpoint: str, params: dict[str, str] | None = None) -> dict[str, Any] | None:
        if self.client is None or not onet_configured(self.settings):
            logger.warning("O*NET API credentials not configured")
            return None
        url = f"{self.settings.onet_api_base}/online{endpoint}"
        try:
            response = await self.client.get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                auth=(self.settings.onet_api_username or "", self.settings.onet_api_password or ""),
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("O*NET API error: %s for %s", exc.response.status_code, endpoint)
            return None
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("O*NET API request failed: %s", exc)
            return None
        if not isinstance(payload, dict):
            logger.error("Unexpected O*NET payload for %s", endpoint)
            return None
        return payload

    async def _fetch_occupation(self, code: str) -> OccupationSkills | None:
        occupation = await self._fetch_onet(f"/occupations/{code}")
        if not occupation:
            return None
        skills_payload = await self._fetch_onet(f"/occupations/{code}/skills") or {}

        skills: list[TargetRoleSkill] = []
        for item in skills_payload.get("skill") or []:
            if not isinstance(item, dict):
                continue
            element_id = str(item.get("element_id") or "")
            name = item.get("element_name")
            if not name:
                continue
            importance = item.get("im_value") or item.get("value") or 0
            level = item.get("lv_value") or item.get("scale_value") or 0
            skills.append(
                TargetRoleSkill(
                    skill_name=name,
                    skill_code=element_id or None,
                    importance=min(normalize_importance(float(importance)), 100.0),
                    level=_clamp_level(level),
                    category=_category_for(element_id),
                )
            )

        return OccupationSkills(
            occupation_code=code,
            occupation_title=occupation.get("title") or code,
            skills=skills,
            cache_version=ONET_CACHE_VERSION,
        )

    # Public lookups

    async def get_occupation_skills(self, code: str) -> OccupationSkills:
        code = (code or "").strip()
        if not code:
            raise NotFoundError("occupation code is required")

        cached = self.cache.get(code)
        if cached is not None:
            return cached

        row = await asyncio.to_thread(self._load_profile, code)
        if row is not None and self._is_fresh(row):
            occupation = _profile_to_schema(row)
            self.cache.set(code, occupation)
            return occupation

        fetched = await self._fetch_occupation(code)
        if fetched is not None:
            await asyncio.to_thread(self.store_occupation, fetched)
            return fetched

        if row is not None:
            logger.warning("O*NET unavailable, using stale cached data for %s", code)
            return _profile_to_schema(row)

        raise NotFoundError(f"Occupation {code} not found")

    def _search_profiles(self, term: str) -> list[OccupationSearchResult]:
        with self.session_factory() as db:
            rows = (
                db.query(OccupationProfile)
                .filter(OccupationProfile.title.ilike(f"%{term}%"))
                .order_by(OccupationProfile.title)
                .limit(MAX_SEARCH_RESULTS)
                .all()
            )
            return [
                OccupationSearchResult(code=row.code, title=row.title, description=f"{len(row.skills or [])} skills")
                for row in rows
            ]

    async def search_occupations(self, query: str) -> list[OccupationSearchResult]:
        term = (query or "").strip()
        if not term:
            return []

        local = await asyncio.to_thread(self._search_profiles, term)
        if local:
            return local

        data = await self._fetch_onet("/search", params={"keyword": term})
        if not data:
            return []
        results: list[OccupationSearchResult] = []
        for occ in data.get("occupation") or []:
            if not isinstance(occ, dict):
                continue
            if occ.get("code") and occ.get("title"):
                results.append(
                    OccupationSearchResult(code=occ["code"], title=occ["title"], description=occ.get("description"))
                )
        return results[:MAX_SEARCH_RESULTS]

    async def resolve_role(self, target_role: str, code: str | None = None) -> OccupationSkills:
        if code:
            return await self.get_occupation_skills(code)
        matches = await self.search_occupations(target_role)
        if not matches:
            raise NotFoundError(f"No occupation found for role: {target_role}")
        return await self.get_occupation_skills(matches[0].code)
