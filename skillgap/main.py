# main.py
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillgap.api.routes.courses import router as courses_router
from skillgap.api.routes.health import router as health_router
from skillgap.api.routes.occupations import router as occupations_router
from skillgap.api.routes.skill_gap import router as skill_gap_router
from skillgap.api.routes.skill_history import router as skill_history_router
from skillgap.config import settings
from skillgap.database import init_db
from skillgap.services.course_providers import build_course_providers
from skillgap.services.taxonomy_provider import OccupationTaxonomy
from skillgap.utils.ttl_cache import TTLCache


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pooled client for every outbound call (course providers, O*NET).
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            app.state.http_client = client
            app.state.course_providers = build_course_providers(settings)
            app.state.course_cache = TTLCache(settings.course_cache_ttl_seconds, maxsize=1024)
            app.state.taxonomy = OccupationTaxonomy(
                client=client,
                cache=TTLCache(settings.taxonomy_cache_ttl_seconds, maxsize=512),
                settings=settings,
            )
            yield

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints (do not depend on API_PREFIX)
    application.include_router(health_router)

    application.include_router(skill_gap_router, prefix=settings.api_prefix)
    application.include_router(courses_router, prefix=settings.api_prefix)
    application.include_router(occupations_router, prefix=settings.api_prefix)
    application.include_router(skill_history_router, prefix=settings.api_prefix)

    init_db()
    return application


app = create_app()
