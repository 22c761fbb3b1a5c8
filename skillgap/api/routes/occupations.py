from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from skillgap.api.dependencies import get_taxonomy
from skillgap.exceptions import NotFoundError
from skillgap.schemas.taxonomy import OccupationSearchResult, OccupationSkills
from skillgap.services.taxonomy_provider import OccupationTaxonomy


router = APIRouter(prefix="/occupations", tags=["occupations"])


@router.get("/search", response_model=list[OccupationSearchResult])
async def search_occupations(
    q: str = Query(default="", min_length=0),
    taxonomy: OccupationTaxonomy = Depends(get_taxonomy),
) -> list[OccupationSearchResult]:
    if not q.strip():
        return []
    return await taxonomy.search_occupations(q)


@router.get("/{code}/skills", response_model=OccupationSkills)
async def get_occupation_skills(
    code: str,
    taxonomy: OccupationTaxonomy = Depends(get_taxonomy),
) -> OccupationSkills:
    try:
        return await taxonomy.get_occupation_skills(code)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
