# taxonomy.py
from __future__ import annotations

from pydantic import BaseModel, Field

from skillgap.schemas.skill_gap import TargetRoleSkill


class OccupationSearchResult(BaseModel):
    code: str
    title: str
    description: str | None = None


class OccupationSkills(BaseModel):
    occupation_code: str
    occupation_title: str
    skills: list[TargetRoleSkill] = Field(default_factory=list)
    cache_version: str | None = None
