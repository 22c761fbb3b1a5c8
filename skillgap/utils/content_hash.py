from __future__ import annotations

import hashlib
import re
from typing import Iterable

from skillgap.schemas.skill_gap import LearnerSkill, TargetRoleSkill

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip().lower()


def content_hash(text: str | None) -> str:
    """SHA-256 hex digest of whitespace/case-normalized text."""
    return hashlib.sha256(normalize_text(text).encode("utf-8")).hexdigest()


def analysis_content_hash(
    learner_skills: Iterable[LearnerSkill],
    target_role: str,
    resume_text: str | None = None,
    *,
    target_skills: Iterable[TargetRoleSkill] | None = None,
    target_role_code: str | None = None,
    weekly_availability_hours: float | None = None,
    learning_velocity: float | None = None,
) -> str:
    """Hash every analysis input, so equal hashes mean an equal analysis.

    Skill order does not affect the hash. `target_skills=None`
    (resolve through the taxonomy) hashes differently from an explicit empty list.
    """
    skill_parts = sorted(f"{normalize_text(s.name)}={s.level}" for s in learner_skills)
    parts = [
        f"role:{normalize_text(target_role)}",
        f"code:{normalize_text(target_role_code)}",
        f"skills:{','.join(skill_parts)}",
    ]
    if target_skills is not None:
        required = sorted(
            f"{normalize_text(s.skill_name)}={s.importance:g}/{s.level:g}/{normalize_text(s.category)}"
            for s in target_skills
        )
        parts.append(f"required:{','.join(required)}")
    if weekly_availability_hours is not None:
        parts.append(f"hours:{float(weekly_availability_hours):g}")
    if learning_velocity is not None:
        parts.append(f"velocity:{float(learning_velocity):g}")
    if resume_text:
        parts.append(f"content:{normalize_text(resume_text)}")
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
