from __future__ import annotations

import pytest

from skillgap.schemas.skill_gap import LearnerSkill, TargetRoleSkill
from skillgap.utils.content_hash import analysis_content_hash, content_hash, normalize_text
from skillgap.utils.rounding import round_half_up
from skillgap.utils.ttl_cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_ttl_cache_expires_entries() -> None:
    clock = FakeClock()
    cache: TTLCache[str] = TTLCache(10, clock=clock)

    cache.set("a", "alpha")
    clock.now += 9.9
    assert cache.get("a") == "alpha"
    assert "a" in cache

    clock.now += 0.1
    assert cache.get("a") is None
    assert cache.get("a", "fallback") == "fallback"
    assert len(cache) == 0


def test_ttl_cache_resetting_refreshes_expiry() -> None:
    clock = FakeClock()
    cache: TTLCache[int] = TTLCache(5, clock=clock)

    cache.set("k", 1)
    clock.now += 4
    cache.set("k", 2)
    clock.now += 4
    assert cache.get("k") == 2


def test_ttl_cache_evicts_oldest_when_full() -> None:
    cache: TTLCache[int] = TTLCache(60, maxsize=2, clock=FakeClock())
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    assert "a" not in cache
    assert cache.get("b") == 2 and cache.get("c") == 3
    cache.clear()
    assert len(cache) == 0


def test_ttl_cache_rejects_non_positive_ttl() -> None:
    with pytest.raises(ValueError):
        TTLCache(0)


@pytest.mark.parametrize(
    ("value", "digits", "expected"),
    [(2.5, 0, 3), (0.125, 2, 0.13), (1.0833, 2, 1.08), (-0.4, 0, 0)],
)
def test_round_half_up(value: float, digits: int, expected: float) -> None:
    assert round_half_up(value, digits) == pytest.approx(expected)


def test_content_hash_normalizes_whitespace_and_case() -> None:
    assert normalize_text("  Senior\n  DATA   engineer ") == "senior data engineer"
    assert content_hash("Data  Engineer") == content_hash("data engineer")
    assert content_hash(None) == content_hash("")


def test_analysis_hash_ignores_skill_order() -> None:
    skills = [LearnerSkill(name="Python", level="advanced"), LearnerSkill(name="SQL", level="beginner")]

    forward = analysis_content_hash(skills, "Data Analyst")
    backward = analysis_content_hash(list(reversed(skills)), "data analyst ")

    assert forward == backward
    assert forward != analysis_content_hash(skills[:1], "Data Analyst")
    assert forward != analysis_content_hash(skills, "Data Analyst", resume_text="Ten years of SQL")


def test_analysis_hash_covers_every_input() -> None:
    skills = [LearnerSkill(name="Python", level="advanced")]
    required = [TargetRoleSkill(skill_name="Python", importance=80, level=5, category="Technical Skills")]
    base = {
        "target_skills": required,
        "target_role_code": "15-1252.00",
        "weekly_availability_hours": 10,
        "learning_velocity": 1.0,
    }
    reference = analysis_content_hash(skills, "Developer", **base)

    variants = [
        {"target_skills": [TargetRoleSkill(skill_name="Rust", importance=95, level=7)]},
        {"target_skills": [required[0].model_copy(update={"importance": 60})]},
        {"target_skills": []},
        {"target_skills": None},
        {"target_role_code": "15-1253.00"},
        {"weekly_availability_hours": 20},
        {"learning_velocity": 0.5},
    ]
    hashes = {analysis_content_hash(skills, "Developer", **{**base, **change}) for change in variants}

    assert reference not in hashes
    assert len(hashes) == len(variants)
    assert analysis_content_hash(skills, "developer ", **base) == reference
