from __future__ import annotations

import importlib.util
import json
from pathlib import Path

from skillgap.database import SessionLocal
from skillgap.models import OccupationProfile

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "seed_occupations.py"


def _load_script():
    module_spec = importlib.util.spec_from_file_location("seed_occupations", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


def test_seed_occupations_upserts_profiles(reset_db: None, tmp_path: Path) -> None:
    data = [
        {
            "occupation_code": "15-1252.00",
            "occupation_title": "Software Developers",
            "skills": [{"skill_name": "Programming", "importance": 90, "level": 6, "category": "Technical Skills"}],
        },
        {"occupation_code": "13-2011.00", "occupation_title": "Accountants", "skills": []},
    ]
    path = tmp_path / "occupations.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    seed = _load_script()
    assert seed.main([str(path)]) == 0
    assert seed.main([str(path), "--truncate"]) == 0

    with SessionLocal() as db:
        rows = db.query(OccupationProfile).order_by(OccupationProfile.code).all()
        assert [row.code for row in rows] == ["13-2011.00", "15-1252.00"]
        assert rows[1].skills[0]["skill_name"] == "Programming"
