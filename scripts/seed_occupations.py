from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from skillgap import models  # noqa: E402,F401
from skillgap.database import Base, SessionLocal, engine  # noqa: E402
from skillgap.models.occupation_profile import OccupationProfile  # noqa: E402
from skillgap.schemas.taxonomy import OccupationSkills  # noqa: E402
from skillgap.services.taxonomy_provider import OccupationTaxonomy  # noqa: E402


def _load_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Seed occupation profiles (code, title, skills) from a JSON file into the taxonomy cache."
    )
    parser.add_argument("path", help="JSON file holding a list of occupations")
    parser.add_argument("--truncate", action="store_true")
    args = parser.parse_args(argv)

    Base.metadata.create_all(bind=engine)

    if args.truncate:
        with SessionLocal() as db:
            db.query(OccupationProfile).delete()
            db.commit()

    taxonomy = OccupationTaxonomy()
    inserted = 0
    for item in _load_json(Path(args.path)):
        occupation = OccupationSkills.model_validate(item)
        taxonomy.store_occupation(occupation)
        inserted += 1

    print(f"Seeded {inserted} occupations")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
