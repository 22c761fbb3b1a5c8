from __future__ import annotations

import os
from typing import Any, Iterator

import pytest
from fastapi.testclient import TestClient


def pytest_configure() -> None:
    # Ensure the SQLAlchemy engine is created against sqlite for tests.
    os.environ["DB_URL"] = "sqlite:///./test.db"
    os.environ["ENVIRONMENT"] = "test"

    # Outbound integrations stay unconfigured so nothing reaches the network.
    for name in (
        "COURSERA_API_KEY",
        "UDEMY_CLIENT_ID",
        "UDEMY_CLIENT_SECRET",
        "ONET_API_USERNAME",
        "ONET_API_PASSWORD",
        "COURSERA_AFFILIATE_ID",
        "UDEMY_AFFILIATE_ID",
        "COURSE_PROVIDERS",
    ):
        os.environ.pop(name, None)


@pytest.fixture()
def reset_db() -> Iterator[None]:
    from skillgap import models  # noqa: F401
    from skillgap.database import Base, engine

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def client(reset_db: None) -> Iterator[Any]:
    from skillgap.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
