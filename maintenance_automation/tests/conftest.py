from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from maintenance_automation.api.deps import get_db
from maintenance_automation.core.db import build_engine
from maintenance_automation.infrastructure.database import models  # noqa: F401
from maintenance_automation.main import create_app


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://", echo=False)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(engine) -> Generator[TestClient, None, None]:
    app = create_app(with_lifespan=False)

    def _get_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
