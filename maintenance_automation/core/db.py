from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from maintenance_automation.core.config import settings


def build_engine(url: str | None = None, echo: bool | None = None):
    url = url or settings.DATABASE_URL
    engine_kwargs: dict = {"echo": settings.DATABASE_ECHO if echo is None else echo}

    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(
            {
                "pool_pre_ping": True,  # Verify connections before use
                "pool_recycle": 3600,
            }
        )

    return create_engine(url, **engine_kwargs)


engine = build_engine()


def init_db(bind=None) -> None:
    # make sure all SQLModel tables are registered before create_all
    from maintenance_automation.infrastructure.database import models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
