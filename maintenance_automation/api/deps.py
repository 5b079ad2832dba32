import random
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from maintenance_automation.core.db import engine
from maintenance_automation.domain.maintenance.services import (
    Rescheduler,
    TechnicianLoadCalculator,
    TechnicianSelector,
)
from maintenance_automation.infrastructure.database.repositories import (
    ExecutionHistoryRepository,
    TaskRepository,
    TechnicianRepository,
)


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]


def get_rng() -> random.Random:
    return random.Random()


def get_load_calculator(session: SessionDep) -> TechnicianLoadCalculator:
    return TechnicianLoadCalculator(
        TaskRepository(session),
        TechnicianRepository(session),
        ExecutionHistoryRepository(session),
    )


def get_selector(
    session: SessionDep, rng: Annotated[random.Random, Depends(get_rng)]
) -> TechnicianSelector:
    return TechnicianSelector(
        TechnicianRepository(session),
        TaskRepository(session),
        rng=rng,
        history_repository=ExecutionHistoryRepository(session),
    )


def get_rescheduler(session: SessionDep) -> Rescheduler:
    return Rescheduler(TaskRepository(session), ExecutionHistoryRepository(session))


LoadCalculatorDep = Annotated[TechnicianLoadCalculator, Depends(get_load_calculator)]
SelectorDep = Annotated[TechnicianSelector, Depends(get_selector)]
ReschedulerDep = Annotated[Rescheduler, Depends(get_rescheduler)]
