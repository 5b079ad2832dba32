"""
Automation API Routes.

Manual trigger for the preventive maintenance scan, plus the automation
settings and run history used by the settings screen.
"""

from fastapi import APIRouter, HTTPException, Query, status

from maintenance_automation.api.deps import SessionDep
from maintenance_automation.api.schemas import RunLogResponse
from maintenance_automation.domain.maintenance.services import (
    RunResult,
    run_automation_now,
)
from maintenance_automation.domain.shared.exceptions import StoreError
from maintenance_automation.infrastructure.database.models import (
    AutomationConfig,
    AutomationConfigUpdate,
)
from maintenance_automation.infrastructure.database.repositories import (
    AutomationConfigRepository,
    AutomationLogRepository,
)

router = APIRouter(prefix="/automation", tags=["automation"])


@router.post(
    "/run",
    summary="Run automation now",
    description="Scan pending maintenance tasks and raise work orders and alerts.",
    response_model=RunResult,
)
def run_now(session: SessionDep) -> RunResult:
    return run_automation_now(session)


@router.get("/logs", response_model=list[RunLogResponse])
def list_logs(
    session: SessionDep, limit: int = Query(default=50, ge=1, le=500)
) -> list[RunLogResponse]:
    try:
        logs = AutomationLogRepository(session).list_recent(limit)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database error: {e.message}",
        )
    return [RunLogResponse.model_validate(log, from_attributes=True) for log in logs]


@router.get("/config", response_model=AutomationConfigUpdate)
def get_config(session: SessionDep) -> AutomationConfigUpdate:
    config = AutomationConfigRepository(session).get_or_default()
    return AutomationConfigUpdate.model_validate(config, from_attributes=True)


@router.put("/config", response_model=AutomationConfigUpdate)
def update_config(
    request: AutomationConfigUpdate, session: SessionDep
) -> AutomationConfigUpdate:
    repository = AutomationConfigRepository(session)
    try:
        config = repository.get_current() or AutomationConfig()
        for field, value in request.model_dump().items():
            setattr(config, field, value)
        repository.add(config)
        session.commit()
    except StoreError as e:
        session.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database error: {e.message}",
        )
    return AutomationConfigUpdate.model_validate(config, from_attributes=True)
