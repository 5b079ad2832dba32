"""Maintenance task routes: completion, rescheduling and technician assignment."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from maintenance_automation.api.deps import ReschedulerDep, SelectorDep, SessionDep
from maintenance_automation.api.schemas import (
    AssignmentResponse,
    SelectionResponse,
    TaskResponse,
)
from maintenance_automation.domain.shared.exceptions import (
    EntityNotFoundError,
    StoreError,
    ValidationError,
)
from maintenance_automation.infrastructure.database.models import (
    MaintenanceTask,
    MaintenanceTaskCreate,
)
from maintenance_automation.infrastructure.database.repositories import TaskRepository

router = APIRouter(prefix="/tasks", tags=["tasks"])


class CompleteTaskRequest(BaseModel):
    actual_minutes: int | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=2000)


def _to_response(task) -> TaskResponse:
    return TaskResponse.model_validate(task, from_attributes=True)


def _store_unavailable(e: StoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Database error: {e.message}",
    )


@router.post(
    "/",
    summary="Create maintenance task",
    description="Register a recurring task; period_days defaults from period_label.",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_task(request: MaintenanceTaskCreate, session: SessionDep) -> TaskResponse:
    try:
        task = TaskRepository(session).add(
            MaintenanceTask.model_validate(request.model_dump())
        )
        session.commit()
    except StoreError as e:
        session.rollback()
        raise _store_unavailable(e)
    return _to_response(task)


@router.get("/orphans", response_model=list[TaskResponse])
def list_orphans(session: SessionDep) -> list[TaskResponse]:
    """Open tasks without a technician, waiting for assignment."""
    try:
        tasks = TaskRepository(session).list_orphans()
    except StoreError as e:
        raise _store_unavailable(e)
    return [_to_response(task) for task in tasks]


@router.post(
    "/{task_id}/reschedule",
    response_model=TaskResponse,
    responses={404: {"description": "Task not found"}},
)
def reschedule_task(
    task_id: UUID, session: SessionDep, rescheduler: ReschedulerDep
) -> TaskResponse:
    try:
        task = rescheduler.reschedule(task_id)
        session.commit()
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ValidationError as e:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except StoreError as e:
        session.rollback()
        raise _store_unavailable(e)
    return _to_response(task)


@router.post(
    "/{task_id}/complete",
    response_model=TaskResponse,
    responses={404: {"description": "Task not found"}},
)
def complete_task(
    task_id: UUID,
    request: CompleteTaskRequest,
    session: SessionDep,
    rescheduler: ReschedulerDep,
) -> TaskResponse:
    try:
        task = rescheduler.complete_task(
            task_id, actual_minutes=request.actual_minutes, notes=request.notes
        )
        session.commit()
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ValidationError as e:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except StoreError as e:
        session.rollback()
        raise _store_unavailable(e)
    return _to_response(task)


@router.post(
    "/{task_id}/assign",
    response_model=AssignmentResponse,
    responses={404: {"description": "Task not found"}},
)
def assign_task(
    task_id: UUID, session: SessionDep, selector: SelectorDep
) -> AssignmentResponse:
    try:
        task, result = selector.assign_task(task_id)
        session.commit()
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except StoreError as e:
        session.rollback()
        raise _store_unavailable(e)
    return AssignmentResponse(
        task=_to_response(task), selection=SelectionResponse.from_result(result)
    )
