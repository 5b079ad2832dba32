"""Technician selection and workload routes."""

from fastapi import APIRouter, HTTPException, Query, status

from maintenance_automation.api.deps import LoadCalculatorDep, SelectorDep, SessionDep
from maintenance_automation.api.schemas import SelectionResponse, TechnicianResponse
from maintenance_automation.domain.maintenance.services import LoadStatistics
from maintenance_automation.domain.shared.exceptions import StoreError
from maintenance_automation.infrastructure.database.models import (
    Technician,
    TechnicianCreate,
)
from maintenance_automation.infrastructure.database.repositories import (
    TechnicianRepository,
)

router = APIRouter(prefix="/technicians", tags=["technicians"])


@router.post(
    "/",
    response_model=TechnicianResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_technician(
    request: TechnicianCreate, session: SessionDep
) -> TechnicianResponse:
    try:
        technician = TechnicianRepository(session).add(
            Technician.model_validate(request.model_dump())
        )
        session.commit()
    except StoreError as e:
        session.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database error: {e.message}",
        )
    return TechnicianResponse.model_validate(technician, from_attributes=True)


@router.get("/select", response_model=SelectionResponse)
def select_technician(
    selector: SelectorDep, function_type: str = Query(min_length=1)
) -> SelectionResponse:
    """
    Suggest a technician for a task type.

    Returns selected=false with a reason when no active technician
    covers the type.
    """
    try:
        result = selector.select(function_type)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database error: {e.message}",
        )
    return SelectionResponse.from_result(result)


@router.get("/load", response_model=LoadStatistics)
def technician_load(
    calculator: LoadCalculatorDep, function_type: str | None = None
) -> LoadStatistics:
    try:
        return calculator.statistics(function_type)
    except StoreError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database error: {e.message}",
        )
