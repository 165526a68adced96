from __future__ import annotations

from fastapi import APIRouter, Depends, status

from estatehub.gateway import MaintenanceGateway
from estatehub.models.enums import MaintenanceStatus
from estatehub.models.maintenance import MaintenanceRequest
from estatehub.routers.deps import gateway
from estatehub.schemas.common import Page
from estatehub.schemas.maintenance import (
    AssignStaffRequest,
    CostUpdate,
    MaintenanceCreate,
    MaintenanceOut,
    MaintenanceStatusUpdate,
)

router = APIRouter(prefix="/maintenance", tags=["maintenance"])

get_maintenance = gateway(MaintenanceGateway)


@router.get("", response_model=Page[MaintenanceOut])
def list_requests(
    status: MaintenanceStatus | None = None,
    page: int | None = None,
    page_size: int | None = None,
    requests: MaintenanceGateway = Depends(get_maintenance),
) -> dict:
    return requests.list(status=status, page=page, page_size=page_size).to_dict()


@router.get("/{id}", response_model=MaintenanceOut)
def get_request(id: str, requests: MaintenanceGateway = Depends(get_maintenance)) -> MaintenanceRequest:
    return requests.get(id)


@router.post("", response_model=MaintenanceOut, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: MaintenanceCreate, requests: MaintenanceGateway = Depends(get_maintenance)
) -> MaintenanceRequest:
    return requests.create(payload)


@router.put("/{id}/status", response_model=MaintenanceOut)
def update_request_status(
    id: str, payload: MaintenanceStatusUpdate, requests: MaintenanceGateway = Depends(get_maintenance)
) -> MaintenanceRequest:
    return requests.update_status(id, payload.status)


@router.put("/{id}/assign", response_model=MaintenanceOut)
def assign_staff(
    id: str, payload: AssignStaffRequest, requests: MaintenanceGateway = Depends(get_maintenance)
) -> MaintenanceRequest:
    return requests.assign_staff(id, payload.staff_id)


@router.put("/{id}/cost", response_model=MaintenanceOut)
def update_cost(
    id: str, payload: CostUpdate, requests: MaintenanceGateway = Depends(get_maintenance)
) -> MaintenanceRequest:
    return requests.update_cost(id, payload.actual_cost)


@router.delete("/{id}", response_model=MaintenanceOut)
def cancel_request(id: str, requests: MaintenanceGateway = Depends(get_maintenance)) -> MaintenanceRequest:
    return requests.cancel(id)
