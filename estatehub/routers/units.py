from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from estatehub.gateway import UnitGateway
from estatehub.models.property import Unit
from estatehub.routers.deps import gateway
from estatehub.schemas.property import AssignTenantRequest, UnitOut, UnitUpdate

router = APIRouter(prefix="/units", tags=["units"])

get_units = gateway(UnitGateway)


@router.get("/{id}", response_model=UnitOut)
def get_unit(id: str, units: UnitGateway = Depends(get_units)) -> Unit:
    return units.get(id)


@router.put("/{id}", response_model=UnitOut)
def update_unit(id: str, payload: UnitUpdate, units: UnitGateway = Depends(get_units)) -> Unit:
    return units.update(id, payload)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_unit(id: str, units: UnitGateway = Depends(get_units)) -> Response:
    units.delete(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{id}/assign-tenant", response_model=UnitOut)
def assign_tenant(id: str, payload: AssignTenantRequest, units: UnitGateway = Depends(get_units)) -> Unit:
    return units.assign_tenant(id, payload.tenant_id)


@router.put("/{id}/remove-tenant", response_model=UnitOut)
def remove_tenant(id: str, units: UnitGateway = Depends(get_units)) -> Unit:
    return units.remove_tenant(id)
