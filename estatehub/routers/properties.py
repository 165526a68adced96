from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from estatehub.gateway import PropertyGateway, UnitGateway
from estatehub.models.property import Property, Unit
from estatehub.routers.deps import gateway
from estatehub.schemas.common import Page
from estatehub.schemas.property import PropertyCreate, PropertyOut, PropertyUpdate, UnitCreate, UnitOut

router = APIRouter(prefix="/properties", tags=["properties"])

get_properties = gateway(PropertyGateway)
get_units = gateway(UnitGateway)


@router.get("", response_model=Page[PropertyOut])
def list_properties(
    page: int | None = None,
    page_size: int | None = None,
    properties: PropertyGateway = Depends(get_properties),
) -> dict:
    return properties.list(page=page, page_size=page_size).to_dict()


@router.get("/by-admin/{admin_id}", response_model=Page[PropertyOut])
def list_properties_by_admin(
    admin_id: str,
    page: int | None = None,
    page_size: int | None = None,
    properties: PropertyGateway = Depends(get_properties),
) -> dict:
    return properties.list_by_admin(admin_id, page=page, page_size=page_size).to_dict()


@router.get("/{id}", response_model=PropertyOut)
def get_property(id: str, properties: PropertyGateway = Depends(get_properties)) -> Property:
    return properties.get(id)


@router.post("", response_model=PropertyOut, status_code=status.HTTP_201_CREATED)
def create_property(payload: PropertyCreate, properties: PropertyGateway = Depends(get_properties)) -> Property:
    return properties.create(payload)


@router.put("/{id}", response_model=PropertyOut)
def update_property(
    id: str, payload: PropertyUpdate, properties: PropertyGateway = Depends(get_properties)
) -> Property:
    return properties.update(id, payload)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(id: str, properties: PropertyGateway = Depends(get_properties)) -> Response:
    properties.deactivate(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{id}/units", response_model=Page[UnitOut])
def list_units(
    id: str,
    page: int | None = None,
    page_size: int | None = None,
    units: UnitGateway = Depends(get_units),
) -> dict:
    return units.list_by_property(id, page=page, page_size=page_size).to_dict()


@router.post("/{id}/units", response_model=UnitOut, status_code=status.HTTP_201_CREATED)
def add_unit(id: str, payload: UnitCreate, units: UnitGateway = Depends(get_units)) -> Unit:
    return units.add(id, payload)
