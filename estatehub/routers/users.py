from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from estatehub.gateway import IdentityGateway
from estatehub.models.enums import Role
from estatehub.routers.deps import gateway
from estatehub.schemas.common import Page
from estatehub.schemas.identity import UserCreate, UserOut, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])

get_identities = gateway(IdentityGateway)


@router.get("", response_model=Page[UserOut])
def list_users(
    role: Role | None = None,
    page: int | None = None,
    page_size: int | None = None,
    identities: IdentityGateway = Depends(get_identities),
) -> dict:
    return identities.list(role=role, page=page, page_size=page_size).to_dict()


@router.get("/{id}", response_model=UserOut)
def get_user(id: str, identities: IdentityGateway = Depends(get_identities)) -> UserOut:
    return identities.get_public(id)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, identities: IdentityGateway = Depends(get_identities)) -> UserOut:
    return identities.create(payload)


@router.put("/{id}", response_model=UserOut)
def update_user(id: str, payload: UserUpdate, identities: IdentityGateway = Depends(get_identities)) -> UserOut:
    return identities.update(id, payload)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_user(id: str, identities: IdentityGateway = Depends(get_identities)) -> Response:
    identities.deactivate(id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
