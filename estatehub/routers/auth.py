from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from estatehub.db.session import get_db
from estatehub.gateway import auth as auth_gateway
from estatehub.schemas.common import Acknowledgement
from estatehub.schemas.identity import LoginRequest, LoginResponse, UserCreate, UserOut
from estatehub.security.context import Actor
from estatehub.security.dependencies import get_actor, get_token_service
from estatehub.security.tokens import TokenService
from estatehub.settings import Settings, get_settings

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    return auth_gateway.register(db, payload, tokens, settings)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> LoginResponse:
    return auth_gateway.login(db, payload, tokens)


@router.post("/logout", response_model=Acknowledgement)
def logout() -> Acknowledgement:
    # Tokens are stateless; the client discards its copy.
    return Acknowledgement(message="Logged out")


@router.get("/me", response_model=UserOut)
def me(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)) -> UserOut:
    return auth_gateway.me(db, actor)
