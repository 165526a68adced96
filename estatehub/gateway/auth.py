"""
Registration and login: the only operations that run without an Actor.

Both answer with a bearer token plus the public identity summary.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from estatehub.errors import Forbidden, NotFound, Unauthenticated
from estatehub.gateway.base import commit_or_conflict
from estatehub.gateway.identities import new_identity, to_public
from estatehub.models.enums import Role
from estatehub.models.identity import User
from estatehub.schemas.identity import LoginRequest, LoginResponse, UserCreate, UserOut
from estatehub.security.context import Actor
from estatehub.security.passwords import verify_password
from estatehub.security.tokens import TokenService
from estatehub.settings import Settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _login_response(user: User, tokens: TokenService) -> LoginResponse:
    issued = tokens.issue(user)
    return LoginResponse(
        token=issued.token,
        user_id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        expires_at=issued.expires_at,
    )


def register(db: Session, data: UserCreate, tokens: TokenService, settings: Settings) -> LoginResponse:
    if data.role is Role.ADMIN and not settings.allow_admin_self_registration:
        logger.warning("Rejected self-registration as Admin")
        raise Forbidden("Administrators cannot self-register")

    user = new_identity(db, data)
    commit_or_conflict(db, "Email is already registered")
    logger.info("Identity registered id=%s role=%s", user.id, user.role.value)
    return _login_response(user, tokens)


def login(db: Session, data: LoginRequest, tokens: TokenService) -> LoginResponse:
    user = db.scalars(select(User).where(User.email == data.email)).first()
    if user is None or not user.is_active or not verify_password(data.password, user.password_hash):
        logger.info("Login failed")
        raise Unauthenticated(INVALID_CREDENTIALS)

    logger.info("Login succeeded id=%s", user.id)
    return _login_response(user, tokens)


def me(db: Session, actor: Actor) -> UserOut:
    user = db.get(User, actor.id)
    if user is None or not user.is_active:
        raise NotFound("User")
    return to_public(user)
