from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from estatehub.errors import Conflict, InvalidInput, NotFound
from estatehub.gateway.base import ResourceGateway, redact_identity, require_object_id
from estatehub.gateway.pagination import PageResult
from estatehub.models.enums import Role
from estatehub.models.identity import User
from estatehub.policy import Operation, ResourceType
from estatehub.schemas.identity import UserCreate, UserOut, UserUpdate
from estatehub.security.passwords import hash_password, is_password_strong

logger = logging.getLogger(__name__)

WEAK_PASSWORD_MESSAGE = (
    "Password must be at least 8 characters and contain an uppercase letter, "
    "a lowercase letter, a digit and a symbol"
)


def to_public(user: User) -> UserOut:
    """Every identity leaving the gateway goes through here."""
    row = {column.key: getattr(user, column.key) for column in User.__table__.columns}
    return UserOut.model_validate(redact_identity(row))


def email_taken(db: Session, email: str, exclude_id: str | None = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    return db.execute(stmt.limit(1)).first() is not None


def require_active_identity(db: Session, identity_id: Any, field: str, role: Role | None = None) -> User:
    """Resolve an identity referenced by a request body (tenant, staff, receiver, ...)."""

    identity_id = require_object_id(identity_id, field=field)
    user = db.get(User, identity_id)
    if user is None or not user.is_active:
        raise NotFound("User")
    if role is not None and user.role is not role:
        raise InvalidInput(f"{field} must reference a {role.value}", field=field)
    return user


def new_identity(db: Session, data: UserCreate) -> User:
    """Shared by admin-created identities and self-registration."""

    if not is_password_strong(data.password):
        raise InvalidInput(WEAK_PASSWORD_MESSAGE, field="password")
    if email_taken(db, data.email):
        raise Conflict("Email is already registered")

    user = User(
        name=data.name.strip(),
        email=data.email,
        phone=data.phone,
        role=data.role,
        password_hash=hash_password(data.password),
        is_active=True,
    )
    db.add(user)
    return user


class IdentityGateway(ResourceGateway[User]):
    model = User
    resource = ResourceType.IDENTITY
    label = "User"
    active_column = "is_active"

    def list(self, role: Role | None = None, page: int | None = None, page_size: int | None = None) -> PageResult:
        stmt = self._base_query()
        if role is not None:
            stmt = stmt.where(User.role == role)
        result = self.page(stmt.order_by(User.created_at, User.id), page, page_size)
        return PageResult(
            items=[to_public(user) for user in result.items],
            total=result.total,
            page=result.page,
            page_size=result.page_size,
        )

    def get_public(self, identity_id: Any) -> UserOut:
        return to_public(self.get(identity_id))

    def create(self, data: UserCreate) -> UserOut:
        self.authorize_create({})
        user = new_identity(self.db, data)
        self.commit("Email is already registered")
        logger.info("Identity created id=%s role=%s by=%s", user.id, user.role.value, self.actor.id)
        return to_public(user)

    def update(self, identity_id: Any, data: UserUpdate) -> UserOut:
        identity_id = self.authorize(Operation.UPDATE, identity_id)
        user = self.fetch(identity_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("email") and email_taken(self.db, changes["email"], exclude_id=user.id):
            raise Conflict("Email is already registered")

        for key, value in changes.items():
            if value is None and key != "phone":
                continue
            setattr(user, key, value.strip() if key == "name" else value)

        self.commit("Email is already registered")
        return to_public(user)

    def deactivate(self, identity_id: Any) -> None:
        identity_id = self.authorize(Operation.DELETE, identity_id)
        if identity_id == self.actor.id:
            raise Conflict("An administrator cannot deactivate their own account")

        user = self.fetch(identity_id)
        user.is_active = False
        self.commit()
        logger.info("Identity deactivated id=%s by=%s", identity_id, self.actor.id)
