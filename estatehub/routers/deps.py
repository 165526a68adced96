from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from fastapi import Depends
from sqlalchemy.orm import Session

from estatehub.db.session import get_db
from estatehub.gateway.base import ResourceGateway
from estatehub.policy import ScopingPolicy
from estatehub.security.context import Actor
from estatehub.security.dependencies import get_actor, get_policy
from estatehub.settings import Settings, get_settings

GatewayT = TypeVar("GatewayT", bound=ResourceGateway)


def gateway(cls: type[GatewayT]) -> Callable[..., GatewayT]:
    """Dependency factory: a request-scoped gateway bound to the current actor."""

    def _build(
        db: Session = Depends(get_db),
        actor: Actor = Depends(get_actor),
        policy: ScopingPolicy = Depends(get_policy),
        settings: Settings = Depends(get_settings),
    ) -> GatewayT:
        return cls(db, actor, policy, settings)

    _build.__name__ = f"get_{cls.__name__}"
    return _build
