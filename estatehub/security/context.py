from __future__ import annotations

from dataclasses import dataclass

from estatehub.models.enums import Role


@dataclass(frozen=True)
class Actor:
    """
    The authenticated identity behind a request.

    Built only from a validated token; attached to `request.state.actor` and
    passed explicitly to gateways. Every scoping filter is derived from `id`.
    """

    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
