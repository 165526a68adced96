"""
Resource Access Gateway: one gateway class per resource family.

`GATEWAYS` maps every ResourceType in the rule table to the class that serves
it; `check_policy_coverage` runs at startup so a rule path the gateways
cannot resolve fails the boot instead of silently denying at request time.
"""

from __future__ import annotations

from estatehub.gateway.base import ResourceGateway, redact_identity, require_object_id
from estatehub.gateway.identities import IdentityGateway
from estatehub.gateway.maintenance import MaintenanceGateway
from estatehub.gateway.messages import MessageGateway
from estatehub.gateway.notifications import NotificationGateway
from estatehub.gateway.pagination import PageResult, clamp, paginate
from estatehub.gateway.payments import PaymentGateway
from estatehub.gateway.properties import PropertyGateway
from estatehub.gateway.units import UnitGateway
from estatehub.policy import PolicyConfigError, ResourceType, ScopingPolicy

GATEWAYS: dict[ResourceType, type[ResourceGateway]] = {
    ResourceType.IDENTITY: IdentityGateway,
    ResourceType.PROPERTY: PropertyGateway,
    ResourceType.UNIT: UnitGateway,
    ResourceType.PAYMENT: PaymentGateway,
    ResourceType.MAINTENANCE: MaintenanceGateway,
    ResourceType.MESSAGE: MessageGateway,
    ResourceType.NOTIFICATION: NotificationGateway,
}


def check_policy_coverage(policy: ScopingPolicy) -> None:
    for resource, paths in policy.rule_paths().items():
        gateway = GATEWAYS.get(resource)
        if gateway is None:
            raise PolicyConfigError(f"No gateway serves resource '{resource.value}'")
        unsupported = sorted(path for path in paths if not gateway.supports_path(path))
        if unsupported:
            raise PolicyConfigError(f"Resource '{resource.value}' has unresolvable paths: {unsupported}")


__all__ = [
    "GATEWAYS",
    "IdentityGateway",
    "MaintenanceGateway",
    "MessageGateway",
    "NotificationGateway",
    "PageResult",
    "PaymentGateway",
    "PropertyGateway",
    "ResourceGateway",
    "UnitGateway",
    "check_policy_coverage",
    "clamp",
    "paginate",
    "redact_identity",
    "require_object_id",
]
