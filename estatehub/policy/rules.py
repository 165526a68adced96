"""
Scoping rule table and YAML loader.

Key ideas:
- Load YAML once at startup (public routes + per-role rules).
- Resolve role inheritance (`extends`) and detect cycles.
- Precompute effective rules per role so evaluation is a dict lookup.

This module is pure Python and has no FastAPI or SQLAlchemy dependency.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from estatehub.models.enums import Role

logger = logging.getLogger(__name__)


# ---- Vocabulary ----------------------------------------------------------------------


class ResourceType(str, Enum):
    IDENTITY = "identity"
    PROPERTY = "property"
    UNIT = "unit"
    PAYMENT = "payment"
    MAINTENANCE = "maintenance"
    MESSAGE = "message"
    NOTIFICATION = "notification"


class Operation(str, Enum):
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


UNRESTRICTED = "all"

_PATH_RE = re.compile(r"[a-z_]+(\.[a-z_]+)?")


# ---- Data structures -----------------------------------------------------------------


@dataclass(frozen=True)
class Rule:
    """Either unrestricted, or restricted to records reachable through `paths`."""

    unrestricted: bool = False
    paths: frozenset[str] = frozenset()

    def merge(self, other: Rule) -> Rule:
        # Most permissive wins.
        if self.unrestricted or other.unrestricted:
            return Rule(unrestricted=True)
        return Rule(paths=self.paths | other.paths)


@dataclass(frozen=True)
class PublicRoute:
    path_template: str
    methods: frozenset[str]


@dataclass(frozen=True)
class RoleDef:
    name: Role
    rules: Mapping[tuple[ResourceType, Operation], Rule]
    extends: Role | None = None
    unrestricted: bool = False


@dataclass(frozen=True)
class PolicyConfig:
    roles: Mapping[Role, RoleDef]
    public_routes: tuple[PublicRoute, ...]


class PolicyConfigError(ValueError):
    """Raised when the scoping YAML is invalid."""


# ---- Loader --------------------------------------------------------------------------


def _normalize_methods(methods: Iterable[str]) -> frozenset[str]:
    return frozenset(str(m).upper() for m in methods)


def _parse_enum(enum_cls: type[Enum], raw: Any, what: str) -> Any:
    try:
        return enum_cls(raw)
    except ValueError as exc:
        allowed = sorted(e.value for e in enum_cls)
        raise PolicyConfigError(f"unknown {what} {raw!r}; expected one of {allowed}") from exc


def _parse_rule(raw: Any, where: str) -> Rule:
    if raw == UNRESTRICTED:
        return Rule(unrestricted=True)
    if not isinstance(raw, list) or not raw:
        raise PolicyConfigError(f"{where} must be {UNRESTRICTED!r} or a non-empty list of paths")

    paths: set[str] = set()
    for path in raw:
        path = str(path).strip()
        if not _PATH_RE.fullmatch(path):
            raise PolicyConfigError(f"{where} has malformed path {path!r}")
        paths.add(path)
    return Rule(paths=frozenset(paths))


def _parse_role(role: Role, raw: Any) -> RoleDef:
    if not isinstance(raw, dict):
        raise PolicyConfigError(f"role {role.value!r} must be a mapping")

    extends = raw.get("extends")
    parent = _parse_enum(Role, str(extends).strip(), "role") if extends else None

    rules_raw = raw.get("rules") or {}
    if not isinstance(rules_raw, dict):
        raise PolicyConfigError(f"role {role.value!r}.rules must be a mapping")

    rules: dict[tuple[ResourceType, Operation], Rule] = {}
    for resource_name, ops_raw in rules_raw.items():
        resource = _parse_enum(ResourceType, resource_name, "resource type")
        if not isinstance(ops_raw, dict):
            raise PolicyConfigError(f"role {role.value!r}.rules.{resource.value} must be a mapping")
        for op_name, rule_raw in ops_raw.items():
            operation = _parse_enum(Operation, op_name, "operation")
            where = f"role {role.value!r}.rules.{resource.value}.{operation.value}"
            rules[(resource, operation)] = _parse_rule(rule_raw, where)

    return RoleDef(
        name=role,
        rules=rules,
        extends=parent,
        unrestricted=bool(raw.get("unrestricted", False)),
    )


def _parse_public(raw: Any) -> tuple[PublicRoute, ...]:
    if not isinstance(raw, list):
        raise PolicyConfigError("public must be a list when present")

    routes: list[PublicRoute] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise PolicyConfigError("public entries must be mappings")
        path_template = str(entry.get("path", "")).strip()
        methods_raw = entry.get("methods") or []
        if not path_template:
            raise PolicyConfigError("public route requires non-empty path")
        if not isinstance(methods_raw, list) or not methods_raw:
            raise PolicyConfigError(f"public route {path_template!r} must have methods list")
        routes.append(PublicRoute(path_template=path_template, methods=_normalize_methods(methods_raw)))
    return tuple(routes)


def parse_policy_config(raw: Mapping[str, Any]) -> PolicyConfig:
    """
    Validate an already-parsed document.

    Expected shape (simplified):

        scoping:
          public:
            - path: /health
              methods: [GET]
          roles:
            Admin:
              unrestricted: true
            Owner:
              extends: Tenant
              rules:
                property:
                  read: [admin_id, units.owner_id]
                  create: all
    """

    if "scoping" not in raw:
        raise PolicyConfigError("missing top-level 'scoping' key")
    scoping = raw["scoping"] or {}
    if not isinstance(scoping, dict):
        raise PolicyConfigError("'scoping' must be a mapping")

    roles_raw = scoping.get("roles") or {}
    if not isinstance(roles_raw, dict):
        raise PolicyConfigError("roles must be a mapping")

    roles: dict[Role, RoleDef] = {}
    for role_name, role_val in roles_raw.items():
        role = _parse_enum(Role, role_name, "role")
        roles[role] = _parse_role(role, role_val)

    for role in roles.values():
        if role.extends and role.extends not in roles:
            raise PolicyConfigError(f"role {role.name.value!r} extends undefined role {role.extends.value!r}")

    return PolicyConfig(roles=roles, public_routes=_parse_public(scoping.get("public") or []))


def load_policy_config(path: Path) -> PolicyConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw = yaml.safe_load(raw_text) or {}
    if not isinstance(raw, dict):
        raise PolicyConfigError(f"policy document must be a mapping: {path}")
    return parse_policy_config(raw)


# ---- Inheritance resolution ----------------------------------------------------------


@dataclass(frozen=True)
class EffectiveRole:
    unrestricted: bool
    rules: Mapping[tuple[ResourceType, Operation], Rule]


def compute_effective_rules(config: PolicyConfig) -> dict[Role, EffectiveRole]:
    """
    Resolve `extends` chains into one flat rule map per role.

    Raises PolicyConfigError on inheritance cycles.
    """

    effective: dict[Role, EffectiveRole] = {}
    visiting: set[Role] = set()

    def dfs(role: Role) -> EffectiveRole:
        if role in effective:
            return effective[role]
        if role in visiting:
            raise PolicyConfigError(f"cycle detected in role inheritance at {role.value!r}")
        visiting.add(role)

        role_def = config.roles[role]
        unrestricted = role_def.unrestricted
        rules = dict(role_def.rules)
        if role_def.extends:
            parent = dfs(role_def.extends)
            unrestricted = unrestricted or parent.unrestricted
            for key, parent_rule in parent.rules.items():
                rules[key] = rules[key].merge(parent_rule) if key in rules else parent_rule

        result = EffectiveRole(unrestricted=unrestricted, rules=rules)
        effective[role] = result
        visiting.remove(role)
        return result

    for role in config.roles:
        dfs(role)

    return effective
