"""
Scoping policy evaluator.

Answers one question, purely from the loaded rule table and the arguments:

    evaluate(actor, resource, operation, ownership=None) -> Decision

Algorithm:
1. Admin-style unrestricted role -> Allow.
2. No rule for (role, resource, operation) -> Deny.
3. Rule is `all` -> Allow.
4. No ownership snapshot (collection query) -> AllowWithFilter, with a filter
   built from the actor's id and the rule's paths.
5. Ownership snapshot -> Allow if any rule path resolves to the actor's id,
   else Deny.

Nothing here reads request parameters: filters only ever contain the validated
actor id, so a client cannot widen its scope by forging ownership fields.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from estatehub.policy.rules import (
    EffectiveRole,
    Operation,
    PolicyConfig,
    ResourceType,
    Rule,
    compute_effective_rules,
    load_policy_config,
)
from estatehub.security.context import Actor

logger = logging.getLogger(__name__)


# ---- Decision types ------------------------------------------------------------------


class Effect(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    ALLOW_WITH_FILTER = "allow_with_filter"


@dataclass(frozen=True)
class ScopeFilter:
    """Records are visible when any of `paths` resolves to `actor_id`."""

    actor_id: str
    paths: tuple[str, ...]


@dataclass(frozen=True)
class Decision:
    effect: Effect
    filter: ScopeFilter | None = None

    @property
    def allowed(self) -> bool:
        return self.effect is not Effect.DENY

    @classmethod
    def allow(cls) -> Decision:
        return cls(Effect.ALLOW)

    @classmethod
    def deny(cls) -> Decision:
        return cls(Effect.DENY)

    @classmethod
    def allow_with_filter(cls, scope: ScopeFilter) -> Decision:
        return cls(Effect.ALLOW_WITH_FILTER, scope)


@dataclass(frozen=True)
class Ownership:
    """
    The ownership attributes of one record, keyed by path.

    Each path maps to the set of identity ids it resolves to (a relation such
    as `units.tenant_id` can resolve to several). Unresolvable paths are absent.
    """

    values: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def resolves_to(self, path: str, actor_id: str) -> bool:
        return actor_id in self.values.get(path, frozenset())


# ---- Public route matching -----------------------------------------------------------


_PATH_PARAM_RE = re.compile(r"\{[^/]+\}")


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    """
    Convert a simple path template into a compiled regex.

    Example:
        /units/{id}  ->  /units/[^/]+   (used with fullmatch)
    """

    regex = _PATH_PARAM_RE.sub(r"[^/]+", path_template)
    return re.compile(regex)


# ---- Engine --------------------------------------------------------------------------


class ScopingPolicy:
    """
    In-memory evaluator built from a validated PolicyConfig.

    Usage:
        policy = ScopingPolicy.from_yaml(Path("config/scoping_policy.yaml"))
        decision = policy.evaluate(actor, ResourceType.UNIT, Operation.LIST)
    """

    def __init__(self, config: PolicyConfig, effective: Mapping[object, EffectiveRole]) -> None:
        self._config = config
        self._effective = dict(effective)
        self._public_patterns = [
            (_path_template_to_regex(route.path_template), route.methods) for route in config.public_routes
        ]

    @classmethod
    def from_config(cls, config: PolicyConfig) -> ScopingPolicy:
        return cls(config, compute_effective_rules(config))

    @classmethod
    def from_yaml(cls, path: Path) -> ScopingPolicy:
        """Convenience: load YAML and build an evaluator in one step."""
        return cls.from_config(load_policy_config(path))

    @property
    def config(self) -> PolicyConfig:
        return self._config

    def rule_paths(self) -> dict[ResourceType, frozenset[str]]:
        """Every ownership path the table uses, per resource type."""
        paths: dict[ResourceType, set[str]] = {}
        for role in self._effective.values():
            for (resource, _operation), rule in role.rules.items():
                paths.setdefault(resource, set()).update(rule.paths)
        return {resource: frozenset(p) for resource, p in paths.items()}

    def is_public(self, method: str, path: str) -> bool:
        method = method.upper()
        for regex, methods in self._public_patterns:
            if method in methods and regex.fullmatch(path):
                return True
        return False

    def rule_for(self, actor: Actor, resource: ResourceType, operation: Operation) -> Rule | None:
        role = self._effective.get(actor.role)
        if role is None:
            return None
        if role.unrestricted:
            return Rule(unrestricted=True)
        return role.rules.get((resource, operation))

    def evaluate(
        self,
        actor: Actor,
        resource: ResourceType,
        operation: Operation,
        ownership: Ownership | None = None,
    ) -> Decision:
        rule = self.rule_for(actor, resource, operation)

        if rule is None:
            logger.debug(
                "Scope: denied (no rule) role=%s resource=%s op=%s",
                actor.role.value,
                resource.value,
                operation.value,
            )
            return Decision.deny()

        if rule.unrestricted:
            return Decision.allow()

        if ownership is None:
            return Decision.allow_with_filter(ScopeFilter(actor_id=actor.id, paths=tuple(sorted(rule.paths))))

        for path in sorted(rule.paths):
            if ownership.resolves_to(path, actor.id):
                logger.debug(
                    "Scope: allowed role=%s resource=%s op=%s via=%s",
                    actor.role.value,
                    resource.value,
                    operation.value,
                    path,
                )
                return Decision.allow()

        logger.debug(
            "Scope: denied role=%s resource=%s op=%s paths=%s",
            actor.role.value,
            resource.value,
            operation.value,
            sorted(rule.paths),
        )
        return Decision.deny()
