"""Tests for the scoping YAML loader and role inheritance."""

from __future__ import annotations

import pytest

from estatehub.models.enums import Role
from estatehub.policy.rules import (
    Operation,
    PolicyConfigError,
    ResourceType,
    Rule,
    compute_effective_rules,
    load_policy_config,
    parse_policy_config,
)


def _doc(roles, public=None):
    return {"scoping": {"roles": roles, "public": public or []}}


def test_shipped_policy_loads(policy):
    config = policy.config
    assert set(config.roles) == {Role.ADMIN, Role.OWNER, Role.TENANT}
    assert config.roles[Role.OWNER].extends is Role.TENANT
    assert config.roles[Role.ADMIN].unrestricted


def test_load_from_file(tmp_path):
    path = tmp_path / "policy.yaml"
    path.write_text(
        "scoping:\n"
        "  public:\n"
        "    - path: /health\n"
        "      methods: [get]\n"
        "  roles:\n"
        "    Tenant:\n"
        "      rules:\n"
        "        unit:\n"
        "          read: [tenant_id]\n",
        encoding="utf-8",
    )

    config = load_policy_config(path)

    assert config.public_routes[0].methods == frozenset({"GET"})
    assert config.roles[Role.TENANT].rules[(ResourceType.UNIT, Operation.READ)] == Rule(
        paths=frozenset({"tenant_id"})
    )


def test_missing_top_level_key():
    with pytest.raises(PolicyConfigError, match="scoping"):
        parse_policy_config({"roles": {}})


@pytest.mark.parametrize(
    "roles, message",
    [
        ({"Superuser": {}}, "unknown role"),
        ({"Tenant": {"rules": {"invoice": {"read": ["user_id"]}}}}, "unknown resource type"),
        ({"Tenant": {"rules": {"unit": {"purge": ["tenant_id"]}}}}, "unknown operation"),
        ({"Tenant": {"rules": {"unit": {"read": []}}}}, "non-empty list"),
        ({"Tenant": {"rules": {"unit": {"read": "some"}}}}, "non-empty list"),
        ({"Tenant": {"rules": {"unit": {"read": ["a.b.c"]}}}}, "malformed path"),
        ({"Tenant": {"rules": {"unit": {"read": ["TenantId"]}}}}, "malformed path"),
        ({"Owner": {"extends": "Tenant"}}, "undefined role"),
    ],
)
def test_invalid_documents_are_rejected(roles, message):
    with pytest.raises(PolicyConfigError, match=message):
        parse_policy_config(_doc(roles))


def test_public_route_requires_methods():
    with pytest.raises(PolicyConfigError, match="methods"):
        parse_policy_config(_doc({}, public=[{"path": "/health"}]))


def test_inheritance_cycle_is_detected():
    config = parse_policy_config(_doc({"Owner": {"extends": "Tenant"}, "Tenant": {"extends": "Owner"}}))

    with pytest.raises(PolicyConfigError, match="cycle"):
        compute_effective_rules(config)


def test_child_inherits_and_unions_parent_paths():
    config = parse_policy_config(
        _doc(
            {
                "Tenant": {"rules": {"unit": {"read": ["tenant_id"], "list": ["tenant_id"]}}},
                "Owner": {"extends": "Tenant", "rules": {"unit": {"read": ["owner_id"]}}},
            }
        )
    )

    effective = compute_effective_rules(config)
    owner = effective[Role.OWNER].rules

    assert owner[(ResourceType.UNIT, Operation.READ)].paths == frozenset({"tenant_id", "owner_id"})
    # Inherited untouched.
    assert owner[(ResourceType.UNIT, Operation.LIST)].paths == frozenset({"tenant_id"})


def test_unrestricted_entry_beats_path_list():
    config = parse_policy_config(
        _doc(
            {
                "Tenant": {"rules": {"unit": {"read": ["tenant_id"]}}},
                "Owner": {"extends": "Tenant", "rules": {"unit": {"read": "all"}}},
            }
        )
    )

    rule = compute_effective_rules(config)[Role.OWNER].rules[(ResourceType.UNIT, Operation.READ)]

    assert rule.unrestricted
