"""Decision matrix for the shipped scoping rule table."""

from __future__ import annotations

import itertools

import pytest

from estatehub.models.enums import Role
from estatehub.policy import Effect, Operation, Ownership, ResourceType, ScopeFilter
from estatehub.security.context import Actor

ME = "aaaaaaaaaaaaaaaaaaaaaaaa"
OTHER = "bbbbbbbbbbbbbbbbbbbbbbbb"

ADMIN = Actor(id=ME, role=Role.ADMIN)
OWNER = Actor(id=ME, role=Role.OWNER)
TENANT = Actor(id=ME, role=Role.TENANT)


def owned(**paths: str) -> Ownership:
    return Ownership({path.replace("__", "."): frozenset({value}) for path, value in paths.items()})


@pytest.mark.parametrize(
    "resource, operation", list(itertools.product(list(ResourceType), list(Operation)))
)
def test_admin_is_unrestricted_everywhere(policy, resource, operation):
    assert policy.evaluate(ADMIN, resource, operation).effect is Effect.ALLOW
    assert policy.evaluate(ADMIN, resource, operation, Ownership()).effect is Effect.ALLOW


@pytest.mark.parametrize(
    "resource, operation", list(itertools.product(list(ResourceType), list(Operation)))
)
@pytest.mark.parametrize("actor", [OWNER, TENANT], ids=["owner", "tenant"])
def test_role_monotonicity(policy, actor, resource, operation):
    # Whatever an Owner or Tenant may do, an Admin may do too.
    for ownership in (None, Ownership({"user_id": frozenset({ME})})):
        if policy.evaluate(actor, resource, operation, ownership).allowed:
            assert policy.evaluate(ADMIN, resource, operation, ownership).allowed


def test_tenant_unit_list_gets_a_filter_built_from_actor_id(policy):
    decision = policy.evaluate(TENANT, ResourceType.UNIT, Operation.LIST)

    assert decision.effect is Effect.ALLOW_WITH_FILTER
    assert decision.filter == ScopeFilter(actor_id=ME, paths=("tenant_id",))


def test_owner_unit_filter_unions_owner_and_tenant_paths(policy):
    decision = policy.evaluate(OWNER, ResourceType.UNIT, Operation.LIST)

    assert decision.filter.paths == ("owner_id", "property.admin_id", "tenant_id")


def test_tenant_reads_only_own_unit(policy):
    assert policy.evaluate(TENANT, ResourceType.UNIT, Operation.READ, owned(tenant_id=ME)).allowed
    assert not policy.evaluate(TENANT, ResourceType.UNIT, Operation.READ, owned(tenant_id=OTHER)).allowed
    assert not policy.evaluate(TENANT, ResourceType.UNIT, Operation.READ, Ownership()).allowed


@pytest.mark.parametrize("resource", [ResourceType.PAYMENT, ResourceType.MAINTENANCE])
@pytest.mark.parametrize("operation", [Operation.UPDATE, Operation.DELETE])
def test_tenant_never_mutates_payments_or_maintenance(policy, resource, operation):
    everything_mine = owned(user_id=ME, property__admin_id=ME, unit__owner_id=ME, unit__tenant_id=ME)

    assert policy.evaluate(TENANT, resource, operation).effect is Effect.DENY
    assert policy.evaluate(TENANT, resource, operation, everything_mine).effect is Effect.DENY


@pytest.mark.parametrize("resource", [ResourceType.PAYMENT, ResourceType.MAINTENANCE])
def test_status_changes_need_the_enclosing_property(policy, resource):
    # A unit owner can see the record but not change its status.
    assert policy.evaluate(OWNER, resource, Operation.READ, owned(unit__owner_id=ME)).allowed
    assert not policy.evaluate(OWNER, resource, Operation.UPDATE, owned(unit__owner_id=ME)).allowed
    assert policy.evaluate(OWNER, resource, Operation.UPDATE, owned(property__admin_id=ME)).allowed


def test_tenant_is_read_only_on_properties_and_units(policy):
    for resource in (ResourceType.PROPERTY, ResourceType.UNIT):
        for operation in (Operation.CREATE, Operation.UPDATE, Operation.DELETE):
            assert policy.evaluate(TENANT, resource, operation).effect is Effect.DENY


def test_tenant_may_create_payment_only_for_a_rented_unit(policy):
    assert policy.evaluate(TENANT, ResourceType.PAYMENT, Operation.CREATE, owned(unit__tenant_id=ME)).allowed
    assert not policy.evaluate(TENANT, ResourceType.PAYMENT, Operation.CREATE, owned(unit__tenant_id=OTHER)).allowed


def test_owner_who_is_also_a_tenant_gets_owner_access(policy):
    # Tie-break: the most permissive applicable rule wins.
    rented_elsewhere = owned(tenant_id=ME, property__admin_id=OTHER)
    managed = owned(tenant_id=OTHER, property__admin_id=ME)

    assert policy.evaluate(OWNER, ResourceType.UNIT, Operation.READ, rented_elsewhere).allowed
    assert policy.evaluate(OWNER, ResourceType.UNIT, Operation.UPDATE, managed).allowed
    assert not policy.evaluate(OWNER, ResourceType.UNIT, Operation.UPDATE, rented_elsewhere).allowed


def test_notifications_belong_to_their_recipient(policy):
    for actor in (OWNER, TENANT):
        assert policy.evaluate(actor, ResourceType.NOTIFICATION, Operation.DELETE, owned(user_id=ME)).allowed
        assert not policy.evaluate(actor, ResourceType.NOTIFICATION, Operation.READ, owned(user_id=OTHER)).allowed
        assert policy.evaluate(actor, ResourceType.NOTIFICATION, Operation.CREATE).effect is Effect.DENY


def test_identity_creation_is_admin_only(policy):
    assert policy.evaluate(OWNER, ResourceType.IDENTITY, Operation.CREATE, Ownership()).effect is Effect.DENY
    assert policy.evaluate(TENANT, ResourceType.IDENTITY, Operation.UPDATE, owned(id=ME)).effect is Effect.DENY
    assert policy.evaluate(OWNER, ResourceType.IDENTITY, Operation.UPDATE, owned(id=ME)).allowed


@pytest.mark.parametrize(
    "method, path, public",
    [
        ("GET", "/health", True),
        ("POST", "/auth/login", True),
        ("post", "/auth/register", True),
        ("GET", "/auth/login", False),
        ("GET", "/auth/me", False),
        ("GET", "/units/abc", False),
        ("GET", "/health/extra", False),
    ],
)
def test_public_routes(policy, method, path, public):
    assert policy.is_public(method, path) is public
