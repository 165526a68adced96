"""Collection filters and single-record checks through the gateways."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from estatehub.errors import Forbidden, InvalidInput, NotFound
from estatehub.gateway import GATEWAYS, PaymentGateway, PropertyGateway, UnitGateway, check_policy_coverage
from estatehub.models.enums import Role
from estatehub.policy import PolicyConfigError, ScopingPolicy
from estatehub.policy.rules import parse_policy_config
from estatehub.schemas.property import AssignTenantRequest

MISSING_ID = "ffffffffffffffffffffffff"


@pytest.fixture
def estate(make_user, make_property, make_unit):
    admin = make_user(Role.ADMIN)
    owner = make_user(Role.OWNER)
    unit_owner = make_user(Role.OWNER)
    t1 = make_user(Role.TENANT)
    t2 = make_user(Role.TENANT)
    prop = make_property(owner)
    u1 = make_unit(prop, number="101", tenant=t1, owner=unit_owner)
    u2 = make_unit(prop, number="102", tenant=t2)
    u3 = make_unit(prop, number="103")
    return {
        "admin": admin,
        "owner": owner,
        "unit_owner": unit_owner,
        "t1": t1,
        "t2": t2,
        "prop": prop,
        "u1": u1,
        "u2": u2,
        "u3": u3,
    }


def _units(db_session, policy, actor):
    return UnitGateway(db_session, actor, policy)


def test_tenant_lists_only_own_units(db_session, policy, actor_for, estate):
    result = _units(db_session, policy, actor_for(estate["t1"])).list_by_property(estate["prop"].id)

    assert [u.id for u in result.items] == [estate["u1"].id]
    assert result.total == 1


def test_tenant_cannot_read_another_tenants_unit(db_session, policy, actor_for, estate):
    units = _units(db_session, policy, actor_for(estate["t1"]))

    with pytest.raises(Forbidden):
        units.get(estate["u2"].id)
    assert units.get(estate["u1"].id).id == estate["u1"].id


def test_missing_record_is_not_found(db_session, policy, actor_for, estate):
    with pytest.raises(NotFound):
        _units(db_session, policy, actor_for(estate["t1"])).get(MISSING_ID)


@pytest.mark.parametrize(
    "bad_id", ["123", "zzzzzzzzzzzzzzzzzzzzzzzz", "", None, "a" * 25, "a" * 24 + "\n", " " + "a" * 24]
)
def test_malformed_id_is_invalid_input(db_session, policy, actor_for, estate, bad_id):
    with pytest.raises(InvalidInput):
        _units(db_session, policy, actor_for(estate["admin"])).get(bad_id)


def test_property_admin_and_admin_see_every_unit(db_session, policy, actor_for, estate):
    for who in ("owner", "admin"):
        result = _units(db_session, policy, actor_for(estate[who])).list_by_property(estate["prop"].id)
        assert result.total == 3


def test_unit_owner_sees_own_unit_and_the_property(db_session, policy, actor_for, estate):
    actor = actor_for(estate["unit_owner"])

    units = _units(db_session, policy, actor).list_by_property(estate["prop"].id)
    properties = PropertyGateway(db_session, actor, policy).list()

    assert [u.id for u in units.items] == [estate["u1"].id]
    assert [p.id for p in properties.items] == [estate["prop"].id]


def test_tenant_sees_the_property_they_rent_in(db_session, policy, actor_for, make_user, estate):
    outsider = make_user(Role.TENANT)

    assert PropertyGateway(db_session, actor_for(estate["t2"]), policy).list().total == 1
    assert PropertyGateway(db_session, actor_for(outsider), policy).list().total == 0
    with pytest.raises(Forbidden):
        PropertyGateway(db_session, actor_for(outsider), policy).get(estate["prop"].id)


def test_soft_deleted_property_is_not_found(db_session, policy, actor_for, make_property, estate):
    gone = make_property(estate["owner"], name="Old", active=False)
    properties = PropertyGateway(db_session, actor_for(estate["admin"]), policy)

    with pytest.raises(NotFound):
        properties.get(gone.id)
    assert gone.id not in [p.id for p in properties.list().items]


def test_tenant_payment_list_only_contains_own_payments(
    db_session, policy, actor_for, make_payment, estate
):
    mine = make_payment(estate["t1"], estate["u1"])
    make_payment(estate["t2"], estate["u2"])

    result = PaymentGateway(db_session, actor_for(estate["t1"]), policy).list()

    assert [p.id for p in result.items] == [mine.id]


def test_owner_sees_payments_for_their_property(db_session, policy, actor_for, make_payment, estate):
    make_payment(estate["t1"], estate["u1"])
    make_payment(estate["t2"], estate["u2"])

    assert PaymentGateway(db_session, actor_for(estate["owner"]), policy).list().total == 2
    # Unit owner: only payments on the unit they own.
    assert PaymentGateway(db_session, actor_for(estate["unit_owner"]), policy).list().total == 1


def test_shipped_policy_is_fully_covered_by_gateways(policy):
    check_policy_coverage(policy)


def test_unresolvable_rule_path_fails_coverage_check():
    config = parse_policy_config(
        {"scoping": {"roles": {"Tenant": {"rules": {"unit": {"read": ["landlord.admin_id"]}}}}}}
    )

    with pytest.raises(PolicyConfigError, match="landlord.admin_id"):
        check_policy_coverage(ScopingPolicy.from_config(config))


def test_every_resource_type_has_a_gateway():
    from estatehub.policy import ResourceType

    assert set(GATEWAYS) == set(ResourceType)


@pytest.mark.parametrize("value", ["a" * 24 + "\n", "a" * 24 + "\r\n", "A" * 23])
def test_body_ids_must_be_exactly_24_hex_characters(value):
    with pytest.raises(ValidationError):
        AssignTenantRequest(tenant_id=value)


def test_body_ids_are_lowercased():
    assert AssignTenantRequest(tenant_id="AB" * 12).tenant_id == "ab" * 12
