from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from estatehub.errors import Conflict, Forbidden, InvalidInput, NotFound
from estatehub.gateway import PaymentGateway
from estatehub.models.enums import PaymentMethod, PaymentStatus, PaymentType, Role
from estatehub.schemas.payment import PaymentCreate


@pytest.fixture
def setup(make_user, make_property, make_unit):
    owner = make_user(Role.OWNER)
    tenant = make_user(Role.TENANT)
    prop = make_property(owner)
    unit = make_unit(prop, tenant=tenant)
    return owner, tenant, prop, unit


def _create(prop, unit, *, due=None, amount="500.00") -> PaymentCreate:
    return PaymentCreate(
        property_id=prop.id,
        unit_id=unit.id,
        amount=Decimal(amount),
        payment_type=PaymentType.RENT,
        payment_method=PaymentMethod.TRANSFER,
        due_date=due or date.today() + timedelta(days=5),
    )


def test_status_transitions_keep_paid_date_in_lockstep(db_session, policy, actor_for, setup):
    owner, tenant, prop, unit = setup
    payment = PaymentGateway(db_session, actor_for(tenant), policy).create(_create(prop, unit))
    assert payment.status is PaymentStatus.PENDING
    assert payment.paid_date is None

    payments = PaymentGateway(db_session, actor_for(owner), policy)

    completed = payments.update_status(payment.id, PaymentStatus.COMPLETED)
    assert completed.paid_date is not None

    refunded = payments.update_status(payment.id, PaymentStatus.REFUNDED)
    assert refunded.paid_date is None

    again = payments.update_status(payment.id, PaymentStatus.COMPLETED)
    assert again.paid_date is not None
    failed = payments.update_status(payment.id, PaymentStatus.FAILED)
    assert failed.paid_date is None


def test_creator_is_always_the_actor(db_session, policy, actor_for, setup):
    _, tenant, prop, unit = setup

    payment = PaymentGateway(db_session, actor_for(tenant), policy).create(_create(prop, unit))

    assert payment.user_id == tenant.id
    assert payment.property_id == prop.id


def test_tenant_cannot_pay_for_a_unit_they_do_not_rent(db_session, policy, actor_for, make_user, make_unit, setup):
    _, _, prop, _ = setup
    other_unit = make_unit(prop, number="999")
    stranger = make_user(Role.TENANT)

    with pytest.raises(Forbidden):
        PaymentGateway(db_session, actor_for(stranger), policy).create(_create(prop, other_unit))


def test_due_date_in_the_past_is_rejected(db_session, policy, actor_for, setup):
    _, tenant, prop, unit = setup

    with pytest.raises(InvalidInput):
        PaymentGateway(db_session, actor_for(tenant), policy).create(
            _create(prop, unit, due=date.today() - timedelta(days=2))
        )


def test_unit_must_belong_to_the_property(db_session, policy, actor_for, make_property, setup):
    owner, tenant, _, unit = setup
    other_prop = make_property(owner, name="Elsewhere")

    with pytest.raises(InvalidInput):
        PaymentGateway(db_session, actor_for(tenant), policy).create(_create(other_prop, unit))


def test_tenant_cannot_change_status(db_session, policy, actor_for, make_payment, setup):
    _, tenant, _, unit = setup
    payment = make_payment(tenant, unit)

    with pytest.raises(Forbidden):
        PaymentGateway(db_session, actor_for(tenant), policy).update_status(payment.id, PaymentStatus.COMPLETED)


def test_void_marks_pending_payment_failed(db_session, policy, actor_for, make_payment, setup):
    owner, tenant, _, unit = setup
    payment = make_payment(tenant, unit)
    payments = PaymentGateway(db_session, actor_for(owner), policy)

    voided = payments.void(payment.id)
    assert voided.status is PaymentStatus.FAILED

    with pytest.raises(Conflict):
        payments.void(payment.id)


def test_status_filter(db_session, policy, actor_for, make_payment, setup):
    owner, tenant, _, unit = setup
    make_payment(tenant, unit)
    make_payment(tenant, unit, status=PaymentStatus.COMPLETED)

    result = PaymentGateway(db_session, actor_for(owner), policy).list(status=PaymentStatus.COMPLETED)

    assert result.total == 1
    assert result.items[0].status is PaymentStatus.COMPLETED


def test_report_totals(db_session, policy, actor_for, make_payment, setup):
    owner, tenant, prop, unit = setup
    make_payment(tenant, unit, amount="500.00", status=PaymentStatus.COMPLETED, due=date(2024, 3, 1))
    make_payment(tenant, unit, amount="250.25", status=PaymentStatus.PENDING, due=date(2024, 3, 31))
    make_payment(tenant, unit, amount="100.00", status=PaymentStatus.FAILED, due=date(2024, 3, 15))
    make_payment(tenant, unit, amount="999.00", status=PaymentStatus.COMPLETED, due=date(2024, 4, 1))

    report = PaymentGateway(db_session, actor_for(owner), policy).report(prop.id, 3, 2024)

    assert report.period == "3/2024"
    assert report.total_collected == 500.0
    assert report.pending_amount == 250.25
    assert len(report.payments) == 3


def test_december_report_window(db_session, policy, actor_for, make_payment, setup):
    owner, tenant, prop, unit = setup
    make_payment(tenant, unit, status=PaymentStatus.COMPLETED, due=date(2024, 12, 31))
    make_payment(tenant, unit, status=PaymentStatus.COMPLETED, due=date(2025, 1, 1))

    report = PaymentGateway(db_session, actor_for(owner), policy).report(prop.id, 12, 2024)

    assert len(report.payments) == 1


@pytest.mark.parametrize("month, year", [(0, 2024), (13, 2024), (5, 1999), (5, 2101)])
def test_report_rejects_bad_period(db_session, policy, actor_for, setup, month, year):
    owner, _, prop, _ = setup

    with pytest.raises(InvalidInput):
        PaymentGateway(db_session, actor_for(owner), policy).report(prop.id, month, year)


def test_report_requires_managing_the_property(db_session, policy, actor_for, setup):
    _, tenant, prop, _ = setup

    with pytest.raises(Forbidden):
        PaymentGateway(db_session, actor_for(tenant), policy).report(prop.id, 3, 2024)
    with pytest.raises(NotFound):
        PaymentGateway(db_session, actor_for(tenant), policy).report("ffffffffffffffffffffffff", 3, 2024)
