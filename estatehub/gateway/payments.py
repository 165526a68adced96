from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update

from estatehub.errors import Conflict, InvalidInput
from estatehub.gateway.base import Relation, ResourceGateway, require_object_id
from estatehub.gateway.pagination import PageResult
from estatehub.gateway.properties import PropertyGateway
from estatehub.gateway.units import resolve_unit
from estatehub.models.enums import PaymentStatus
from estatehub.models.payment import Payment
from estatehub.models.property import Property, Unit
from estatehub.policy import Operation, ResourceType
from estatehub.schemas.payment import PaymentCreate, PaymentOut, PaymentReport

logger = logging.getLogger(__name__)

REPORT_YEAR_MIN = 2000
REPORT_YEAR_MAX = 2100


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _month_window(month: int, year: int) -> tuple[date, date]:
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


class PaymentGateway(ResourceGateway[Payment]):
    model = Payment
    resource = ResourceType.PAYMENT
    label = "Payment"
    relations = {
        "property": Relation(Payment.property_id, Property, Property.id),
        "unit": Relation(Payment.unit_id, Unit, Unit.id),
    }

    def list(
        self,
        status: PaymentStatus | None = None,
        user_id: Any = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> PageResult:
        stmt = select(Payment)
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        if user_id is not None:
            stmt = stmt.where(Payment.user_id == require_object_id(user_id, field="user_id"))
        return self.page(stmt.order_by(Payment.due_date.desc(), Payment.id), page, page_size)

    def create(self, data: PaymentCreate) -> Payment:
        if data.due_date < _today():
            raise InvalidInput("due_date cannot be in the past", field="due_date")

        unit = resolve_unit(self.db, data.property_id, data.unit_id)
        self.authorize_create({"user_id": self.actor.id, "property_id": unit.property_id, "unit_id": unit.id})

        payment = Payment(
            user_id=self.actor.id,
            property_id=unit.property_id,
            unit_id=unit.id,
            amount=data.amount,
            payment_type=data.payment_type,
            payment_method=data.payment_method,
            status=PaymentStatus.PENDING,
            due_date=data.due_date,
            paid_date=None,
            transaction_id=data.transaction_id,
            description=data.description,
        )
        self.db.add(payment)
        self.commit()
        logger.info("Payment created id=%s unit=%s by=%s", payment.id, unit.id, self.actor.id)
        return payment

    def update_status(self, payment_id: Any, status: PaymentStatus) -> Payment:
        """paid_date is set exactly when the new status is Completed."""

        payment_id = self.authorize(Operation.UPDATE, payment_id)
        payment = self.fetch(payment_id)
        payment.status = status
        payment.paid_date = datetime.now(timezone.utc) if status is PaymentStatus.COMPLETED else None
        self.commit()
        logger.info("Payment status id=%s status=%s by=%s", payment_id, status.value, self.actor.id)
        return payment

    def void(self, payment_id: Any) -> Payment:
        """Payments are never removed; a pending one is marked Failed."""

        payment_id = self.authorize(Operation.DELETE, payment_id)
        result = self.db.execute(
            update(Payment)
            .where(Payment.id == payment_id, Payment.status == PaymentStatus.PENDING)
            .values(status=PaymentStatus.FAILED, paid_date=None)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise Conflict("Only a pending payment can be voided")
        self.commit()
        logger.info("Payment voided id=%s by=%s", payment_id, self.actor.id)
        return self.fetch(payment_id)

    def report(self, property_id: Any, month: int, year: int) -> PaymentReport:
        if not 1 <= month <= 12:
            raise InvalidInput("month must be between 1 and 12", field="month")
        if not REPORT_YEAR_MIN <= year <= REPORT_YEAR_MAX:
            raise InvalidInput(f"year must be between {REPORT_YEAR_MIN} and {REPORT_YEAR_MAX}", field="year")

        # Reports are a management view: the same rights as editing the property.
        properties = PropertyGateway(self.db, self.actor, self.policy, self.settings)
        property_id = properties.authorize(Operation.UPDATE, property_id)

        start, end = _month_window(month, year)
        payments = list(
            self.db.scalars(
                select(Payment)
                .where(Payment.property_id == property_id, Payment.due_date >= start, Payment.due_date < end)
                .order_by(Payment.due_date, Payment.id)
            ).all()
        )

        collected = sum((p.amount for p in payments if p.status is PaymentStatus.COMPLETED), Decimal("0"))
        pending = sum((p.amount for p in payments if p.status is PaymentStatus.PENDING), Decimal("0"))
        return PaymentReport(
            property_id=property_id,
            period=f"{month}/{year}",
            total_collected=float(collected),
            pending_amount=float(pending),
            payments=[PaymentOut.model_validate(p) for p in payments],
        )
