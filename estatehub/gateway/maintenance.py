from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update

from estatehub.errors import Conflict
from estatehub.gateway.base import Relation, ResourceGateway
from estatehub.gateway.identities import require_active_identity
from estatehub.gateway.pagination import PageResult
from estatehub.gateway.units import resolve_unit
from estatehub.models.enums import MaintenanceStatus
from estatehub.models.maintenance import MaintenanceRequest
from estatehub.models.property import Property, Unit
from estatehub.policy import Operation, ResourceType
from estatehub.schemas.maintenance import MaintenanceCreate

logger = logging.getLogger(__name__)

# Requests that can still be worked on or cancelled.
OPEN_STATUSES = (MaintenanceStatus.PENDING, MaintenanceStatus.IN_PROGRESS)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MaintenanceGateway(ResourceGateway[MaintenanceRequest]):
    model = MaintenanceRequest
    resource = ResourceType.MAINTENANCE
    label = "MaintenanceRequest"
    relations = {
        "property": Relation(MaintenanceRequest.property_id, Property, Property.id),
        "unit": Relation(MaintenanceRequest.unit_id, Unit, Unit.id),
    }

    def list(
        self, status: MaintenanceStatus | None = None, page: int | None = None, page_size: int | None = None
    ) -> PageResult:
        stmt = select(MaintenanceRequest)
        if status is not None:
            stmt = stmt.where(MaintenanceRequest.status == status)
        return self.page(stmt.order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id), page, page_size)

    def create(self, data: MaintenanceCreate) -> MaintenanceRequest:
        unit = resolve_unit(self.db, data.property_id, data.unit_id)
        self.authorize_create({"user_id": self.actor.id, "property_id": unit.property_id, "unit_id": unit.id})

        request = MaintenanceRequest(
            title=data.title.strip(),
            description=data.description.strip(),
            user_id=self.actor.id,
            property_id=unit.property_id,
            unit_id=unit.id,
            priority=data.priority,
            status=MaintenanceStatus.PENDING,
            estimated_cost=data.estimated_cost,
            images=list(data.images),
        )
        self.db.add(request)
        self.commit()
        logger.info("Maintenance request created id=%s unit=%s by=%s", request.id, unit.id, self.actor.id)
        return request

    def update_status(self, request_id: Any, status: MaintenanceStatus) -> MaintenanceRequest:
        request_id = self.authorize(Operation.UPDATE, request_id)
        request = self.fetch(request_id)
        request.status = status
        request.paid_date = _now() if status is MaintenanceStatus.COMPLETED else None
        request.updated_at = _now()
        self.commit()
        logger.info("Maintenance status id=%s status=%s by=%s", request_id, status.value, self.actor.id)
        return request

    def assign_staff(self, request_id: Any, staff_id: Any) -> MaintenanceRequest:
        request_id = self.authorize(Operation.UPDATE, request_id)
        staff = require_active_identity(self.db, staff_id, field="staff_id")

        result = self.db.execute(
            update(MaintenanceRequest)
            .where(MaintenanceRequest.id == request_id, MaintenanceRequest.status.in_(OPEN_STATUSES))
            .values(assigned_to=staff.id, status=MaintenanceStatus.IN_PROGRESS, paid_date=None, updated_at=_now())
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise Conflict("Only an open maintenance request can be assigned")
        self.commit()
        logger.info("Maintenance assigned id=%s staff=%s by=%s", request_id, staff.id, self.actor.id)
        return self.fetch(request_id)

    def update_cost(self, request_id: Any, actual_cost: Decimal) -> MaintenanceRequest:
        request_id = self.authorize(Operation.UPDATE, request_id)
        request = self.fetch(request_id)
        request.actual_cost = actual_cost
        request.updated_at = _now()
        self.commit()
        return request

    def cancel(self, request_id: Any) -> MaintenanceRequest:
        request_id = self.authorize(Operation.DELETE, request_id)
        result = self.db.execute(
            update(MaintenanceRequest)
            .where(MaintenanceRequest.id == request_id, MaintenanceRequest.status.in_(OPEN_STATUSES))
            .values(status=MaintenanceStatus.CANCELLED, paid_date=None, updated_at=_now())
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise Conflict("Only an open maintenance request can be cancelled")
        self.commit()
        logger.info("Maintenance cancelled id=%s by=%s", request_id, self.actor.id)
        return self.fetch(request_id)
