"""
Units gateway.

`tenant_id` and `is_occupied` are only ever written here, and only through
conditional UPDATEs keyed by unit id:

    assign  ... WHERE id = :unit AND tenant_id IS NULL
    remove  ... WHERE id = :unit AND tenant_id = :previously_read_tenant

A zero rowcount means another request changed occupancy first; that is a
Conflict, never a silent overwrite.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select, delete, select, update
from sqlalchemy.orm import Session

from estatehub.errors import Conflict, InvalidInput, NotFound
from estatehub.gateway.base import Relation, ResourceGateway, require_object_id
from estatehub.gateway.identities import require_active_identity
from estatehub.gateway.pagination import PageResult
from estatehub.models.maintenance import MaintenanceRequest
from estatehub.models.payment import Payment
from estatehub.models.property import Property, Unit
from estatehub.policy import Operation, ResourceType
from estatehub.schemas.property import UnitCreate, UnitUpdate

logger = logging.getLogger(__name__)


def require_active_property(db: Session, property_id: Any) -> str:
    property_id = require_object_id(property_id, field="property_id")
    found = db.execute(select(Property.id).where(Property.id == property_id, Property.is_active.is_(True))).first()
    if found is None:
        raise NotFound("Property")
    return property_id


def resolve_unit(db: Session, property_id: Any, unit_id: Any) -> Unit:
    """Look up a unit referenced together with its property in a request body."""

    property_id = require_active_property(db, property_id)
    unit_id = require_object_id(unit_id, field="unit_id")

    unit = db.get(Unit, unit_id)
    if unit is None:
        raise NotFound("Unit")
    if unit.property_id != property_id:
        raise InvalidInput("unit_id does not belong to property_id", field="unit_id")
    return unit


class UnitGateway(ResourceGateway[Unit]):
    model = Unit
    resource = ResourceType.UNIT
    label = "Unit"
    relations = {
        "property": Relation(Unit.property_id, Property, Property.id),
    }

    def _live(self, stmt: Select[Any]) -> Select[Any]:
        # A unit disappears with its soft-deleted property.
        live_properties = select(Property.id).where(Property.is_active.is_(True))
        return stmt.where(Unit.property_id.in_(live_properties))

    def list_by_property(self, property_id: Any, page: int | None = None, page_size: int | None = None) -> PageResult:
        property_id = require_active_property(self.db, property_id)
        stmt = select(Unit).where(Unit.property_id == property_id).order_by(Unit.created_at, Unit.id)
        return self.page(stmt, page, page_size)

    def add(self, property_id: Any, data: UnitCreate) -> Unit:
        property_id = require_active_property(self.db, property_id)
        if data.owner_id is not None:
            require_active_identity(self.db, data.owner_id, field="owner_id")

        self.authorize_create({"property_id": property_id, "owner_id": data.owner_id})

        duplicate = self.db.execute(
            select(Unit.id).where(Unit.property_id == property_id, Unit.unit_number == data.unit_number)
        ).first()
        if duplicate is not None:
            raise Conflict(f"Unit {data.unit_number} already exists in this property")

        unit = Unit(
            property_id=property_id,
            unit_number=data.unit_number,
            owner_id=data.owner_id,
            rent_amount=data.rent_amount,
            maintenance_fee=data.maintenance_fee,
            features=list(data.features),
            tenant_id=None,
            is_occupied=False,
        )
        self.db.add(unit)
        self.commit(f"Unit {data.unit_number} already exists in this property")
        logger.info("Unit added id=%s property=%s", unit.id, property_id)
        return unit

    def update(self, unit_id: Any, data: UnitUpdate) -> Unit:
        unit_id = self.authorize(Operation.UPDATE, unit_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("owner_id") is not None:
            require_active_identity(self.db, changes["owner_id"], field="owner_id")

        unit = self.fetch(unit_id)
        for key, value in changes.items():
            if value is None and key != "owner_id":
                continue
            setattr(unit, key, value)

        self.commit("Unit number already exists in this property")
        return unit

    def _is_referenced(self, unit_id: str) -> bool:
        for column in (Payment.unit_id, MaintenanceRequest.unit_id):
            if self.db.execute(select(column).where(column == unit_id).limit(1)).first() is not None:
                return True
        return False

    def delete(self, unit_id: Any) -> None:
        unit_id = self.authorize(Operation.DELETE, unit_id)
        if self._is_referenced(unit_id):
            raise Conflict("Unit is still referenced by payments or maintenance requests")
        result = self.db.execute(delete(Unit).where(Unit.id == unit_id, Unit.tenant_id.is_(None)))
        if result.rowcount == 0:
            self.db.rollback()
            raise Conflict("Only a vacant unit can be deleted")
        self.commit("Unit is still referenced by payments or maintenance requests")
        logger.info("Unit deleted id=%s by=%s", unit_id, self.actor.id)

    def assign_tenant(self, unit_id: Any, tenant_id: Any) -> Unit:
        unit_id = self.authorize(Operation.UPDATE, unit_id)
        tenant = require_active_identity(self.db, tenant_id, field="tenant_id")

        result = self.db.execute(
            update(Unit)
            .where(Unit.id == unit_id, Unit.tenant_id.is_(None))
            .values(tenant_id=tenant.id, is_occupied=True)
        )
        if result.rowcount == 0:
            self.db.rollback()
            current = self.db.scalar(select(Unit.tenant_id).where(Unit.id == unit_id))
            if current != tenant.id:
                logger.warning("Assign-tenant conflict unit=%s", unit_id)
                raise Conflict("Unit is already occupied")
            # Already assigned to this tenant.
            return self.fetch(unit_id)

        self.commit()
        logger.info("Tenant assigned unit=%s tenant=%s by=%s", unit_id, tenant.id, self.actor.id)
        return self.fetch(unit_id)

    def remove_tenant(self, unit_id: Any) -> Unit:
        unit_id = self.authorize(Operation.UPDATE, unit_id)

        previous = self.db.scalar(select(Unit.tenant_id).where(Unit.id == unit_id))
        if previous is None:
            return self.fetch(unit_id)

        result = self.db.execute(
            update(Unit)
            .where(Unit.id == unit_id, Unit.tenant_id == previous)
            .values(tenant_id=None, is_occupied=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            logger.warning("Remove-tenant conflict unit=%s", unit_id)
            raise Conflict("Unit occupancy changed concurrently")

        self.commit()
        logger.info("Tenant removed unit=%s tenant=%s by=%s", unit_id, previous, self.actor.id)
        return self.fetch(unit_id)
