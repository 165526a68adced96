from __future__ import annotations

import logging
from typing import Any

from estatehub.gateway.base import Relation, ResourceGateway, require_object_id
from estatehub.gateway.pagination import PageResult
from estatehub.models.property import Property, Unit
from estatehub.policy import Operation, ResourceType
from estatehub.schemas.property import PropertyCreate, PropertyUpdate

logger = logging.getLogger(__name__)


class PropertyGateway(ResourceGateway[Property]):
    model = Property
    resource = ResourceType.PROPERTY
    label = "Property"
    active_column = "is_active"
    relations = {
        "units": Relation(Property.id, Unit, Unit.property_id),
    }

    def list(self, page: int | None = None, page_size: int | None = None) -> PageResult:
        return self.page(self._base_query().order_by(Property.name, Property.id), page, page_size)

    def list_by_admin(self, admin_id: Any, page: int | None = None, page_size: int | None = None) -> PageResult:
        # Still scoped: an Owner asking for someone else's portfolio sees only
        # the properties they could list anyway.
        admin_id = require_object_id(admin_id, field="admin_id")
        stmt = self._base_query().where(Property.admin_id == admin_id)
        return self.page(stmt.order_by(Property.name, Property.id), page, page_size)

    def create(self, data: PropertyCreate) -> Property:
        self.authorize_create({"admin_id": self.actor.id})

        prop = Property(
            name=data.name.strip(),
            address=data.address.strip(),
            admin_id=self.actor.id,
            amenities=list(data.amenities),
            monthly_fee=data.monthly_fee,
            is_active=True,
        )
        self.db.add(prop)
        self.commit()
        logger.info("Property created id=%s admin=%s", prop.id, prop.admin_id)
        return prop

    def update(self, property_id: Any, data: PropertyUpdate) -> Property:
        property_id = self.authorize(Operation.UPDATE, property_id)
        prop = self.fetch(property_id)

        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(prop, key, value.strip() if isinstance(value, str) else value)

        self.commit()
        return prop

    def deactivate(self, property_id: Any) -> None:
        property_id = self.authorize(Operation.DELETE, property_id)
        prop = self.fetch(property_id)
        prop.is_active = False
        self.commit()
        logger.info("Property deactivated id=%s by=%s", property_id, self.actor.id)
