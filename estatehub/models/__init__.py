from estatehub.models.identity import User
from estatehub.models.maintenance import MaintenanceRequest
from estatehub.models.messaging import Message, Notification
from estatehub.models.payment import Payment
from estatehub.models.property import Property, Unit

__all__ = [
    "MaintenanceRequest",
    "Message",
    "Notification",
    "Payment",
    "Property",
    "Unit",
    "User",
]
