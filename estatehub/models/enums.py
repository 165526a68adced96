"""Closed value sets used across models, schemas and the policy table."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    ADMIN = "Admin"
    OWNER = "Owner"
    TENANT = "Tenant"


class PaymentType(str, Enum):
    RENT = "Rent"
    MAINTENANCE = "Maintenance"
    SERVICE = "Service"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    CASH = "Cash"
    TRANSFER = "Transfer"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class MaintenancePriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EMERGENCY = "Emergency"


class MaintenanceStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class NotificationType(str, Enum):
    PAYMENT = "Payment"
    MAINTENANCE = "Maintenance"
    SYSTEM = "System"
    ALERT = "Alert"
