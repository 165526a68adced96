from __future__ import annotations

from fastapi import APIRouter, Depends, status

from estatehub.gateway import PaymentGateway
from estatehub.models.enums import PaymentStatus
from estatehub.models.payment import Payment
from estatehub.routers.deps import gateway
from estatehub.schemas.common import Page
from estatehub.schemas.payment import PaymentCreate, PaymentOut, PaymentReport, PaymentStatusUpdate

router = APIRouter(prefix="/payments", tags=["payments"])

get_payments = gateway(PaymentGateway)


@router.get("", response_model=Page[PaymentOut])
def list_payments(
    status: PaymentStatus | None = None,
    user_id: str | None = None,
    page: int | None = None,
    page_size: int | None = None,
    payments: PaymentGateway = Depends(get_payments),
) -> dict:
    return payments.list(status=status, user_id=user_id, page=page, page_size=page_size).to_dict()


@router.get("/report/{property_id}/{month}/{year}", response_model=PaymentReport)
def payment_report(
    property_id: str, month: int, year: int, payments: PaymentGateway = Depends(get_payments)
) -> PaymentReport:
    return payments.report(property_id, month, year)


@router.get("/{id}", response_model=PaymentOut)
def get_payment(id: str, payments: PaymentGateway = Depends(get_payments)) -> Payment:
    return payments.get(id)


@router.post("", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
def create_payment(payload: PaymentCreate, payments: PaymentGateway = Depends(get_payments)) -> Payment:
    return payments.create(payload)


@router.put("/{id}/status", response_model=PaymentOut)
def update_payment_status(
    id: str, payload: PaymentStatusUpdate, payments: PaymentGateway = Depends(get_payments)
) -> Payment:
    return payments.update_status(id, payload.status)


@router.delete("/{id}", response_model=PaymentOut)
def void_payment(id: str, payments: PaymentGateway = Depends(get_payments)) -> Payment:
    return payments.void(id)
