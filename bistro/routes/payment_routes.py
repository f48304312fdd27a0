import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.auth.dependencies import normalize_email
from bistro.database import database_unavailable, get_db
from bistro.models.payment import Payment
from bistro.payments import checkout
from bistro.payments.gateway import PaymentGatewayError, StripePaymentGateway, get_payment_gateway
from bistro.routes.write_results import (
    CartCleanupResultResponse,
    PaymentInsertResultResponse,
    SettlementResponse,
)

router = APIRouter(tags=['payments'])

logger = logging.getLogger(__name__)


class PaymentIntentRequest(BaseModel):
    price: float = Field(gt=0, allow_inf_nan=False)


class PaymentIntentResponse(BaseModel):
    clientSecret: str


class CreatePaymentRequest(BaseModel):
    email: str
    price: float = Field(ge=0, allow_inf_nan=False)
    transaction_id: str = Field(alias='transactionId', min_length=1)
    cart_ids: list[int] = Field(default_factory=list, alias='cartIds')
    menu_item_ids: list[int] = Field(default_factory=list, alias='menuItemIds')
    status: str = 'pending'
    date: datetime | None = None

    class Config:
        populate_by_name = True

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if not normalized:
            raise ValueError('Email is required.')
        return normalized


class PaymentResponse(BaseModel):
    id: int
    email: str
    price: float
    transaction_id: str = Field(serialization_alias='transactionId')
    cart_ids: list[int] = Field(serialization_alias='cartIds')
    menu_item_ids: list[int] = Field(serialization_alias='menuItemIds')
    status: str
    date: datetime | None = None
    created_at: datetime | None = Field(default=None, serialization_alias='createdAt')
    cart_cleanup_status: str = Field(serialization_alias='cartCleanupStatus')

    class Config:
        from_attributes = True


@router.post('/create-payment-intent', response_model=PaymentIntentResponse)
def create_payment_intent(
    data: PaymentIntentRequest,
    gateway: StripePaymentGateway = Depends(get_payment_gateway),
):
    try:
        client_secret = checkout.create_checkout_intent(data.price, gateway)
    except PaymentGatewayError as exc:
        raise HTTPException(
            status_code=exc.http_status or status.HTTP_502_BAD_GATEWAY,
            detail={'message': exc.message, 'code': exc.code},
        ) from exc

    return PaymentIntentResponse(clientSecret=client_secret)


@router.post('/payments', response_model=SettlementResponse)
def record_payment(data: CreatePaymentRequest, db: Session = Depends(get_db)):
    payment = Payment(
        email=data.email,
        price=data.price,
        transaction_id=data.transaction_id,
        cart_ids=data.cart_ids,
        menu_item_ids=data.menu_item_ids,
        status=data.status,
        date=data.date,
    )

    try:
        result = checkout.settle_payment(db, payment)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Could not record payment for transaction %s', data.transaction_id)
        raise database_unavailable() from exc

    if not result.delete_result.acknowledged:
        logger.warning(
            'Payment %s recorded but its cart items were not cleared',
            result.payment_id,
        )
    return SettlementResponse(
        paymentResult=PaymentInsertResultResponse(
            acknowledged=result.payment_result.acknowledged,
            insertedId=result.payment_result.inserted_id,
            existingId=result.payment_result.existing_id,
        ),
        deleteResult=CartCleanupResultResponse(
            acknowledged=result.delete_result.acknowledged,
            deletedCount=result.delete_result.deleted_count,
            error=result.delete_result.error,
        ),
    )


@router.get('/payments/{email}', response_model=list[PaymentResponse])
def list_payments(email: str, db: Session = Depends(get_db)):
    try:
        return db.query(Payment).filter(
            Payment.email == normalize_email(email),
        ).order_by(Payment.created_at.desc(), Payment.id.desc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
