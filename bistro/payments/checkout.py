"""Checkout orchestration.

Phase A asks the payment gateway for an intent. Phase B records the completed
payment and then clears the paid cart items. The two writes of Phase B are
separate transactions: the payment is committed first and the cart cleanup
outcome is stored on the payment row, so a failed cleanup is visible to the
caller and can be retried by ``reconcile_pending_payments``.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.core import config
from bistro.models.cart import CartItem
from bistro.models.payment import CartCleanupStatus, Payment
from bistro.payments.gateway import StripePaymentGateway

logger = logging.getLogger(__name__)


@dataclass
class PaymentInsertResult:
    acknowledged: bool
    inserted_id: int | None = None
    existing_id: int | None = None


@dataclass
class CartCleanupResult:
    acknowledged: bool
    deleted_count: int = 0
    error: str | None = None


@dataclass
class SettlementResult:
    payment_result: PaymentInsertResult
    delete_result: CartCleanupResult
    payment_id: int | None = field(default=None, repr=False)


def to_minor_units(price: float) -> int:
    # Truncates toward zero: 9.999 becomes 999, not 1000.
    return int(price * 100)


def create_checkout_intent(price: float, gateway: StripePaymentGateway) -> str:
    amount = to_minor_units(price)
    logger.info('Creating payment intent for %s minor units', amount)
    return gateway.create_payment_intent(
        amount=amount,
        currency=config.PAYMENT_CURRENCY,
        payment_method_types=config.PAYMENT_METHOD_TYPES,
    )


def find_payment_by_transaction(db: Session, transaction_id: str) -> Payment | None:
    return db.query(Payment).filter(Payment.transaction_id == transaction_id).first()


def _delete_owned_cart_items(db: Session, email: str, cart_ids: list[int]) -> int:
    return db.query(CartItem).filter(
        CartItem.id.in_(cart_ids),
        CartItem.email == email,
    ).delete(synchronize_session=False)


def _mark_cleanup_failed(db: Session, payment_id: int) -> None:
    try:
        db.query(Payment).filter(Payment.id == payment_id).update(
            {
                Payment.cart_cleanup_status: CartCleanupStatus.FAILED.value,
                Payment.cart_cleanup_attempts: Payment.cart_cleanup_attempts + 1,
            },
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        # The row stays pending, which reconciliation also picks up.
        logger.exception('Could not record failed cart cleanup for payment %s', payment_id)


def clear_payment_cart(db: Session, payment: Payment) -> CartCleanupResult:
    payment_id = payment.id
    email = payment.email
    cart_ids = [int(cart_id) for cart_id in payment.cart_ids or []]

    try:
        deleted_count = _delete_owned_cart_items(db, email, cart_ids)
        payment.cart_cleanup_status = CartCleanupStatus.CLEARED.value
        payment.cart_cleanup_attempts = (payment.cart_cleanup_attempts or 0) + 1
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Cart cleanup failed for payment %s', payment_id)
        _mark_cleanup_failed(db, payment_id)
        return CartCleanupResult(acknowledged=False, error=str(exc))

    if deleted_count != len(cart_ids):
        logger.info(
            'Payment %s cleared %s of %s cart items for %s',
            payment_id, deleted_count, len(cart_ids), email,
        )
    return CartCleanupResult(acknowledged=True, deleted_count=deleted_count)


def settle_payment(db: Session, payment: Payment) -> SettlementResult:
    """Record a completed payment and clear the cart items it paid for.

    Settling the same ``transaction_id`` twice never creates a second payment
    row; the retry only re-attempts a cart cleanup that has not succeeded yet.
    Store errors while recording the payment propagate to the caller; errors
    while clearing the cart are reported in the result.
    """
    existing = find_payment_by_transaction(db, payment.transaction_id)

    if existing is None:
        payment.cart_cleanup_status = CartCleanupStatus.PENDING.value
        payment.cart_cleanup_attempts = 0
        db.add(payment)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            existing = find_payment_by_transaction(db, payment.transaction_id)
            if existing is None:
                raise
        else:
            db.refresh(payment)
            logger.info('Recorded payment %s for %s', payment.id, payment.email)
            insert_result = PaymentInsertResult(acknowledged=True, inserted_id=payment.id)

    if existing is not None:
        logger.info('Payment for transaction %s already recorded as %s', existing.transaction_id, existing.id)
        payment = existing
        insert_result = PaymentInsertResult(acknowledged=True, existing_id=existing.id)

    if payment.cart_cleanup_status == CartCleanupStatus.CLEARED.value:
        cleanup_result = CartCleanupResult(acknowledged=True)
    else:
        cleanup_result = clear_payment_cart(db, payment)

    return SettlementResult(
        payment_result=insert_result,
        delete_result=cleanup_result,
        payment_id=insert_result.inserted_id or insert_result.existing_id,
    )


def reconcile_pending_payments(db: Session) -> list[tuple[int, CartCleanupResult]]:
    pending = db.query(Payment).filter(
        Payment.cart_cleanup_status != CartCleanupStatus.CLEARED.value,
    ).order_by(Payment.id.asc()).all()

    results: list[tuple[int, CartCleanupResult]] = []
    for payment in pending:
        payment_id = payment.id
        results.append((payment_id, clear_payment_cart(db, payment)))
    return results
