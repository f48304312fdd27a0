"""Retry cart cleanup for payments whose cart items were not cleared.

Usage:
    python -m bistro.reconcile_payments
"""
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from bistro.core import config
from bistro.database import SessionLocal
from bistro.payments.checkout import reconcile_pending_payments

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(level=config.LOG_LEVEL)

    db = SessionLocal()
    try:
        results = reconcile_pending_payments(db)
    except SQLAlchemyError:
        logger.exception('Could not load payments awaiting cart cleanup.')
        return 1
    finally:
        db.close()

    failed = [payment_id for payment_id, result in results if not result.acknowledged]
    for payment_id, result in results:
        if result.acknowledged:
            print(f"payment {payment_id}: cleared {result.deleted_count} cart item(s)")
        else:
            print(f"payment {payment_id}: cleanup failed ({result.error})", file=sys.stderr)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
