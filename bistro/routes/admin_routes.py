from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.auth.dependencies import require_admin
from bistro.database import database_unavailable, get_db
from bistro.models.menu import MenuItem
from bistro.models.payment import Payment
from bistro.models.user import User

router = APIRouter(tags=['admin'])


class AdminStatsResponse(BaseModel):
    users: int
    menuItems: int
    orders: int
    revenue: float


def collect_stats(db: Session) -> AdminStatsResponse:
    users = db.query(func.count(User.id)).scalar()
    menu_items = db.query(func.count(MenuItem.id)).scalar()
    orders = db.query(func.count(Payment.id)).scalar()
    revenue = db.query(func.coalesce(func.sum(Payment.price), 0)).scalar()

    return AdminStatsResponse(
        users=users or 0,
        menuItems=menu_items or 0,
        orders=orders or 0,
        revenue=float(revenue or 0),
    )


@router.get('/admin-stats', response_model=AdminStatsResponse, dependencies=[Depends(require_admin)])
def admin_stats(db: Session = Depends(get_db)):
    try:
        return collect_stats(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
