from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.auth.dependencies import normalize_email
from bistro.database import database_unavailable, get_db
from bistro.models.cart import CartItem
from bistro.routes.write_results import DeleteResultResponse, InsertResultResponse

router = APIRouter(tags=['carts'])


class CartItemRequest(BaseModel):
    email: str
    menu_item_id: int | None = Field(default=None, alias='menuItemId')
    name: str | None = None
    image: str | None = None
    price: float = Field(default=0, ge=0, allow_inf_nan=False)

    class Config:
        populate_by_name = True

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if not normalized:
            raise ValueError('Email is required.')
        return normalized


class CartItemResponse(BaseModel):
    id: int
    email: str
    menu_item_id: int | None = Field(default=None, serialization_alias='menuItemId')
    name: str | None = None
    image: str | None = None
    price: float

    class Config:
        from_attributes = True


@router.post('/carts', response_model=InsertResultResponse)
def add_to_cart(data: CartItemRequest, db: Session = Depends(get_db)):
    try:
        cart_item = CartItem(**data.model_dump())
        db.add(cart_item)
        db.commit()
        db.refresh(cart_item)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return InsertResultResponse(insertedId=cart_item.id)


@router.get('/carts', response_model=list[CartItemResponse])
def list_cart(email: str = Query(...), db: Session = Depends(get_db)):
    try:
        return db.query(CartItem).filter(
            CartItem.email == normalize_email(email),
        ).order_by(CartItem.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.delete('/carts/{cart_id}', response_model=DeleteResultResponse)
def remove_from_cart(cart_id: int, db: Session = Depends(get_db)):
    try:
        deleted_count = db.query(CartItem).filter(CartItem.id == cart_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return DeleteResultResponse(deletedCount=deleted_count)
