import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.auth.dependencies import require_admin
from bistro.database import database_unavailable, get_db
from bistro.models.menu import MenuItem
from bistro.models.user import User
from bistro.routes.write_results import DeleteResultResponse, InsertResultResponse, UpdateResultResponse

router = APIRouter(tags=['menu'])

logger = logging.getLogger(__name__)


class MenuItemRequest(BaseModel):
    name: str
    category: str | None = None
    recipe: str | None = None
    price: float = Field(ge=0, allow_inf_nan=False)
    image: str | None = None


class MenuItemResponse(BaseModel):
    id: int
    name: str
    category: str | None = None
    recipe: str | None = None
    price: float
    image: str | None = None

    class Config:
        from_attributes = True


@router.get('/menu', response_model=list[MenuItemResponse])
def list_menu(db: Session = Depends(get_db)):
    try:
        return db.query(MenuItem).order_by(MenuItem.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/menu', response_model=InsertResultResponse)
def create_menu_item(data: MenuItemRequest, db: Session = Depends(get_db)):
    try:
        item = MenuItem(**data.model_dump())
        db.add(item)
        db.commit()
        db.refresh(item)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return InsertResultResponse(insertedId=item.id)


@router.get('/menu/{item_id}', response_model=MenuItemResponse)
def get_menu_item(item_id: int, db: Session = Depends(get_db)):
    try:
        item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Menu item not found.',
        )
    return item


@router.patch('/menu/{item_id}', response_model=UpdateResultResponse)
def update_menu_item(item_id: int, data: MenuItemRequest, db: Session = Depends(get_db)):
    try:
        item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
        if item is None:
            return UpdateResultResponse(matchedCount=0, modifiedCount=0)

        changes = {
            field_name: value
            for field_name, value in data.model_dump().items()
            if getattr(item, field_name) != value
        }
        for field_name, value in changes.items():
            setattr(item, field_name, value)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    return UpdateResultResponse(matchedCount=1, modifiedCount=1 if changes else 0)


@router.delete('/menu/{item_id}', response_model=DeleteResultResponse)
def delete_menu_item(
    item_id: int,
    acting_admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    acting_email = acting_admin.email
    try:
        deleted_count = db.query(MenuItem).filter(MenuItem.id == item_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    if deleted_count:
        logger.info('Menu item %s deleted by %s', item_id, acting_email)
    return DeleteResultResponse(deletedCount=deleted_count)
