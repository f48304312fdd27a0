from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.database import database_unavailable, get_db
from bistro.models.review import Review

router = APIRouter(tags=['reviews'])


class ReviewResponse(BaseModel):
    id: int
    name: str | None = None
    details: str | None = None
    rating: float | None = None

    class Config:
        from_attributes = True


@router.get('/reviews', response_model=list[ReviewResponse])
def list_reviews(db: Session = Depends(get_db)):
    try:
        return db.query(Review).order_by(Review.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
