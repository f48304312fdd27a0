import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.auth.dependencies import (
    get_current_claims,
    is_admin,
    normalize_email,
    require_admin,
    require_self,
)
from bistro.database import database_unavailable, get_db
from bistro.models.user import User, UserRole
from bistro.routes.write_results import DeleteResultResponse, UpdateResultResponse

router = APIRouter(tags=['users'])

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = 'user already exists'
# Only an admin promotion may set the role; profile keys are what the client sends beyond these.
_RESERVED_PROFILE_KEYS = {'email', 'name', 'photo_url', 'photoURL', 'role', 'id'}


class CreateUserRequest(BaseModel):
    email: str
    name: str | None = None
    photo_url: str | None = Field(default=None, alias='photoURL')

    class Config:
        extra = 'allow'
        populate_by_name = True

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if not normalized:
            raise ValueError('Email is required.')
        return normalized

    def profile_fields(self) -> dict[str, Any]:
        extra = self.model_extra or {}
        return {key: value for key, value in extra.items() if key not in _RESERVED_PROFILE_KEYS}


class CreateUserResponse(BaseModel):
    insertedId: int | None
    message: str | None = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    photo_url: str | None = None
    role: str
    profile: dict[str, Any] = {}
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AdminStatusResponse(BaseModel):
    admin: bool


@router.post('/users', response_model=CreateUserResponse)
def register_user(data: CreateUserRequest, db: Session = Depends(get_db)):
    try:
        existing_user = db.query(User).filter(User.email == data.email).first()
        if existing_user:
            return CreateUserResponse(message=USER_EXISTS_MESSAGE, insertedId=None)

        user = User(
            email=data.email,
            name=data.name,
            photo_url=data.photo_url,
            role=UserRole.MEMBER.value,
            profile=data.profile_fields(),
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a registration race for the same email.
            db.rollback()
            return CreateUserResponse(message=USER_EXISTS_MESSAGE, insertedId=None)
        db.refresh(user)

        logger.info('Registered user %s as %s', user.id, user.email)
        return CreateUserResponse(insertedId=user.id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Could not register %s', data.email)
        raise database_unavailable() from exc


@router.get('/users', response_model=list[UserResponse], dependencies=[Depends(require_admin)])
def list_users(db: Session = Depends(get_db)):
    try:
        return db.query(User).order_by(User.id.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('/users/admin/{email}', response_model=AdminStatusResponse)
def check_admin(
    email: str,
    claims: dict = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    requested_email = require_self(email, claims)

    try:
        user = db.query(User).filter(User.email == requested_email).first()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return AdminStatusResponse(admin=is_admin(user))


@router.patch('/users/admin/{user_id}', response_model=UpdateResultResponse)
def promote_user(
    user_id: int,
    acting_admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    acting_email = acting_admin.email
    try:
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            return UpdateResultResponse(matchedCount=0, modifiedCount=0)
        if user.role == UserRole.ADMIN.value:
            return UpdateResultResponse(matchedCount=1, modifiedCount=0)

        user.role = UserRole.ADMIN.value
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    logger.info('User %s promoted to admin by %s', user_id, acting_email)
    return UpdateResultResponse(matchedCount=1, modifiedCount=1)


@router.delete('/users/{user_id}', response_model=DeleteResultResponse)
def delete_user(
    user_id: int,
    acting_admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    acting_email = acting_admin.email
    try:
        deleted_count = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc

    if deleted_count:
        logger.info('User %s deleted by %s', user_id, acting_email)
    return DeleteResultResponse(deletedCount=deleted_count)
