from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from bistro.auth import jwt_handler
from bistro.auth.dependencies import normalize_email

router = APIRouter(tags=["auth"])


class TokenRequest(BaseModel):
    email: str

    class Config:
        extra = "allow"

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = normalize_email(value)
        if not normalized:
            raise ValueError("Email is required.")
        return normalized


class TokenResponse(BaseModel):
    token: str


@router.post("/jwt", response_model=TokenResponse)
def create_token(data: TokenRequest):
    token = jwt_handler.issue_token(data.model_dump())
    return TokenResponse(token=token)
