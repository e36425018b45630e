"""Authentication endpoints: register, login, logout, current user."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from pydantic import AfterValidator, BaseModel, Field, field_validator

from stockdash.api.auth import COOKIE_NAME, create_token, hash_password, verify_password
from stockdash.api.deps import get_config, get_store, get_user_id
from stockdash.config import AppConfig
from stockdash.errors import NotFound, Unauthenticated
from stockdash.models.user import User
from stockdash.registry.store import PredictionStore

router = APIRouter()


def _clean_email(value: str) -> str:
    value = value.strip().lower()
    if "@" not in value or value.startswith("@") or value.endswith("@"):
        raise ValueError("must be an email address")
    return value


Email = Annotated[str, AfterValidator(_clean_email)]


class RegisterRequest(BaseModel):
    email: Email
    password: str = Field(min_length=8)
    name: str | None = None

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        # bcrypt only looks at the first 72 bytes
        if len(value.encode()) > 72:
            raise ValueError("must be at most 72 bytes")
        return value


class LoginRequest(BaseModel):
    email: Email
    password: str


def _issue(user: User, request: Request, response: Response, config: AppConfig) -> dict:
    token = create_token(user.id, config.auth_secret_key, config.auth_token_expiry_hours)
    is_https = (
        request.url.scheme == "https"
        or request.headers.get("x-forwarded-proto") == "https"
    )
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=is_https,
        samesite="lax",
        max_age=config.auth_token_expiry_hours * 3600,
        path="/",
    )
    return {"user": user.public(), "token": token}


@router.post("/auth/register")
def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    store: PredictionStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> dict:
    user = store.create_user(body.email, hash_password(body.password), body.name)
    return _issue(user, request, response, config)


@router.post("/auth/login")
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    store: PredictionStore = Depends(get_store),
    config: AppConfig = Depends(get_config),
) -> dict:
    user = store.get_user_by_email(body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        raise Unauthenticated("Invalid email or password")
    return _issue(user, request, response, config)


@router.post("/auth/logout")
def logout(response: Response) -> dict:
    response.delete_cookie(key=COOKIE_NAME, path="/")
    return {"success": True}


@router.get("/auth/me")
def me(
    user_id: int = Depends(get_user_id),
    store: PredictionStore = Depends(get_store),
) -> dict:
    user = store.get_user(user_id)
    if user is None:
        raise NotFound("User not found")
    return {"user": user.public()}
