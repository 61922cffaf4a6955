from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from storefront.config import Settings
from storefront.context import AppContext
from storefront.database import get_db
from storefront.exceptions import MissingToken, InvalidToken
from storefront.models.user import User
from storefront.utils.security import verify_token

TOKEN_HEADER = "auth-token"


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_app_settings(context: AppContext = Depends(get_context)) -> Settings:
    return context.settings


def get_token(
    auth_token: Optional[str] = Header(default=None, alias=TOKEN_HEADER),
    authorization: Optional[str] = Header(default=None)
) -> str:
    """Read the token from auth-token, falling back to Authorization: Bearer"""
    if auth_token:
        return auth_token
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if token:
            return token
    raise MissingToken()


def get_current_user(
    token: str = Depends(get_token),
    settings: Settings = Depends(get_app_settings),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    user_id = verify_token(token, settings)
    if user_id is None:
        raise InvalidToken()

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise InvalidToken()

    return user
