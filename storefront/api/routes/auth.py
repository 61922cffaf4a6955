from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_app_settings
from storefront.config import Settings
from storefront.database import get_db
from storefront.schemas.user import UserCreate, UserLogin, TokenResponse
from storefront.services import auth_service

router = APIRouter()


@router.post("/signup", response_model=TokenResponse)
def signup(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    """Register a new user and return a session token"""
    token = auth_service.signup(db, user_data, settings)
    return TokenResponse(success=True, token=token)


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings)
):
    """Check credentials and return a session token"""
    token = auth_service.login(db, credentials.email, credentials.password, settings)
    return TokenResponse(success=True, token=token)
