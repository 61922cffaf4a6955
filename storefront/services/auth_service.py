import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.config import Settings
from storefront.exceptions import DuplicateUser, UnknownUser, BadCredentials
from storefront.models.user import User
from storefront.schemas.user import UserCreate
from storefront.utils.security import get_password_hash, verify_password, create_user_token

logger = logging.getLogger(__name__)


def register_user(db: Session, user_data: UserCreate, settings: Settings) -> User:
    """Register a new user with an empty cart"""
    email = user_data.email.lower()

    # Check if email already exists
    if db.query(User).filter(User.email == email).first():
        raise DuplicateUser()

    user = User(
        name=user_data.username,
        email=email,
        password_hash=get_password_hash(user_data.password, rounds=settings.BCRYPT_ROUNDS)
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent signup with the same email
        db.rollback()
        raise DuplicateUser()
    db.refresh(user)

    logger.info("User %s registered", user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate user and return user object"""
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        logger.info("Login attempt for unknown email")
        raise UnknownUser()

    if not verify_password(password, user.password_hash):
        logger.info("Login attempt with bad credentials for user %s", user.id)
        raise BadCredentials()

    return user


def signup(db: Session, user_data: UserCreate, settings: Settings) -> str:
    user = register_user(db, user_data, settings)
    return create_user_token(user.id, settings)


def login(db: Session, email: str, password: str, settings: Settings) -> str:
    user = authenticate_user(db, email, password)
    return create_user_token(user.id, settings)
