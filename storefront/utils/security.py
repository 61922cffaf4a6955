from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import bcrypt
from storefront.config import Settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    if not plain_password or not hashed_password:
        return False
    try:
        # Ensure password is bytes
        if isinstance(plain_password, str):
            plain_password = plain_password.encode('utf-8')

        # Ensure hash is bytes
        if isinstance(hashed_password, str):
            hashed_password = hashed_password.encode('utf-8')

        # bcrypt truncates at 72 bytes when hashing, mirror that here
        return bcrypt.checkpw(plain_password[:72], hashed_password)
    except ValueError:
        # Malformed stored hash
        return False


def get_password_hash(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt"""
    if not password:
        raise ValueError("Password cannot be empty")

    password_bytes = password.encode('utf-8') if isinstance(password, str) else password

    # Truncate if longer than 72 bytes (bcrypt limit)
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]

    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password_bytes, salt)

    return hashed.decode('utf-8')


def create_access_token(
    data: Dict[str, Any],
    settings: Settings,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    now = datetime.utcnow()
    if expires_delta:
        to_encode["exp"] = now + expires_delta
    elif settings.ACCESS_TOKEN_EXPIRE_MINUTES > 0:
        to_encode["exp"] = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode["iat"] = now
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def create_user_token(user_id: str, settings: Settings) -> str:
    """Token embedding {"user": {"id": ...}}"""
    return create_access_token({"user": {"id": str(user_id)}}, settings)


def decode_token(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """Decode and verify JWT token"""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def verify_token(token: str, settings: Settings) -> Optional[str]:
    """Verify token and return user ID"""
    payload = decode_token(token, settings)
    if not payload:
        return None
    user = payload.get("user")
    if not isinstance(user, dict) or not user.get("id"):
        return None
    return str(user["id"])
