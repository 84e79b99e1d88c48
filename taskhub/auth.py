# PURPOSE: password hashing, JWT issuance and the bearer-token gate.

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
import bcrypt
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .db_models import UserDB
from .errors import AuthorizationError
from .models import CurrentUser
from .store_db import get_user, get_user_by_email

# auto_error=False: a missing header goes through our own AuthorizationError
bearer_scheme = HTTPBearer(auto_error=False)

# Compared against when the email is unknown, so both failure paths cost a bcrypt check.
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt()).decode("utf-8")


# --- Password helpers (bcrypt, no passlib) ---

def hash_password(password: str) -> str:
    """Return a bcrypt hash for the given plain password."""
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plain password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        return False


def authenticate(db: Session, email: str, password: str) -> UserDB:
    """Return the user for an email/password pair.

    Unknown email and wrong password raise the same AuthorizationError.
    """
    user = get_user_by_email(db, (email or "").strip())
    if user is None:
        verify_password(password or "", _DUMMY_HASH)
        raise AuthorizationError("Invalid credentials")
    if not verify_password(password or "", user.password_hash):
        raise AuthorizationError("Invalid credentials")
    return user


# --- JWT helpers ---

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user: UserDB, *, expires_minutes: int | None = None) -> str:
    """
    Create a signed JWT for a user.
    - `sub` is the user id; `email` and `role` ride along for clients.
    - Expiration controlled by settings.JWT_EXPIRE_MIN.
    """
    minutes = settings.JWT_EXPIRE_MIN if expires_minutes is None else expires_minutes
    payload: Dict[str, Any] = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "exp": _now_utc() + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raise AuthorizationError otherwise."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as err:
        raise AuthorizationError() from err
    if not payload.get("sub"):
        raise AuthorizationError()
    return payload


def get_current_user_row(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> UserDB:
    """Resolve the bearer token to a stored user row."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthorizationError()
    payload = decode_access_token(credentials.credentials)
    row = get_user(db, payload["sub"])
    if row is None:
        raise AuthorizationError()
    return row


def get_current_user(row: UserDB = Depends(get_current_user_row)) -> CurrentUser:
    """Identity used as the owner scope of task operations."""
    return CurrentUser(user_id=row.id, email=row.email, role=row.role)
