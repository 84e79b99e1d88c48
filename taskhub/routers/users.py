# taskhub/routers/users.py
# PURPOSE: /users (registration) and /users/profile

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..auth import get_current_user_row, hash_password
from ..config import settings
from ..db import get_db
from ..db_models import UserDB
from ..errors import ConflictError
from ..models import UserCreate, UserPublic, UserUpdate
from ..rate_limit import limiter
from ..store_db import create_user, get_user_by_email, update_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_REGISTER)
def register_user(
    request: Request, response: Response, payload: UserCreate, db: Session = Depends(get_db)
):
    email = str(payload.email)
    if get_user_by_email(db, email) is not None:
        raise ConflictError("Email already registered")
    user = create_user(
        db,
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        role=payload.role,
        email_notifications=payload.email_notifications,
    )
    logger.info("user registered user_id=%s", user.id)
    return user


@router.get("/profile", response_model=UserPublic)
def get_profile(user: UserDB = Depends(get_current_user_row)):
    return user


@router.patch("/profile", response_model=UserPublic)
def update_profile(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    user: UserDB = Depends(get_current_user_row),
):
    fields = {}
    if payload.name is not None:
        fields["name"] = payload.name.strip()
    if payload.password is not None:
        fields["password_hash"] = hash_password(payload.password)
    if payload.email_notifications is not None:
        fields["email_notifications"] = payload.email_notifications
    return update_user(db, user, **fields)
