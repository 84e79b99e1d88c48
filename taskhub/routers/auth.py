# taskhub/routers/auth.py
# PURPOSE: /auth/login, /auth/me

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..auth import authenticate, create_access_token, get_current_user_row
from ..config import settings
from ..db import get_db
from ..db_models import UserDB
from ..models import LoginRequest, TokenResponse, UserPublic
from ..rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    db: Session = Depends(get_db),
):
    user = authenticate(db, payload.email, payload.password)
    logger.info("login ok user_id=%s", user.id)
    return TokenResponse(
        access_token=create_access_token(user),
        user=UserPublic.model_validate(user),
    )


@router.get("/me", response_model=UserPublic)
def me(user: UserDB = Depends(get_current_user_row)):
    # If token is valid, user is injected
    return user
