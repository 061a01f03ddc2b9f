from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import (
    blank_cookie_header,
    clear_session_cookie,
    create_session,
    get_app_settings,
    invalidate_session,
    invalidate_user_sessions,
    read_session_cookie,
    require_user,
    set_session_cookie,
    validate_session,
)
from ..clock import utcnow
from ..config import Settings
from ..db import get_db
from ..models import User
from ..schemas import AuthOut, LoginIn, MeOut, SignupIn, SuccessOut
from ..security import dummy_hash, generate_id, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

IDENTITY_TAKEN = "Email or username is already in use"


def identity_taken(db: Session, email: str, username: str) -> bool:
    return db.query(User.id).filter(or_(User.email == email, User.username == username)).first() is not None


@router.post("/signup", response_model=AuthOut)
def signup(
    body: SignupIn,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    email = body.email.lower()
    if identity_taken(db, email, body.username):
        raise HTTPException(400, IDENTITY_TAKEN)

    now = utcnow()
    user = User(
        id=generate_id(15),
        email=email,
        username=body.username,
        hashed_password=hash_password(body.password, settings.bcrypt_rounds),
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same email or username
        db.rollback()
        raise HTTPException(400, IDENTITY_TAKEN)
    db.refresh(user)

    sess = create_session(db, user.id, settings)
    set_session_cookie(response, sess.id, settings)
    logger.info("New user %s (%s)", user.username, user.id)
    return AuthOut(user=user)


@router.post("/login", response_model=AuthOut)
def login(
    body: LoginIn,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = db.query(User).filter(User.email == body.email.lower()).first()
    pw_hash = user.hashed_password if user else dummy_hash(settings.bcrypt_rounds)
    if not verify_password(body.password, pw_hash) or not user:
        logger.info("Failed login for %s", body.email)
        raise HTTPException(400, "Invalid email or password")

    sess = create_session(db, user.id, settings)
    set_session_cookie(response, sess.id, settings)
    return AuthOut(user=user)


@router.post("/logout", response_model=SuccessOut)
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    session_id = read_session_cookie(request, settings)
    if not session_id:
        raise HTTPException(400, "No session found")
    invalidate_session(db, session_id)
    clear_session_cookie(response, settings)
    return SuccessOut()


@router.post("/logout-all", response_model=SuccessOut)
def logout_everywhere(
    response: Response,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    n = invalidate_user_sessions(db, user.id)
    clear_session_cookie(response, settings)
    logger.info("Invalidated %d session(s) for user %s", n, user.id)
    return SuccessOut()


@router.get("/me", response_model=MeOut)
def me(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    session_id = read_session_cookie(request, settings)
    if not session_id:
        raise HTTPException(401, "No session found")
    result = validate_session(db, session_id, settings)
    if result is None:
        raise HTTPException(401, "Invalid session", headers={"set-cookie": blank_cookie_header(settings)})
    return MeOut(user=result.user)
