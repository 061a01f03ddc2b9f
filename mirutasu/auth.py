"""Cookie sessions.

A session row maps an opaque id (the cookie value) to a user. Sessions live
``session_days``; once less than half of that is left, validation pushes the
expiry out again and marks the session *fresh* so the cookie gets re-issued.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from .clock import utcnow
from .config import Settings
from .db import get_db
from .models import User, UserSession
from .security import generate_id

logger = logging.getLogger(__name__)

SESSION_ID_LENGTH = 40


@dataclass
class SessionResult:
    session: UserSession
    user: User
    fresh: bool = False


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# ---------- Session store ----------
def create_session(db: Session, user_id: str, settings: Settings) -> UserSession:
    now = utcnow()
    sess = UserSession(
        id=generate_id(SESSION_ID_LENGTH),
        user_id=user_id,
        expires_at=now + timedelta(days=settings.session_days),
        created_at=now,
    )
    db.add(sess)
    db.commit()
    db.refresh(sess)
    return sess


def validate_session(db: Session, session_id: str, settings: Settings) -> Optional[SessionResult]:
    sess = db.get(UserSession, session_id)
    if sess is None:
        return None
    now = utcnow()
    if now >= sess.expires_at:
        user_id = sess.user_id
        db.delete(sess)
        db.commit()
        logger.debug("Expired session removed for user %s", user_id)
        return None

    lifetime = timedelta(days=settings.session_days)
    fresh = False
    if sess.expires_at - now < lifetime / 2:
        sess.expires_at = now + lifetime
        db.commit()
        db.refresh(sess)
        fresh = True
    return SessionResult(session=sess, user=sess.user, fresh=fresh)


def invalidate_session(db: Session, session_id: str) -> None:
    db.query(UserSession).filter(UserSession.id == session_id).delete()
    db.commit()


def invalidate_user_sessions(db: Session, user_id: str) -> int:
    n = db.query(UserSession).filter(UserSession.user_id == user_id).delete()
    db.commit()
    return n


# ---------- Cookies ----------
def set_session_cookie(response: Response, session_id: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_days * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def blank_cookie_header(settings: Settings) -> str:
    """Set-Cookie value that clears the session cookie, for error responses."""
    r = Response()
    clear_session_cookie(r, settings)
    return r.headers["set-cookie"]


def read_session_cookie(request: Request, settings: Settings) -> Optional[str]:
    value = request.cookies.get(settings.session_cookie_name)
    return value or None


# ---------- Dependencies ----------
def require_user(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> User:
    session_id = read_session_cookie(request, settings)
    if not session_id:
        raise HTTPException(401, "Authentication required")

    result = validate_session(db, session_id, settings)
    if result is None:
        raise HTTPException(
            401, "Invalid session", headers={"set-cookie": blank_cookie_header(settings)}
        )
    if result.fresh:
        set_session_cookie(response, result.session.id, settings)
    return result.user


def optional_user(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Optional[User]:
    session_id = read_session_cookie(request, settings)
    if not session_id:
        return None
    result = validate_session(db, session_id, settings)
    if result is None:
        clear_session_cookie(response, settings)
        return None
    if result.fresh:
        set_session_cookie(response, result.session.id, settings)
    return result.user
