from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .clock import iso_utc, utcnow
from .config import Settings, get_settings
from .dashboard import router as dashboard_router
from .db import init_db, make_engine, make_session_factory
from .game_catalog import seed_game_masters
from .routes import ROUTERS

logger = logging.getLogger(__name__)


# ---------- Error handlers ----------
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal Server Error"}, status_code=500)


# ---------- FastAPI ----------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    engine = make_engine(settings.database_url)
    init_db(engine)
    SessionLocal = make_session_factory(engine)
    if settings.seed_games:
        with SessionLocal() as db:
            seed_game_masters(db)

    app = FastAPI(title=settings.app_name, version=__version__)
    app.state.settings = settings
    app.state.engine = engine
    app.state.SessionLocal = SessionLocal

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins, allow_methods=["*"], allow_headers=["*"], allow_credentials=True
    )

    app.add_exception_handler(StarletteHTTPException, http_error)
    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(Exception, unhandled_error)

    @app.get("/health")
    def health():
        return {"status": "ok", "environment": settings.environment, "timestamp": iso_utc(utcnow())}

    app.include_router(dashboard_router)
    for router in ROUTERS:
        app.include_router(router)

    logger.info("%s ready (%s, db=%s)", settings.app_name, settings.environment, engine.url)
    return app
