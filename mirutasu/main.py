"""ASGI entry point: ``uvicorn mirutasu.main:app``."""

from __future__ import annotations

from .app import create_app
from .config import get_settings
from .logging_setup import setup_logging

_settings = get_settings()
setup_logging(_settings.log_level, _settings.log_file)

app = create_app(_settings)
