"""Package exposing the provider's FastAPI app for ``python -m encora_plex``."""

from __future__ import annotations

from app.main import app, create_app

__all__ = ["app", "create_app"]
