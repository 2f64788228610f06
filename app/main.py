"""Entry point for the FastAPI-powered Plex metadata provider."""

from __future__ import annotations

import json
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import Settings, settings
from .formatting import TitleFormatter
from .guid import LIBRARY_MATCHES_PATH, LIBRARY_METADATA_PATH
from .models import MatchRequest
from .provider import MOVIE_PROVIDER_BASE_PATH, build_movie_provider
from .services.encora import EncoraClient
from .services.lookup import MetadataService, UnsupportedRatingKeyError
from .services.mapper import RecordingMapper
from .services.match import MatchService
from .services.nfo import NfoParser
from .services.recordings import RecordingService
from .services.stagemedia import StageMediaClient

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-US"
DEFAULT_COUNTRY = "US"

app: FastAPI


@dataclass(slots=True)
class ProviderServices:
    match_service: MatchService
    metadata_service: MetadataService


def build_services(
    app_settings: Settings,
    encora_http: httpx.AsyncClient,
    stagemedia_http: httpx.AsyncClient,
) -> ProviderServices:
    """Wire clients, mapper and services together for one process."""

    formatter = TitleFormatter(app_settings.title_format, app_settings.date_replace_char)
    recordings = RecordingService(
        EncoraClient(app_settings, encora_http),
        StageMediaClient(app_settings, stagemedia_http),
        RecordingMapper(formatter),
    )
    nfo_parser = NfoParser(app_settings.nfo_library_path)
    return ProviderServices(
        match_service=MatchService(
            recordings, nfo_parser, nfo_fallback=app_settings.nfo_match_fallback
        ),
        metadata_service=MetadataService(recordings, nfo_parser),
    )


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(fastapi_app: FastAPI):
        app_settings.require_credentials()
        timeout = httpx.Timeout(app_settings.http_timeout_seconds, connect=10.0)
        exit_stack = AsyncExitStack()
        encora_http = await exit_stack.enter_async_context(
            httpx.AsyncClient(base_url=str(app_settings.encora_api_url), timeout=timeout)
        )
        stagemedia_http = await exit_stack.enter_async_context(
            httpx.AsyncClient(
                base_url=str(app_settings.stagemedia_api_url), timeout=timeout
            )
        )
        services = build_services(app_settings, encora_http, stagemedia_http)
        fastapi_app.state.match_service = services.match_service
        fastapi_app.state.metadata_service = services.metadata_service
        logger.info(
            "Metadata provider available at %s (library path %s)",
            MOVIE_PROVIDER_BASE_PATH,
            app_settings.nfo_library_path,
        )

        try:
            yield
        finally:  # pragma: no cover - teardown path exercised at runtime
            await exit_stack.aclose()

    fastapi_app = FastAPI(
        title=app_settings.app_name,
        description="Plex custom metadata provider backed by Encora and StageMedia",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api-docs",
        openapi_url="/api-docs.json",
    )
    register_routes(fastapi_app)
    return fastapi_app


def get_match_service(fastapi_app: FastAPI) -> MatchService:
    service = getattr(fastapi_app.state, "match_service", None)
    if not isinstance(service, MatchService):
        raise RuntimeError("Match service not initialised")
    return service


def get_metadata_service(fastapi_app: FastAPI) -> MetadataService:
    service = getattr(fastapi_app.state, "metadata_service", None)
    if not isinstance(service, MetadataService):
        raise RuntimeError("Metadata service not initialised")
    return service


def _plex_hint(request: Request, name: str, default: str) -> str:
    """Read a Plex hint from the headers, then the query string."""

    return request.headers.get(name) or request.query_params.get(name) or default


def register_routes(fastapi_app: FastAPI) -> None:
    base = MOVIE_PROVIDER_BASE_PATH

    @fastapi_app.get("/health")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get(base)
    async def media_provider() -> dict[str, Any]:
        return build_movie_provider().to_payload()

    @fastapi_app.get(f"{base}{LIBRARY_METADATA_PATH}/{{rating_key}}/images")
    async def metadata_images(request: Request, rating_key: str) -> JSONResponse:
        service = get_metadata_service(fastapi_app)
        language = _plex_hint(request, "X-Plex-Language", DEFAULT_LANGUAGE)
        try:
            container = await service.get_images(rating_key, language=language)
        except UnsupportedRatingKeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse(container.to_payload())

    @fastapi_app.get(f"{base}{LIBRARY_METADATA_PATH}/{{rating_key}}")
    async def metadata(request: Request, rating_key: str) -> JSONResponse:
        service = get_metadata_service(fastapi_app)
        try:
            container = await service.get_metadata(
                rating_key,
                language=_plex_hint(request, "X-Plex-Language", DEFAULT_LANGUAGE),
                country=_plex_hint(request, "X-Plex-Country", DEFAULT_COUNTRY),
            )
        except UnsupportedRatingKeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse(container.to_payload())

    @fastapi_app.post(f"{base}{LIBRARY_MATCHES_PATH}")
    async def matches(request: Request) -> JSONResponse:
        service = get_match_service(fastapi_app)
        try:
            payload = await request.json()
        except json.JSONDecodeError:
            payload = {}
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload")
        try:
            match_request = MatchRequest.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=400, detail=exc.errors(include_url=False)
            ) from exc

        container = await service.match(
            match_request,
            language=_plex_hint(request, "X-Plex-Language", DEFAULT_LANGUAGE),
            country=_plex_hint(request, "X-Plex-Country", DEFAULT_COUNTRY),
        )
        return JSONResponse(container.to_payload())


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
