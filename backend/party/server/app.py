from __future__ import annotations

from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from party.auth import (
    BearerTokenBackend,
    bearer_optional,
    bearer_required,
    device_route,
    public_route,
    validate_route_auth_policy,
)
from party.domain.errors import PartyError
from party.metadata import OEmbedMetadataClient
from party.server.middleware import RequestContextMiddleware, SecurityHeadersMiddleware, SlashNormalizationMiddleware
from party.server.settings import PartyServerSettings
from party.service import PartyService
from party.store import FilePartyRepository, InMemoryPartyRepository
from party.views import (
    create_party,
    end_party,
    join_party,
    login,
    mark_track_played,
    party_snapshot,
    player_advance,
    player_control,
    player_previous,
    player_reset,
    player_state,
    promote_track,
    remove_track,
    reset_track_priority,
    submit_track,
    vote_track,
)
from shared.build_info import APP_VERSION
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from starlette.requests import Request

    from party.metadata import MetadataClient
    from party.store import PartyRepository

_STATUS_NO_BODY = {204, 304}


async def _party_error_handler(_request: Request, exc: Exception) -> Response:
    """Render any domain error as ``{"error": ..., "code": ...}``."""
    error = cast("PartyError", exc)
    if error.status_code >= 500:  # noqa: PLR2004
        logger.error("party error", error=error.message, code=error.code)
    return JSONResponse({"error": error.message, "code": error.code.value}, status_code=error.status_code)


async def _http_error_handler(_request: Request, exc: Exception) -> Response:
    """Keep Starlette's 404/405 semantics but answer in JSON."""
    http_exc = cast("HTTPException", exc)
    if http_exc.status_code in _STATUS_NO_BODY:
        return Response(status_code=http_exc.status_code, headers=http_exc.headers)
    return JSONResponse({"error": http_exc.detail or ""}, status_code=http_exc.status_code, headers=http_exc.headers)


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "version": APP_VERSION})


def build_routes() -> list[Route]:
    party = "/api/parties/{party_id}"
    video = party + "/videos/{submission_id}"
    return [
        Route("/health", public_route(health), methods=["GET"], name="health"),
        Route("/api/parties", public_route(create_party), methods=["POST"], name="create_party"),
        Route(party, bearer_optional(party_snapshot), methods=["GET"], name="party_snapshot"),
        Route(party + "/join", public_route(join_party), methods=["POST"], name="join_party"),
        Route(party + "/login", public_route(login), methods=["POST"], name="login"),
        Route(party + "/end", bearer_required(end_party), methods=["POST"], name="end_party"),
        Route(party + "/videos", bearer_required(submit_track), methods=["POST"], name="submit_track"),
        Route(video, bearer_required(remove_track), methods=["DELETE"], name="remove_track"),
        Route(video + "/vote", bearer_required(vote_track), methods=["POST"], name="vote_track"),
        Route(video + "/promote", bearer_required(promote_track), methods=["POST"], name="promote_track"),
        Route(video + "/mark-played", bearer_required(mark_track_played), methods=["POST"], name="mark_track_played"),
        Route(
            video + "/reset-priority",
            bearer_required(reset_track_priority),
            methods=["POST"],
            name="reset_track_priority",
        ),
        Route(party + "/player/control", bearer_required(player_control), methods=["POST"], name="player_control"),
        Route(party + "/player/state", device_route(player_state), methods=["POST"], name="player_state"),
        Route(party + "/player/advance", device_route(player_advance), methods=["POST"], name="player_advance"),
        Route(party + "/player/previous", device_route(player_previous), methods=["POST"], name="player_previous"),
        Route(party + "/player/reset", device_route(player_reset), methods=["POST"], name="player_reset"),
    ]


def build_repository(settings: PartyServerSettings) -> PartyRepository:
    if settings.store_backend == "memory":
        return InMemoryPartyRepository()
    return FilePartyRepository(settings.data_path)


def create_app(
    settings: PartyServerSettings | None = None,
    *,
    repository: PartyRepository | None = None,
    metadata: MetadataClient | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = PartyServerSettings()
    if repository is None:
        repository = build_repository(settings)
    if metadata is None:
        metadata = OEmbedMetadataClient(settings.metadata_endpoint, settings.metadata_timeout_seconds)

    routes = build_routes()
    validate_route_auth_policy(routes)

    app = Starlette(
        routes=routes,
        exception_handlers={PartyError: _party_error_handler, HTTPException: _http_error_handler},
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(AuthenticationMiddleware, backend=BearerTokenBackend())  # type: ignore[arg-type]
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]
    app.add_middleware(RequestContextMiddleware)  # type: ignore[arg-type]

    app.state.settings = settings
    app.state.party_service = PartyService(
        repository,
        metadata,
        max_active_submissions=settings.max_active_submissions,
    )

    logger.info("party server ready", store_backend=settings.store_backend)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory party.server.app:get_app."""
    settings = PartyServerSettings()
    setup_logging(log_dir=settings.log_dir, name="party-server")
    return create_app(settings=settings)
