"""FastAPI endpoints for token introspection and player/team progress."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from .config import load_settings
from .models import TOKEN_COLLECTION, ApiToken
from .security import (
    GET_PROGRESS,
    TEAM_PROGRESS,
    UNKNOWN_HEADER_ERROR,
    AuthorizationError,
    has_permission,
    parse_bearer,
)
from .store import DocumentStore, StoreError, create_store
from .team import aggregate_team_progress, fetch_progress

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v2"


class TokenResponse(BaseModel):
    permissions: list[str]
    token: str


class ProgressResponse(BaseModel):
    data: dict[str, Any]
    meta: dict[str, Any]


class TeamProgressResponse(BaseModel):
    data: list[dict[str, Any]]
    meta: dict[str, Any]


async def record_call(store: DocumentStore, token_id: str) -> None:
    try:
        await store.increment_field(TOKEN_COLLECTION, token_id, "calls")
    except Exception:
        logger.exception("Failed to increment call counter for token %s", token_id)


def schedule_call_increment(store: DocumentStore, token_id: str, pending: set[asyncio.Task]) -> asyncio.Task:
    """Start the call counter update without waiting for it; it may finish after the response."""
    task = asyncio.create_task(record_call(store, token_id))
    pending.add(task)
    task.add_done_callback(pending.discard)
    return task


def _default_store() -> DocumentStore:
    settings = load_settings()
    return create_store(database_url=settings.database_url, firestore_project=settings.firestore_project)


def create_app(store: DocumentStore | None = None) -> FastAPI:
    app = FastAPI(title="TarkovTracker API", version="2.0.0")
    document_store = store if store is not None else _default_store()
    pending_calls: set[asyncio.Task] = set()
    app.state.pending_calls = pending_calls

    def get_store() -> DocumentStore:
        return document_store

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(request: Request, exc: AuthorizationError) -> Response:
        if exc.body is None:
            return Response(status_code=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.body)

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> Response:
        logger.error("Request %s failed: %s", request.url.path, exc)
        return PlainTextResponse(str(exc), status_code=500)

    async def verify_bearer(
        authorization: str | None = Header(default=None),
        local_store: DocumentStore = Depends(get_store),
    ) -> ApiToken:
        if authorization is None:
            logger.info("No Authorization header sent")
            raise AuthorizationError(401)

        raw_token = parse_bearer(authorization)
        try:
            token_doc = await local_store.get_document(TOKEN_COLLECTION, raw_token)
        except Exception:
            logger.exception("Unknown error with Authorization header: %s", authorization)
            raise AuthorizationError(400, {"error": UNKNOWN_HEADER_ERROR})

        if token_doc is None:
            logger.info("Did not find token %s", raw_token)
            raise AuthorizationError(401)

        api_token = ApiToken.from_document(token_doc)
        logger.info("Found token for owner %s", api_token.owner)
        schedule_call_increment(local_store, token_doc.document_id, pending_calls)
        return api_token

    def require_permission(permission: str) -> Callable[..., Awaitable[ApiToken]]:
        async def check_permission(api_token: ApiToken = Depends(verify_bearer)) -> ApiToken:
            if not has_permission(api_token, permission):
                logger.info("Token for owner %s lacks permission %s", api_token.owner, permission)
                raise AuthorizationError(401)
            return api_token

        return check_permission

    @app.get(f"{API_PREFIX}/token", response_model=TokenResponse)
    async def get_token(api_token: ApiToken = Depends(verify_bearer)) -> TokenResponse:
        return TokenResponse(permissions=list(api_token.permissions), token=api_token.token)

    @app.get(f"{API_PREFIX}/progress", response_model=ProgressResponse)
    async def get_progress(
        api_token: ApiToken = Depends(require_permission(GET_PROGRESS)),
        local_store: DocumentStore = Depends(get_store),
    ) -> ProgressResponse:
        progress = await fetch_progress(local_store, api_token.owner)
        return ProgressResponse(data=progress, meta={"self": api_token.owner})

    @app.get(f"{API_PREFIX}/team/progress", response_model=TeamProgressResponse)
    async def get_team_progress(
        api_token: ApiToken = Depends(require_permission(TEAM_PROGRESS)),
        local_store: DocumentStore = Depends(get_store),
    ) -> TeamProgressResponse:
        team = await aggregate_team_progress(local_store, api_token.owner)
        return TeamProgressResponse(
            data=team.members,
            meta={"self": api_token.owner, "hiddenTeammates": team.hidden_teammates},
        )

    return app


app = create_app()
