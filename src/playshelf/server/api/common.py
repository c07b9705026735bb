"""Shared helpers for API handlers: request bodies and blocking DB work."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from typing import Any, TypeVar

from aiohttp import web
from pydantic import BaseModel, ValidationError

from playshelf.db.connection import ConnectionPool, handle_database_locked
from playshelf.server.api.errors import (
    INVALID_JSON,
    INVALID_REQUEST,
    VALIDATION_FAILED,
    RequestError,
)

ModelT = TypeVar("ModelT", bound=BaseModel)
T = TypeVar("T")


async def read_json(request: web.Request) -> Any:
    """Decode the request body as JSON. An empty body reads as ``{}``.

    Raises:
        RequestError: With INVALID_JSON if the body is not valid JSON.
    """
    if not request.can_read_body:
        return {}
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RequestError("Invalid JSON payload", code=INVALID_JSON) from e


async def read_json_object(request: web.Request) -> dict[str, Any]:
    data = await read_json(request)
    if not isinstance(data, dict):
        raise RequestError("Request body must be a JSON object", code=INVALID_REQUEST)
    return data


def _validation_details(error: ValidationError) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in item["loc"]) or "body",
            "message": item["msg"],
        }
        for item in error.errors()
    ]


async def parse_body(request: web.Request, model: type[ModelT]) -> ModelT:
    """Read the request body and validate it against a pydantic model.

    Raises:
        RequestError: INVALID_JSON, INVALID_REQUEST or VALIDATION_FAILED.
    """
    data = await read_json_object(request)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RequestError(
            "Request validation failed",
            code=VALIDATION_FAILED,
            details=_validation_details(e),
        ) from e


def _pool(request: web.Request) -> ConnectionPool:
    return request["connection_pool"]


async def run_read(
    request: web.Request, func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run ``func(conn, ...)`` on a read connection in a worker thread."""
    pool = _pool(request)

    @handle_database_locked
    def _run() -> T:
        with pool.read_connection() as conn:
            return func(conn, *args, **kwargs)

    return await asyncio.to_thread(_run)


async def run_write(
    request: web.Request,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run ``func(conn, ...)`` inside a write transaction in a worker thread.

    The transaction commits if func returns and rolls back if it raises.
    """
    pool = _pool(request)

    @handle_database_locked
    def _run() -> T:
        with pool.transaction() as conn:
            return func(conn, *args, **kwargs)

    return await asyncio.to_thread(_run)
