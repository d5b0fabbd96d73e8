"""FastAPI adapter: turns a pipeline Result into a JSON response.

Two ways to use it from a route::

    @app.get("/users/{user_id}")
    async def get_user(request: Request, user_id: str):
        return await (
            endpoint(request)
            .step(lambda _, ctx: ok(user_id))
            .step(load_user)
            .response()
        )

    @app.get("/health")
    async def health():
        return await pipeline().step(check_db).use_result(api_response)

Success maps to ``200 {"status": "ok", "response": ...}``; failure maps to
``{"status": "error", "error": "<message>"}`` with the error's own
``status_code`` when it carries one (``HTTPException`` does), else 400.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from ..context import PipelineContext
from ..extension import ExtensionPipeline, make_extension
from ..pipeline import UNSET
from ..result import Err, Result

logger = logging.getLogger(__name__)

DEFAULT_ERROR_STATUS = 400


class SuccessPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    response: Any = None


class ErrorPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["error"] = "error"
    error: str


@dataclass(frozen=True)
class RequestContext(PipelineContext):
    """Initial context of an :func:`endpoint` pipeline."""

    request: Request | None = None


def error_message(error: BaseException) -> str:
    if isinstance(error, HTTPException):
        return str(error.detail)
    return str(error) or type(error).__name__


def error_status(error: BaseException, default: int = DEFAULT_ERROR_STATUS) -> int:
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int) and not isinstance(status_code, bool):
        return status_code
    return default


def to_response(
    result: Result,
    *,
    status_code: int = 200,
    error_status_code: int = DEFAULT_ERROR_STATUS,
) -> JSONResponse:
    """Map a Result onto a ``JSONResponse``."""
    if isinstance(result, Err):
        error = result.error
        status = error_status(error, error_status_code)
        logger.debug("Pipeline failed with %s, responding %d", type(error).__name__, status)
        failure = ErrorPayload(error=error_message(error))
        return JSONResponse(status_code=status, content=jsonable_encoder(failure))

    success = SuccessPayload(response=result.value)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(success))


def api_response(result: Result, context: Any = None) -> JSONResponse:
    """Completion handler for ``Pipeline.use_result`` and extensions."""
    return to_response(result)


class ResponsePipeline(ExtensionPipeline[Request]):
    """Extension pipeline bound to a FastAPI request."""

    __slots__ = ()

    async def response(self, value: Any = UNSET) -> JSONResponse:
        """Run the pipeline and return its JSON response."""
        return await self.complete(value)


_request_pipeline = make_extension(
    lambda request: RequestContext(request=request),
    api_response,
    cls=ResponsePipeline,
)


def endpoint(request: Request) -> ResponsePipeline:
    """Start a pipeline for ``request`` that ends with ``.response()``."""
    return _request_pipeline(request)
