"""
Adapters that turn pipeline results into framework responses.

Available Integrations:
    - FastAPI: ``endpoint(request)...response()`` and ``api_response``

Example:
    from amino import ok
    from amino.integrations import endpoint

    @app.get("/")
    async def index(request: Request):
        return await endpoint(request).step(lambda *_: ok({"hello": "world"})).response()
"""

# Import FastAPI integration if available
try:
    from .fastapi import (
        RequestContext,
        ResponsePipeline,
        api_response,
        endpoint,
        to_response,
    )

    FASTAPI_AVAILABLE = True
except ImportError:
    RequestContext = None  # type: ignore
    ResponsePipeline = None  # type: ignore
    api_response = None  # type: ignore
    endpoint = None  # type: ignore
    to_response = None  # type: ignore
    FASTAPI_AVAILABLE = False

__all__ = [
    "FASTAPI_AVAILABLE",
    "RequestContext",
    "ResponsePipeline",
    "api_response",
    "endpoint",
    "to_response",
]
