from __future__ import annotations

from fastapi.responses import JSONResponse, Response

from chainrelay.core.errors import ProxyError
from chainrelay.integrations.upstream.upstream_structures import RawUpstreamResponse

JSON_MEDIA_TYPE: str = "application/json"


def relay_success(raw: RawUpstreamResponse, *, propagate_status: bool = False) -> Response:
    """
    Return the upstream JSON body unchanged.

    Provider calls always answer 200 since their error shape lives in the body;
    tracker calls keep the upstream status.
    """
    status_code = raw.status_code if propagate_status else 200
    return Response(content=raw.content, status_code=status_code, media_type=JSON_MEDIA_TYPE)


def relay_error(error: ProxyError) -> JSONResponse:
    """Render any ProxyError as the fixed `{"error": message}` envelope."""
    return JSONResponse(status_code=error.status_code, content={"error": error.message})


def relay_unexpected(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})
