from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chainrelay.api.http.http_api import router as http_router
from chainrelay.api.relay import relay_error
from chainrelay.configuration.config import Settings, get_settings
from chainrelay.core.errors import ProxyError
from chainrelay.core.registry.provider_registry import ProviderRegistry
from chainrelay.core.registry.token_registry import TokenAddressResolver
from chainrelay.integrations.upstream.upstream_client import UpstreamDispatcher
from chainrelay.logging.logger import get_logger

log = get_logger(__name__)


def create_app(
        settings: Optional[Settings] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        provider_registry: Optional[ProviderRegistry] = None,
        token_resolver: Optional[TokenAddressResolver] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The registries, settings and dispatcher are built once here and shared
    read-only by every request. Tests pass their own settings and an
    `httpx.AsyncClient` on a mock transport.

    Returns:
        FastAPI: Configured chainrelay API application.
    """
    settings = settings or get_settings()
    app = FastAPI(title="chainrelay API")

    app.state.settings = settings
    app.state.provider_registry = provider_registry or ProviderRegistry()
    app.state.token_resolver = token_resolver or TokenAddressResolver()
    app.state.dispatcher = UpstreamDispatcher(settings, client=http_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProxyError)
    async def on_proxy_error(_: Request, error: ProxyError) -> JSONResponse:
        return relay_error(error)

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(_: Request, error: RequestValidationError) -> JSONResponse:
        log.debug("[HTTP][VALIDATION] %s", error.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request parameters"})

    @app.on_event("startup")
    async def on_startup() -> None:
        registry: ProviderRegistry = app.state.provider_registry
        log.info(
            "chainrelay startup: chains=%s tracker_configured=%s",
            ",".join(chain.value for chain in registry.supported_chains()),
            bool(settings.TRACKER_API_URL),
        )

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        """Release the shared upstream connection pool."""
        await app.state.dispatcher.aclose()

    @app.get("/api/health", tags=["health"])
    def api_health() -> Dict[str, Any]:
        """Return a minimal health payload; no upstream is contacted."""
        return {"ok": True}

    app.include_router(http_router)

    return app
