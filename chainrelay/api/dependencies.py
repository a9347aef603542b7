from __future__ import annotations

from fastapi import Request

from chainrelay.configuration.config import Settings
from chainrelay.core.registry.provider_registry import ProviderRegistry
from chainrelay.core.registry.token_registry import TokenAddressResolver
from chainrelay.integrations.upstream.upstream_client import UpstreamDispatcher


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_provider_registry(request: Request) -> ProviderRegistry:
    return request.app.state.provider_registry


def get_token_resolver(request: Request) -> TokenAddressResolver:
    return request.app.state.token_resolver


def get_dispatcher(request: Request) -> UpstreamDispatcher:
    return request.app.state.dispatcher
