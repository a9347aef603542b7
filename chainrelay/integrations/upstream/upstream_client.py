from __future__ import annotations

import json
from typing import Any, Dict, Optional, Tuple

import httpx

from chainrelay.configuration.config import Settings
from chainrelay.core.errors import ConfigurationError, UpstreamFailure, UpstreamUnavailable
from chainrelay.core.structures.structures import ExplorerScanRequest, ProviderEndpoint, TrackerRequest
from chainrelay.integrations.upstream.upstream_structures import (
    EXPLORER_APIKEY_PARAM,
    EXPLORER_MODULE,
    EXPLORER_SORT_ORDER,
    RawUpstreamResponse,
    build_json_rpc_envelope,
)
from chainrelay.logging.logger import get_logger, redact_url

log = get_logger(__name__)

TRACKER_FAILURE_MESSAGE: str = "Backend API request failed"


def _build_timeout(settings: Settings) -> httpx.Timeout:
    return httpx.Timeout(settings.UPSTREAM_TIMEOUT_SECONDS, connect=settings.UPSTREAM_CONNECT_TIMEOUT_SECONDS)


def _decode_json(response: httpx.Response) -> Any:
    """Parse a response body as JSON; raises ValueError when it is not JSON."""
    return json.loads(response.content)


class UpstreamDispatcher:
    """
    Performs the single outbound call behind every proxied request.

    Three payload shapes are supported: JSON-RPC forwarding, explorer query
    forwarding and internal tracker forwarding. No retry, caching or fan-out:
    one inbound request produces at most one outbound request.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=_build_timeout(settings))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ---- credentials -------------------------------------------------------
    def _provider_target(self, endpoint: ProviderEndpoint) -> Tuple[str, Dict[str, str], Optional[str]]:
        """
        Return (url, query params, secret) for a provider endpoint.

        Raises:
            ConfigurationError: when the endpoint needs a key that is not configured.
        """
        if not endpoint.requires_credential:
            return endpoint.base_url, {}, None

        api_key = self._settings.credential(endpoint.credential_env_var)
        if not api_key:
            log.error(
                "[UPSTREAM][CONFIG] Missing credential env=%s for chain=%s purpose=%s",
                endpoint.credential_env_var,
                endpoint.chain_key.value,
                endpoint.purpose.value,
            )
            raise ConfigurationError(f"{endpoint.provider_label} API key not configured")

        if endpoint.embeds_credential_in_path:
            return endpoint.base_url.replace("{api_key}", api_key), {}, api_key
        return endpoint.base_url, {EXPLORER_APIKEY_PARAM: api_key}, api_key

    # ---- provider calls ----------------------------------------------------
    async def _send_to_provider(
            self,
            request: httpx.Request,
            endpoint: ProviderEndpoint,
            secret: Optional[str],
            failure_message: str,
    ) -> RawUpstreamResponse:
        safe_url = redact_url(str(request.url), secret)
        try:
            response = await self._client.send(request)
        except httpx.RequestError as exc:
            log.warning(
                "[UPSTREAM][%s][FAIL] Transport error chain=%s url=%s error=%s",
                endpoint.purpose.value.upper(),
                endpoint.chain_key.value,
                safe_url,
                type(exc).__name__,
            )
            raise UpstreamUnavailable(failure_message) from exc

        if not response.is_success:
            log.warning(
                "[UPSTREAM][%s][FAIL] chain=%s url=%s status=%s body=%s",
                endpoint.purpose.value.upper(),
                endpoint.chain_key.value,
                safe_url,
                response.status_code,
                response.text[:200],
            )
            raise UpstreamUnavailable(failure_message)

        try:
            payload = _decode_json(response)
        except ValueError as exc:
            log.warning(
                "[UPSTREAM][%s][FAIL] Non-JSON body chain=%s url=%s body=%s",
                endpoint.purpose.value.upper(),
                endpoint.chain_key.value,
                safe_url,
                response.text[:200],
            )
            raise UpstreamUnavailable(failure_message) from exc

        log.debug(
            "[UPSTREAM][%s][RECEIVE] chain=%s status=%s",
            endpoint.purpose.value.upper(),
            endpoint.chain_key.value,
            response.status_code,
        )
        return RawUpstreamResponse(status_code=response.status_code, content=response.content, payload=payload)

    async def forward_json_rpc(
            self,
            endpoint: ProviderEndpoint,
            method: str,
            params: Any,
            *,
            failure_message: str = "RPC call failed",
    ) -> RawUpstreamResponse:
        """
        POST a JSON-RPC 2.0 envelope to an RPC or gas-price provider.

        JSON-RPC level errors in the response body are returned untouched.
        """
        url, query, secret = self._provider_target(endpoint)
        envelope = build_json_rpc_envelope(method, params)
        request = self._client.build_request(
            "POST",
            url,
            params=query or None,
            json=envelope,
            headers={"Content-Type": "application/json"},
        )
        log.debug(
            "[UPSTREAM][%s][FORWARD] chain=%s method=%s",
            endpoint.purpose.value.upper(),
            endpoint.chain_key.value,
            method,
        )
        return await self._send_to_provider(request, endpoint, secret, failure_message)

    async def forward_explorer_query(
            self,
            endpoint: ProviderEndpoint,
            scan: ExplorerScanRequest,
            *,
            failure_message: str = "Explorer API call failed",
    ) -> RawUpstreamResponse:
        """GET an Etherscan-style account query, newest first."""
        url, credential_query, secret = self._provider_target(endpoint)

        query: Dict[str, str] = {
            "module": EXPLORER_MODULE,
            "action": scan.action,
            "address": scan.address,
        }
        if scan.requires_token_filter and scan.contract_address:
            query["contractaddress"] = scan.contract_address
        query["startblock"] = scan.startblock
        query["endblock"] = scan.endblock
        query["sort"] = EXPLORER_SORT_ORDER
        query.update(credential_query)

        request = self._client.build_request("GET", url, params=query)
        log.debug(
            "[UPSTREAM][EXPLORER][FORWARD] chain=%s action=%s token=%s",
            scan.chain_key.value,
            scan.action,
            scan.token,
        )
        return await self._send_to_provider(request, endpoint, secret, failure_message)

    # ---- tracker calls -----------------------------------------------------
    async def forward_tracker(
            self,
            tracker_request: TrackerRequest,
            *,
            failure_message: str,
    ) -> RawUpstreamResponse:
        """
        Forward a call to the internal tracker with the caller's bearer token.

        Non-2xx statuses are propagated; transport errors become 500.
        """
        base_url = self._settings.TRACKER_API_URL
        if not base_url:
            log.error("[UPSTREAM][TRACKER][CONFIG] TRACKER_API_URL is not configured")
            raise ConfigurationError("Tracker API URL not configured")

        url = f"{base_url}/{tracker_request.path.lstrip('/')}"
        headers = {
            "Accept": "application/json",
            "Authorization": tracker_request.bearer,
        }
        request = self._client.build_request(
            tracker_request.method,
            url,
            params=tracker_request.params,
            json=tracker_request.json_body,
            headers=headers,
        )

        log.debug("[UPSTREAM][TRACKER][FORWARD] %s %s", tracker_request.method, tracker_request.path)
        try:
            response = await self._client.send(request)
        except httpx.RequestError as exc:
            log.warning(
                "[UPSTREAM][TRACKER][FAIL] Transport error %s %s error=%s",
                tracker_request.method,
                tracker_request.path,
                type(exc).__name__,
            )
            raise UpstreamFailure(failure_message, 500) from exc

        if not response.is_success:
            log.warning(
                "[UPSTREAM][TRACKER][FAIL] %s %s status=%s body=%s",
                tracker_request.method,
                tracker_request.path,
                response.status_code,
                response.text[:200],
            )
            raise UpstreamFailure(TRACKER_FAILURE_MESSAGE, response.status_code)

        try:
            payload = _decode_json(response)
        except ValueError as exc:
            log.warning(
                "[UPSTREAM][TRACKER][FAIL] Non-JSON body %s %s status=%s",
                tracker_request.method,
                tracker_request.path,
                response.status_code,
            )
            raise UpstreamFailure(failure_message, 500) from exc

        log.debug(
            "[UPSTREAM][TRACKER][RECEIVE] %s %s status=%s",
            tracker_request.method,
            tracker_request.path,
            response.status_code,
        )
        return RawUpstreamResponse(status_code=response.status_code, content=response.content, payload=payload)
