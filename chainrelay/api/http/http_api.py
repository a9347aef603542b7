from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, Header, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel, ValidationError

from chainrelay.api.dependencies import get_dispatcher, get_provider_registry, get_token_resolver
from chainrelay.api.models import (
    ChainSummary,
    ChainsResponse,
    JsonRpcProxyBody,
    RegisterUserBody,
    ValidateReferralBody,
)
from chainrelay.api.relay import relay_error, relay_success, relay_unexpected
from chainrelay.core.errors import MissingField, ProxyError
from chainrelay.core.normalizer import (
    normalize_bearer,
    normalize_explorer_request,
    normalize_gas_price_request,
    normalize_rpc_request,
    require_path_value,
)
from chainrelay.core.registry.provider_registry import ProviderRegistry
from chainrelay.core.registry.token_registry import TokenAddressResolver
from chainrelay.core.structures.structures import ProviderPurpose, TrackerRequest
from chainrelay.core.utils.format_utils import encode_path_segment
from chainrelay.integrations.upstream.upstream_client import UpstreamDispatcher
from chainrelay.integrations.upstream.upstream_structures import GAS_PRICE_METHOD
from chainrelay.logging.logger import get_logger

router = APIRouter(prefix="/api")
log = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


async def _guarded(tag: str, fallback_message: str, operation: Callable[[], Awaitable[Response]]) -> Response:
    """
    Run a handler body and convert every failure into the `{"error": ...}` envelope.

    ProxyError carries its own status; anything else is logged and reported as 500.
    """
    try:
        return await operation()
    except ProxyError as error:
        log.info("[HTTP][%s][REJECT] status=%s error=%s", tag, error.status_code, error.message)
        return relay_error(error)
    except Exception:
        log.exception("[HTTP][%s][ERROR] Unexpected failure", tag)
        return relay_unexpected(fallback_message)


async def _read_body(request: Request, model: Type[ModelT]) -> ModelT:
    """Parse the JSON body into `model`; malformed bodies are a caller error."""
    try:
        data = await request.json()
    except ValueError as exc:
        raise MissingField("Request body must be valid JSON") from exc
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MissingField("Invalid request body") from exc


async def _forward_tracker(
        dispatcher: UpstreamDispatcher,
        *,
        method: str,
        path: str,
        bearer: str,
        failure_message: str,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
) -> Response:
    tracker_request = TrackerRequest(method=method, path=path, bearer=bearer, params=params, json_body=json_body)
    raw = await dispatcher.forward_tracker(tracker_request, failure_message=failure_message)
    return relay_success(raw, propagate_status=True)


# ---- provider routes -------------------------------------------------------

@router.post("/rpc", tags=["rpc"])  # type: ignore[misc]
async def proxy_rpc(
        request: Request,
        registry: ProviderRegistry = Depends(get_provider_registry),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    """Forward a JSON-RPC call to the chain's RPC provider and relay the raw JSON-RPC response."""
    failure_message = "RPC call failed"

    async def operation() -> Response:
        body = await _read_body(request, JsonRpcProxyBody)
        rpc, endpoint = normalize_rpc_request(body.chainKey, body.method, body.params, registry, ProviderPurpose.RPC)
        log.debug("[HTTP][RPC][FORWARD] chain=%s method=%s", rpc.chain_key.value, rpc.method)
        raw = await dispatcher.forward_json_rpc(endpoint, rpc.method, rpc.params, failure_message=failure_message)
        return relay_success(raw)

    return await _guarded("RPC", failure_message, operation)


@router.post("/pimlico", tags=["gas"])  # type: ignore[misc]
async def proxy_pimlico(
        request: Request,
        registry: ProviderRegistry = Depends(get_provider_registry),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    """Forward a JSON-RPC call (bundler or paymaster method) to the chain's gas provider."""
    failure_message = "Pimlico call failed"

    async def operation() -> Response:
        body = await _read_body(request, JsonRpcProxyBody)
        rpc, endpoint = normalize_rpc_request(
            body.chainKey, body.method, body.params, registry, ProviderPurpose.GAS_PRICE
        )
        log.debug("[HTTP][PIMLICO][FORWARD] chain=%s method=%s", rpc.chain_key.value, rpc.method)
        raw = await dispatcher.forward_json_rpc(endpoint, rpc.method, rpc.params, failure_message=failure_message)
        return relay_success(raw)

    return await _guarded("PIMLICO", failure_message, operation)


@router.get("/pimlico", tags=["gas"])  # type: ignore[misc]
async def get_gas_price(
        chain: Optional[str] = Query(None),
        registry: ProviderRegistry = Depends(get_provider_registry),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    """Return the gas provider's user-operation gas price for a chain."""
    failure_message = "Gas price fetch failed"

    async def operation() -> Response:
        endpoint = normalize_gas_price_request(chain, registry)
        raw = await dispatcher.forward_json_rpc(endpoint, GAS_PRICE_METHOD, [], failure_message=failure_message)
        return relay_success(raw)

    return await _guarded("GAS", failure_message, operation)


@router.get("/transactions/scan", tags=["explorer"])  # type: ignore[misc]
async def scan_transactions(
        chain: Optional[str] = Query(None),
        address: Optional[str] = Query(None),
        token: Optional[str] = Query(None),
        startblock: Optional[str] = Query(None),
        endblock: Optional[str] = Query(None),
        action: Optional[str] = Query(None),
        registry: ProviderRegistry = Depends(get_provider_registry),
        resolver: TokenAddressResolver = Depends(get_token_resolver),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    """
    Query the chain's block explorer for an account's transfers, newest first.

    Defaults to USDC token transfers over the full block range.
    """
    failure_message = "Explorer API call failed"

    async def operation() -> Response:
        query = {
            "chain": chain,
            "address": address,
            "token": token,
            "startblock": startblock,
            "endblock": endblock,
            "action": action,
        }
        scan, endpoint = normalize_explorer_request(query, registry, resolver)
        raw = await dispatcher.forward_explorer_query(endpoint, scan, failure_message=failure_message)
        return relay_success(raw)

    return await _guarded("EXPLORER", failure_message, operation)


# ---- tracker routes --------------------------------------------------------

@router.get("/price-feeds/{pair}", tags=["tracker"])  # type: ignore[misc]
async def get_price_feed(
        pair: str,
        authorization: Optional[str] = Header(None),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    failure_message = "Price feeds API call failed"

    async def operation() -> Response:
        bearer = normalize_bearer(authorization)
        require_path_value(pair, "Pair parameter required")
        return await _forward_tracker(
            dispatcher,
            method="GET",
            path=f"/price-feeds/{encode_path_segment(pair)}",
            bearer=bearer,
            failure_message=failure_message,
        )

    return await _guarded("PRICE_FEEDS", failure_message, operation)


@router.get("/users/{wallet_address}/asset-history", tags=["tracker"])  # type: ignore[misc]
async def get_asset_history(
        wallet_address: str,
        interval: Optional[str] = Query(None),
        authorization: Optional[str] = Header(None),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    failure_message = "Get asset history API call failed"

    async def operation() -> Response:
        bearer = normalize_bearer(authorization)
        require_path_value(wallet_address, "Wallet address is required")
        return await _forward_tracker(
            dispatcher,
            method="GET",
            path=f"/users/{encode_path_segment(wallet_address)}/asset-history",
            bearer=bearer,
            params={"interval": interval or "day"},
            failure_message=failure_message,
        )

    return await _guarded("ASSET_HISTORY", failure_message, operation)


@router.get("/wallets/{wallet_address}/transactions", tags=["tracker"])  # type: ignore[misc]
async def get_wallet_transactions(
        wallet_address: str,
        page_size: Optional[str] = Query(None),
        page_number: Optional[str] = Query(None),
        authorization: Optional[str] = Header(None),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    failure_message = "Get wallet transactions API call failed"

    async def operation() -> Response:
        bearer = normalize_bearer(authorization)
        require_path_value(wallet_address, "Wallet address is required")
        return await _forward_tracker(
            dispatcher,
            method="GET",
            path=f"/wallets/{encode_path_segment(wallet_address)}/transactions",
            bearer=bearer,
            params={"page_size": page_size or "10", "page_number": page_number or "1"},
            failure_message=failure_message,
        )

    return await _guarded("WALLET_TRANSACTIONS", failure_message, operation)


@router.get("/users/{wallet_address}/rewards", tags=["tracker"])  # type: ignore[misc]
async def get_rewards(
        wallet_address: str,
        authorization: Optional[str] = Header(None),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    failure_message = "Get rewards API call failed"

    async def operation() -> Response:
        bearer = normalize_bearer(authorization)
        require_path_value(wallet_address, "Wallet address is required")
        return await _forward_tracker(
            dispatcher,
            method="GET",
            path=f"/users/{encode_path_segment(wallet_address)}/rewards",
            bearer=bearer,
            failure_message=failure_message,
        )

    return await _guarded("REWARDS", failure_message, operation)


@router.get("/vaults/{vault_address}/apy-history", tags=["tracker"])  # type: ignore[misc]
async def get_vault_apy_history(
        vault_address: str,
        authorization: Optional[str] = Header(None),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    failure_message = "Vault APY history API call failed"

    async def operation() -> Response:
        bearer = normalize_bearer(authorization)
        require_path_value(vault_address, "Vault address parameter required")
        return await _forward_tracker(
            dispatcher,
            method="GET",
            path=f"/vaults/{encode_path_segment(vault_address)}/apy-history",
            bearer=bearer,
            failure_message=failure_message,
        )

    return await _guarded("VAULT_APY", failure_message, operation)


@router.post("/users/register", tags=["tracker"])  # type: ignore[misc]
async def register_user(
        request: Request,
        authorization: Optional[str] = Header(None),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    failure_message = "User registration API call failed"

    async def operation() -> Response:
        bearer = normalize_bearer(authorization)
        body = await _read_body(request, RegisterUserBody)
        if not body.wallet_address or not body.username:
            raise MissingField("wallet_address and username are required")

        payload: Dict[str, Any] = {
            "wallet_address": body.wallet_address,
            "username": body.username.strip(),
        }
        if body.referral_code:
            payload["referral_code"] = body.referral_code

        return await _forward_tracker(
            dispatcher,
            method="POST",
            path="/users/register",
            bearer=bearer,
            json_body=payload,
            failure_message=failure_message,
        )

    return await _guarded("REGISTER", failure_message, operation)


@router.post("/users/validate-referral", tags=["tracker"])  # type: ignore[misc]
async def validate_referral(
        request: Request,
        authorization: Optional[str] = Header(None),
        dispatcher: UpstreamDispatcher = Depends(get_dispatcher),
) -> Response:
    failure_message = "Validate referral API call failed"

    async def operation() -> Response:
        bearer = normalize_bearer(authorization)
        body = await _read_body(request, ValidateReferralBody)
        if not body.referral_code:
            raise MissingField("referral_code is required")
        return await _forward_tracker(
            dispatcher,
            method="POST",
            path="/users/validate-referral",
            bearer=bearer,
            json_body={"referral_code": body.referral_code},
            failure_message=failure_message,
        )

    return await _guarded("VALIDATE_REFERRAL", failure_message, operation)


# ---- introspection ---------------------------------------------------------

@router.get("/chains", tags=["registry"])  # type: ignore[misc]
def list_chains(
        registry: ProviderRegistry = Depends(get_provider_registry),
        resolver: TokenAddressResolver = Depends(get_token_resolver),
) -> ChainsResponse:
    """Return every supported chain with its provider purposes and resolvable tokens."""
    summaries = []
    for chain_key in registry.supported_chains():
        purposes = [p.value for p in ProviderPurpose if registry.is_supported(chain_key, p)]
        summaries.append(
            ChainSummary(
                chainKey=chain_key.value,
                purposes=purposes,
                tokens=resolver.supported_tokens(chain_key),
                bridgedUsdc=resolver.bridged_variant(chain_key),
            )
        )
    return ChainsResponse(chains=summaries)
