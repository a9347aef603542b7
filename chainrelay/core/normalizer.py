from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from chainrelay.core.errors import MissingCredential, MissingField
from chainrelay.core.registry.provider_registry import ProviderRegistry
from chainrelay.core.registry.token_registry import TokenAddressResolver
from chainrelay.core.structures.structures import (
    ExplorerScanRequest,
    ProviderEndpoint,
    ProviderPurpose,
    RpcProxyRequest,
)

DEFAULT_SCAN_TOKEN: str = "usdc"
DEFAULT_START_BLOCK: str = "0"
DEFAULT_END_BLOCK: str = "99999999"
DEFAULT_SCAN_ACTION: str = "tokentx"

_BEARER_PREFIX: str = "Bearer "


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_rpc_request(
        chain_key: Optional[str],
        method: Optional[str],
        params: Any,
        registry: ProviderRegistry,
        purpose: ProviderPurpose = ProviderPurpose.RPC,
) -> Tuple[RpcProxyRequest, ProviderEndpoint]:
    """
    Validate a JSON-RPC forward and resolve its provider endpoint.

    `params` must be present; an empty list is valid. Nothing inside it is inspected.
    """
    if not _clean(chain_key):
        raise MissingField("chainKey is required")
    endpoint = registry.resolve_endpoint(chain_key, purpose)
    if not _clean(method):
        raise MissingField("method is required")
    if params is None:
        raise MissingField("params is required")
    if not isinstance(params, (list, dict)):
        raise MissingField("params must be an array or an object")
    return RpcProxyRequest(chain_key=endpoint.chain_key, method=method.strip(), params=params), endpoint


def normalize_gas_price_request(chain: Optional[str], registry: ProviderRegistry) -> ProviderEndpoint:
    if not _clean(chain):
        raise MissingField("Chain parameter required")
    return registry.resolve_endpoint(chain, ProviderPurpose.GAS_PRICE)


def normalize_explorer_request(
        query: Mapping[str, Optional[str]],
        registry: ProviderRegistry,
        resolver: TokenAddressResolver,
) -> Tuple[ExplorerScanRequest, ProviderEndpoint]:
    """
    Validate an explorer scan, apply defaults and resolve the token contract.

    Defaults: token=usdc, startblock=0, endblock=99999999, action=tokentx.
    The token is resolved even for actions that do not filter by contract,
    so an unknown token is always rejected.
    """
    chain = _clean(query.get("chain"))
    address = _clean(query.get("address"))
    if not chain or not address:
        raise MissingField("Chain and address parameters required")

    endpoint = registry.resolve_endpoint(chain, ProviderPurpose.EXPLORER)

    token = _clean(query.get("token")) or DEFAULT_SCAN_TOKEN
    contract_address = resolver.resolve_token_address(endpoint.chain_key, token)

    request = ExplorerScanRequest(
        chain_key=endpoint.chain_key,
        address=address,
        token=token,
        contract_address=contract_address,
        startblock=_clean(query.get("startblock")) or DEFAULT_START_BLOCK,
        endblock=_clean(query.get("endblock")) or DEFAULT_END_BLOCK,
        action=_clean(query.get("action")) or DEFAULT_SCAN_ACTION,
    )
    return request, endpoint


def normalize_bearer(authorization: Optional[str]) -> str:
    """Return the Authorization header verbatim when it carries a bearer token."""
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise MissingCredential()
    return authorization


def require_path_value(value: Optional[str], message: str) -> str:
    if not _clean(value):
        raise MissingField(message)
    return value
