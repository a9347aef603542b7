from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

JSON_RPC_VERSION: str = "2.0"
JSON_RPC_REQUEST_ID: int = 1

GAS_PRICE_METHOD: str = "pimlico_getUserOperationGasPrice"

EXPLORER_MODULE: str = "account"
EXPLORER_SORT_ORDER: str = "desc"
EXPLORER_APIKEY_PARAM: str = "apikey"


@dataclass(frozen=True)
class RawUpstreamResponse:
    """
    Upstream answer kept byte-for-byte for the relay.

    Attributes:
        status_code: HTTP status returned by the upstream.
        content: Raw response body, already checked to be valid JSON.
        payload: Parsed body, for logging and tests only.
    """

    status_code: int
    content: bytes
    payload: Any


def build_json_rpc_envelope(method: str, params: Any) -> Dict[str, Any]:
    """Wrap a caller's method/params in a JSON-RPC 2.0 request with the fixed id."""
    return {
        "jsonrpc": JSON_RPC_VERSION,
        "method": method,
        "params": params,
        "id": JSON_RPC_REQUEST_ID,
    }
