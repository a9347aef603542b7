from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from chainrelay.core.utils.format_utils import _tail

JsonRpcParams = Union[List[Any], Dict[str, Any]]


class ChainKey(str, Enum):
    """Logical network identifiers, spelled exactly as the UI sends them."""

    SCROLL = "scroll"
    BASE = "base"
    SCROLL_SEPOLIA = "scrollSepolia"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["ChainKey"]:
        """Return the matching ChainKey, or None for unknown/empty input."""
        if not raw:
            return None
        try:
            return cls(raw.strip())
        except ValueError:
            return None


class ProviderPurpose(str, Enum):
    RPC = "rpc"
    GAS_PRICE = "gas-price"
    EXPLORER = "explorer"


@dataclass(frozen=True)
class ProviderEndpoint:
    """
    One upstream provider endpoint for a (chain, purpose) pair.

    Attributes:
        chain_key: Network served by the endpoint.
        purpose: What the endpoint is used for.
        base_url: Endpoint URL; may contain an `{api_key}` placeholder for
            providers that expect the key inside the path.
        credential_env_var: Name of the environment variable holding the key,
            or None for public endpoints.
        provider_label: Name used in configuration error messages.
    """

    chain_key: ChainKey
    purpose: ProviderPurpose
    base_url: str
    credential_env_var: Optional[str] = None
    provider_label: str = ""

    @property
    def requires_credential(self) -> bool:
        return self.credential_env_var is not None

    @property
    def embeds_credential_in_path(self) -> bool:
        return "{api_key}" in self.base_url


@dataclass(frozen=True)
class TokenAddressEntry:
    chain_key: ChainKey
    token_symbol: str
    contract_address: str

    def __str__(self) -> str:
        return f"[chain={self.chain_key.value} token={self.token_symbol} address=…{_tail(self.contract_address)}]"


@dataclass(frozen=True)
class RpcProxyRequest:
    """Validated JSON-RPC forward: chain, method and params as supplied by the caller."""

    chain_key: ChainKey
    method: str
    params: JsonRpcParams = field(default_factory=list)


@dataclass(frozen=True)
class ExplorerScanRequest:
    """Validated explorer account query with its resolved token contract."""

    chain_key: ChainKey
    address: str
    token: str
    contract_address: str
    startblock: str = "0"
    endblock: str = "99999999"
    action: str = "tokentx"

    @property
    def requires_token_filter(self) -> bool:
        return self.action == "tokentx"


@dataclass(frozen=True)
class TrackerRequest:
    """Validated forward to the internal tracker service."""

    method: str
    path: str
    bearer: str
    params: Optional[Dict[str, str]] = None
    json_body: Optional[Dict[str, Any]] = None
