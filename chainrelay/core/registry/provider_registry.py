from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from chainrelay.core.errors import UnsupportedChain
from chainrelay.core.structures.structures import ChainKey, ProviderEndpoint, ProviderPurpose
from chainrelay.logging.logger import get_logger

log = get_logger(__name__)

_RPC = ProviderPurpose.RPC
_GAS = ProviderPurpose.GAS_PRICE
_EXPLORER = ProviderPurpose.EXPLORER

DEFAULT_PROVIDER_ENDPOINTS: Tuple[ProviderEndpoint, ...] = (
    # RPC aggregator (key lives in the path)
    ProviderEndpoint(ChainKey.SCROLL, _RPC, "https://scroll-mainnet.g.alchemy.com/v2/{api_key}", "ALCHEMY_API_KEY", "Alchemy"),
    ProviderEndpoint(ChainKey.BASE, _RPC, "https://base-mainnet.g.alchemy.com/v2/{api_key}", "ALCHEMY_API_KEY", "Alchemy"),
    ProviderEndpoint(ChainKey.SCROLL_SEPOLIA, _RPC, "https://sepolia-rpc.scroll.io/", None, "Scroll Sepolia"),
    ProviderEndpoint(ChainKey.POLYGON, _RPC, "https://polygon-mainnet.g.alchemy.com/v2/{api_key}", "ALCHEMY_API_KEY", "Alchemy"),
    ProviderEndpoint(ChainKey.ARBITRUM, _RPC, "https://arb-mainnet.g.alchemy.com/v2/{api_key}", "ALCHEMY_API_KEY", "Alchemy"),
    ProviderEndpoint(ChainKey.OPTIMISM, _RPC, "https://opt-mainnet.g.alchemy.com/v2/{api_key}", "ALCHEMY_API_KEY", "Alchemy"),
    # Gas-price / bundler provider
    ProviderEndpoint(ChainKey.SCROLL, _GAS, "https://api.pimlico.io/v2/scroll/rpc", "PIMLICO_API_KEY", "Pimlico"),
    ProviderEndpoint(ChainKey.BASE, _GAS, "https://api.pimlico.io/v2/base/rpc", "PIMLICO_API_KEY", "Pimlico"),
    ProviderEndpoint(ChainKey.SCROLL_SEPOLIA, _GAS, "https://api.pimlico.io/v2/scroll-sepolia-testnet/rpc", "PIMLICO_API_KEY", "Pimlico"),
    ProviderEndpoint(ChainKey.POLYGON, _GAS, "https://api.pimlico.io/v2/polygon/rpc", "PIMLICO_API_KEY", "Pimlico"),
    ProviderEndpoint(ChainKey.ARBITRUM, _GAS, "https://api.pimlico.io/v2/arbitrum/rpc", "PIMLICO_API_KEY", "Pimlico"),
    ProviderEndpoint(ChainKey.OPTIMISM, _GAS, "https://api.pimlico.io/v2/optimism/rpc", "PIMLICO_API_KEY", "Pimlico"),
    # Block explorers (Etherscan-compatible, one key per chain)
    ProviderEndpoint(ChainKey.SCROLL, _EXPLORER, "https://api.scrollscan.com/api", "SCROLLSCAN_API_KEY", "scroll"),
    ProviderEndpoint(ChainKey.BASE, _EXPLORER, "https://api.basescan.org/api", "BASESCAN_API_KEY", "base"),
    ProviderEndpoint(ChainKey.POLYGON, _EXPLORER, "https://api.polygonscan.com/api", "POLYGONSCAN_API_KEY", "polygon"),
    ProviderEndpoint(ChainKey.ARBITRUM, _EXPLORER, "https://api.arbiscan.io/api", "ARBISCAN_API_KEY", "arbitrum"),
    ProviderEndpoint(ChainKey.OPTIMISM, _EXPLORER, "https://api-optimistic.etherscan.io/api", "OPTIMISTIC_API_KEY", "optimism"),
)


class ProviderRegistry:
    """
    Read-only lookup from (chain, purpose) to the upstream endpoint serving it.

    Built once from a static table. Adding a chain only needs a new
    ProviderEndpoint row; no dispatch code knows about individual chains.
    """

    def __init__(self, endpoints: Iterable[ProviderEndpoint] = DEFAULT_PROVIDER_ENDPOINTS) -> None:
        table: Dict[Tuple[ChainKey, ProviderPurpose], ProviderEndpoint] = {}
        for endpoint in endpoints:
            key = (endpoint.chain_key, endpoint.purpose)
            if key in table:
                raise ValueError(
                    f"Duplicate provider endpoint for chain={endpoint.chain_key.value} purpose={endpoint.purpose.value}"
                )
            table[key] = endpoint
        self._table = table

    def resolve_endpoint(self, chain_key: ChainKey | str | None, purpose: ProviderPurpose) -> ProviderEndpoint:
        """
        Return the endpoint serving `purpose` on `chain_key`.

        Raises:
            UnsupportedChain: when the chain is unknown or has no endpoint for the purpose.
        """
        parsed = chain_key if isinstance(chain_key, ChainKey) else ChainKey.parse(chain_key)
        endpoint = self._table.get((parsed, purpose)) if parsed is not None else None
        if endpoint is None:
            log.debug("[REGISTRY][PROVIDER] Unsupported chain=%r purpose=%s", chain_key, purpose.value)
            raise UnsupportedChain()
        return endpoint

    def is_supported(self, chain_key: ChainKey | str | None, purpose: ProviderPurpose) -> bool:
        parsed = chain_key if isinstance(chain_key, ChainKey) else ChainKey.parse(chain_key)
        return parsed is not None and (parsed, purpose) in self._table

    def supported_chains(self, purpose: Optional[ProviderPurpose] = None) -> List[ChainKey]:
        """Chains with at least one endpoint (or one for `purpose`), in declaration order."""
        seen: List[ChainKey] = []
        for chain_key, endpoint_purpose in self._table:
            if purpose is not None and endpoint_purpose != purpose:
                continue
            if chain_key not in seen:
                seen.append(chain_key)
        return seen

    def endpoints(self) -> List[ProviderEndpoint]:
        return list(self._table.values())
