from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from chainrelay.core.errors import UnsupportedToken
from chainrelay.core.structures.structures import ChainKey, TokenAddressEntry
from chainrelay.logging.logger import get_logger

log = get_logger(__name__)

BRIDGED_USDC_SYMBOL: str = "bridgedusdc"


def _entries(chain_key: ChainKey, addresses: Dict[str, str]) -> List[TokenAddressEntry]:
    return [TokenAddressEntry(chain_key, symbol, address) for symbol, address in addresses.items()]


# On Scroll the only USDC is the bridged USDC.e, so the bare symbol points at it.
DEFAULT_TOKEN_ADDRESSES: Tuple[TokenAddressEntry, ...] = tuple(
    _entries(ChainKey.SCROLL, {
        "usdc": "0x06eFdBFf2a14a7c8E15944D1F4A48F9F95F663A4",
        "usdt": "0xf55bec9cafdbe8730f096aa55dad6d22d44099df",
        "weth": "0x5300000000000000000000000000000000000004",
    })
    + _entries(ChainKey.BASE, {
        "usdc": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        "usdt": "0xfde4C96c8593536E31F229EA8f37b2ADa2699bb2",
        "weth": "0x4200000000000000000000000000000000000006",
    })
    + _entries(ChainKey.POLYGON, {
        "usdc": "0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
        "usdt": "0xc2132D05D31c914a87C6611C10748AEb04B58e8F",
        "weth": "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619",
        BRIDGED_USDC_SYMBOL: "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174",
    })
    + _entries(ChainKey.ARBITRUM, {
        "usdc": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
        "usdt": "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9",
        "weth": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
        BRIDGED_USDC_SYMBOL: "0xFF970A61A04b1cA14834A43f5dE4533eBDDB5CC8",
    })
    + _entries(ChainKey.OPTIMISM, {
        "usdc": "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
        "usdt": "0x94b008aA00579c1307B0EF2c499aD98a8ce58e58",
        "weth": "0x4200000000000000000000000000000000000006",
        BRIDGED_USDC_SYMBOL: "0x7F5c764cBc14f9669B88837ca1490cCa17c31607",
    })
)


def _normalize_symbol(raw_symbol: Optional[str]) -> str:
    """Lowercase and trim a token symbol, matching explorer API conventions."""
    if not raw_symbol:
        return ""
    return raw_symbol.strip().lower()


class TokenAddressResolver:
    """
    Read-only per-chain mapping from token symbol to contract address.

    A (chain, symbol) pair resolves to exactly one address or fails; there is
    no fallback to another chain or to a default token.
    """

    def __init__(self, entries: Iterable[TokenAddressEntry] = DEFAULT_TOKEN_ADDRESSES) -> None:
        table: Dict[ChainKey, Dict[str, str]] = {}
        for entry in entries:
            symbol = _normalize_symbol(entry.token_symbol)
            chain_tokens = table.setdefault(entry.chain_key, {})
            if symbol in chain_tokens:
                raise ValueError(f"Duplicate token entry {entry}")
            chain_tokens[symbol] = entry.contract_address
        self._table = table

    def resolve_token_address(self, chain_key: ChainKey | str, token_symbol: Optional[str]) -> str:
        """
        Return the contract address of `token_symbol` on `chain_key`.

        Raises:
            UnsupportedToken: when the chain has no entry for the symbol.
        """
        parsed = chain_key if isinstance(chain_key, ChainKey) else ChainKey.parse(chain_key)
        symbol = _normalize_symbol(token_symbol)
        chain_tokens = self._table.get(parsed, {}) if parsed is not None else {}
        address = chain_tokens.get(symbol)
        if address is None:
            chain_name = parsed.value if parsed is not None else str(chain_key)
            log.debug("[REGISTRY][TOKEN] No address for token=%r on chain=%s", token_symbol, chain_name)
            raise UnsupportedToken(f"Token {token_symbol} not supported on {chain_name}")
        return address

    def bridged_variant(self, chain_key: ChainKey) -> Optional[str]:
        """Return the bridged USDC address when the chain lists one separately."""
        return self._table.get(chain_key, {}).get(BRIDGED_USDC_SYMBOL)

    def supported_tokens(self, chain_key: ChainKey) -> List[str]:
        return sorted(self._table.get(chain_key, {}))
