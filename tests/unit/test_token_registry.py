import pytest

from chainrelay.core.errors import UnsupportedToken
from chainrelay.core.registry.token_registry import DEFAULT_TOKEN_ADDRESSES, TokenAddressResolver
from chainrelay.core.structures.structures import ChainKey

SCROLL_BRIDGED_USDC = "0x06eFdBFf2a14a7c8E15944D1F4A48F9F95F663A4"


def test_lookup_is_case_insensitive():
    resolver = TokenAddressResolver()
    assert resolver.resolve_token_address("base", "USDC") == resolver.resolve_token_address("base", "usdc")
    assert resolver.resolve_token_address("base", " Usdc ") == "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"


def test_every_table_entry_resolves_deterministically():
    resolver = TokenAddressResolver()
    for entry in DEFAULT_TOKEN_ADDRESSES:
        first = resolver.resolve_token_address(entry.chain_key, entry.token_symbol.upper())
        second = resolver.resolve_token_address(entry.chain_key.value, entry.token_symbol)
        assert first == second == entry.contract_address


def test_bare_symbol_returns_primary_contract_on_chains_with_bridged_variant():
    resolver = TokenAddressResolver()
    native = resolver.resolve_token_address(ChainKey.ARBITRUM, "usdc")
    bridged = resolver.resolve_token_address(ChainKey.ARBITRUM, "bridgedUSDC")
    assert native == "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"
    assert bridged == "0xFF970A61A04b1cA14834A43f5dE4533eBDDB5CC8"
    assert resolver.bridged_variant(ChainKey.ARBITRUM) == bridged


def test_scroll_usdc_is_the_bridged_contract():
    resolver = TokenAddressResolver()
    assert resolver.resolve_token_address("scroll", "usdc") == SCROLL_BRIDGED_USDC
    assert resolver.bridged_variant(ChainKey.SCROLL) is None


@pytest.mark.parametrize(
    "chain,symbol",
    [
        ("scroll", "bridgedusdc"),
        ("base", "dai"),
        ("scrollSepolia", "usdc"),
        ("ethereum", "usdc"),
        ("base", ""),
    ],
)
def test_missing_pair_fails_without_fallback(chain, symbol):
    resolver = TokenAddressResolver()
    with pytest.raises(UnsupportedToken) as exc_info:
        resolver.resolve_token_address(chain, symbol)
    assert exc_info.value.status_code == 400


def test_error_message_names_token_and_chain():
    with pytest.raises(UnsupportedToken) as exc_info:
        TokenAddressResolver().resolve_token_address("base", "DAI")
    assert exc_info.value.message == "Token DAI not supported on base"


def test_supported_tokens_lists_symbols():
    assert TokenAddressResolver().supported_tokens(ChainKey.POLYGON) == ["bridgedusdc", "usdc", "usdt", "weth"]
