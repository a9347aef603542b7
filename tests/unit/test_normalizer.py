import pytest

from chainrelay.core.errors import MissingCredential, MissingField, UnsupportedChain, UnsupportedToken
from chainrelay.core.normalizer import (
    normalize_bearer,
    normalize_explorer_request,
    normalize_gas_price_request,
    normalize_rpc_request,
    require_path_value,
)
from chainrelay.core.registry.provider_registry import ProviderRegistry
from chainrelay.core.registry.token_registry import TokenAddressResolver
from chainrelay.core.structures.structures import ChainKey, ProviderPurpose


@pytest.fixture
def registry():
    return ProviderRegistry()


@pytest.fixture
def resolver():
    return TokenAddressResolver()


def test_rpc_request_accepts_empty_params(registry):
    rpc, endpoint = normalize_rpc_request("base", "eth_blockNumber", [], registry)
    assert rpc.chain_key == ChainKey.BASE
    assert rpc.params == []
    assert endpoint.purpose == ProviderPurpose.RPC


@pytest.mark.parametrize(
    "chain,method,params,error",
    [
        (None, "eth_blockNumber", [], MissingField),
        ("base", None, [], MissingField),
        ("base", "eth_blockNumber", None, MissingField),
        ("base", "eth_blockNumber", "0x1", MissingField),
        ("mainnet", "eth_blockNumber", [], UnsupportedChain),
    ],
)
def test_rpc_request_rejections(registry, chain, method, params, error):
    with pytest.raises(error):
        normalize_rpc_request(chain, method, params, registry)


def test_gas_price_request_requires_chain(registry):
    with pytest.raises(MissingField) as exc_info:
        normalize_gas_price_request(None, registry)
    assert exc_info.value.message == "Chain parameter required"
    assert normalize_gas_price_request("optimism", registry).purpose == ProviderPurpose.GAS_PRICE


def test_explorer_request_defaults(registry, resolver):
    scan, endpoint = normalize_explorer_request({"chain": "scroll", "address": "0xABC"}, registry, resolver)
    assert scan.token == "usdc"
    assert scan.startblock == "0"
    assert scan.endblock == "99999999"
    assert scan.action == "tokentx"
    assert scan.contract_address == "0x06eFdBFf2a14a7c8E15944D1F4A48F9F95F663A4"
    assert endpoint.base_url == "https://api.scrollscan.com/api"


@pytest.mark.parametrize("query", [{"chain": "scroll"}, {"address": "0xABC"}, {"chain": "", "address": ""}])
def test_explorer_request_requires_chain_and_address(registry, resolver, query):
    with pytest.raises(MissingField) as exc_info:
        normalize_explorer_request(query, registry, resolver)
    assert exc_info.value.message == "Chain and address parameters required"


def test_explorer_request_rejects_unknown_token_even_without_token_filter(registry, resolver):
    query = {"chain": "base", "address": "0xABC", "token": "shib", "action": "txlist"}
    with pytest.raises(UnsupportedToken):
        normalize_explorer_request(query, registry, resolver)


def test_explorer_request_rejects_test_network(registry, resolver):
    with pytest.raises(UnsupportedChain):
        normalize_explorer_request({"chain": "scrollSepolia", "address": "0xABC"}, registry, resolver)


@pytest.mark.parametrize("header", [None, "", "Basic abc", "bearer abc", "Token abc"])
def test_bearer_is_required(header):
    with pytest.raises(MissingCredential) as exc_info:
        normalize_bearer(header)
    assert exc_info.value.status_code == 401


def test_bearer_is_returned_verbatim():
    assert normalize_bearer("Bearer eyJ.abc.def") == "Bearer eyJ.abc.def"


def test_require_path_value():
    assert require_path_value("0xabc", "Wallet address is required") == "0xabc"
    with pytest.raises(MissingField):
        require_path_value("  ", "Wallet address is required")
