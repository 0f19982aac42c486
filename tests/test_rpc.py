"""
JSON-RPC client, contract readers and validator factory tests.

A node is simulated with ``httpx.MockTransport``: each eth_call is routed on
its 4-byte selector.

Run with:
    pytest tests/test_rpc.py -v
"""

import dataclasses
import json

import httpx
import pytest
from eth_abi import decode, encode

from orderguard.config import OrderGuardConfig
from orderguard.exceptions import ConfigurationError, RpcError
from orderguard.exchange.errors import ExchangeContractErr, OrderValidationError
from orderguard.exchange.hashing import get_order_hash_hex
from orderguard.exchange.signature import ContractSignatureVerifier, LocalSignatureVerifier
from orderguard.factory import create_rpc_client, create_validator
from orderguard.rpc import (
    ExchangeContract,
    JsonRpcClient,
    TokenContract,
    compute_function_selector,
    encode_function_call,
    format_block_tag,
)

from conftest import EXCHANGE, FEE_TOKEN, MAKER_TOKEN, PROXY

RPC_URL = "http://node.test:8545"


class FakeNode:
    """Answers eth_call by selector; records every request body."""

    def __init__(self):
        self.handlers = {}
        self.requests = []

    def on(self, function_signature, handler):
        self.handlers[compute_function_selector(function_signature)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        call, _block_tag = body["params"]
        data = bytes.fromhex(call["data"][2:])
        handler = self.handlers.get(data[:4])
        if handler is None:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": 3, "message": "execution reverted"}}
            )
        result = handler(call["to"], data[4:])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "0x" + result.hex()})


@pytest.fixture
def node():
    return FakeNode()


@pytest.fixture
def rpc(node):
    return JsonRpcClient(RPC_URL, httpx.AsyncClient(transport=httpx.MockTransport(node)))


# ============================================================================
# ABI helpers
# ============================================================================


class TestAbiEncoding:

    def test_known_selectors(self):
        assert compute_function_selector("balanceOf(address)").hex() == "70a08231"
        assert compute_function_selector("transfer(address,uint256)").hex() == "a9059cbb"

    def test_no_argument_call(self):
        data = encode_function_call("TOKEN_TRANSFER_PROXY_CONTRACT()")
        assert len(data) == 4

    def test_arguments_are_abi_encoded(self):
        data = encode_function_call("allowance(address,address)", MAKER_TOKEN, PROXY)
        assert data[:4] == compute_function_selector("allowance(address,address)")
        owner, spender = decode(["address", "address"], data[4:])
        assert (owner.lower(), spender.lower()) == (MAKER_TOKEN, PROXY)
        assert len(data) == 4 + 64

    @pytest.mark.parametrize("block_tag,expected", [
        (None, "latest"),
        ("pending", "pending"),
        (100, "0x64"),
        (0, "0x0"),
    ])
    def test_block_tag(self, block_tag, expected):
        assert format_block_tag(block_tag) == expected

    def test_negative_block_number(self):
        with pytest.raises(ValueError):
            format_block_tag(-1)


# ============================================================================
# JSON-RPC client
# ============================================================================


class TestJsonRpcClient:

    @pytest.mark.asyncio
    async def test_error_object_raises(self, rpc):
        with pytest.raises(RpcError) as exc:
            await rpc.eth_call(EXCHANGE, b"\xde\xad\xbe\xef")
        assert exc.value.code == 3

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502))
        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await JsonRpcClient(RPC_URL, client).call("eth_blockNumber", [])

    @pytest.mark.asyncio
    async def test_request_ids_increase(self, rpc, node):
        node.on("filled(bytes32)", lambda to, args: encode(["uint256"], [0]))
        exchange = ExchangeContract(rpc, EXCHANGE)
        await exchange.get_filled_taker_amount("0x" + "00" * 32)
        await exchange.get_filled_taker_amount("0x" + "00" * 32)
        assert [r["id"] for r in node.requests] == [1, 2]
        assert all(r["method"] == "eth_call" for r in node.requests)


# ============================================================================
# Contract readers
# ============================================================================


class TestExchangeContract:

    @pytest.mark.asyncio
    async def test_unavailable_amount(self, rpc, node):
        order_hash = "0x" + "ab" * 32
        seen = []

        def unavailable(to, args):
            seen.append((to, decode(["bytes32"], args)[0]))
            return encode(["uint256"], [150])

        node.on("getUnavailableTakerTokenAmount(bytes32)", unavailable)
        exchange = ExchangeContract(rpc, EXCHANGE)

        assert await exchange.get_unavailable_taker_amount(order_hash, block_tag=100) == 150
        assert seen == [(EXCHANGE, bytes.fromhex("ab" * 32))]
        assert node.requests[0]["params"][1] == "0x64"

    @pytest.mark.asyncio
    async def test_filled_and_cancelled(self, rpc, node):
        node.on("filled(bytes32)", lambda to, args: encode(["uint256"], [7]))
        node.on("cancelled(bytes32)", lambda to, args: encode(["uint256"], [3]))
        exchange = ExchangeContract(rpc, EXCHANGE)
        assert await exchange.get_filled_taker_amount("0x" + "01" * 32) == 7
        assert await exchange.get_cancelled_taker_amount("0x" + "01" * 32) == 3

    @pytest.mark.asyncio
    async def test_is_valid_signature(self, rpc, node, maker):
        seen = []

        def is_valid(to, args):
            seen.append(decode(["address", "bytes32", "uint8", "bytes32", "bytes32"], args))
            return encode(["bool"], [True])

        node.on("isValidSignature(address,bytes32,uint8,bytes32,bytes32)", is_valid)
        exchange = ExchangeContract(rpc, EXCHANGE)
        assert await exchange.is_valid_signature(
            maker, "0x" + "ab" * 32, 28, "0x" + "11" * 32, "0x" + "22" * 32
        )
        signer, _, v, r, _ = seen[0]
        assert signer.lower() == maker.lower()
        assert v == 28
        assert r == bytes.fromhex("11" * 32)

    @pytest.mark.asyncio
    async def test_order_hash_and_rounding(self, rpc, node, make_order):
        order = make_order()
        local_hash = get_order_hash_hex(order)
        node.on(
            "getOrderHash(address[5],uint256[6])",
            lambda to, args: encode(["bytes32"], [bytes.fromhex(local_hash[2:])]),
        )
        node.on("isRoundingError(uint256,uint256,uint256)", lambda to, args: encode(["bool"], [False]))
        exchange = ExchangeContract(rpc, EXCHANGE)
        assert await exchange.get_order_hash(order) == local_hash
        assert await exchange.is_rounding_error(100, 200, 100) is False

    @pytest.mark.asyncio
    async def test_protocol_addresses(self, rpc, node):
        node.on("ZRX_TOKEN_CONTRACT()", lambda to, args: encode(["address"], [FEE_TOKEN]))
        node.on("TOKEN_TRANSFER_PROXY_CONTRACT()", lambda to, args: encode(["address"], [PROXY]))
        exchange = ExchangeContract(rpc, EXCHANGE)
        assert await exchange.get_fee_token_address() == FEE_TOKEN
        assert await exchange.get_token_transfer_proxy_address() == PROXY

    @pytest.mark.asyncio
    async def test_revert_raises(self, rpc):
        with pytest.raises(RpcError):
            await ExchangeContract(rpc, EXCHANGE).get_filled_taker_amount("0x" + "00" * 32)


class TestTokenContract:

    @pytest.mark.asyncio
    async def test_balance_and_allowance(self, rpc, node, maker):
        calls = []

        def balance_of(to, args):
            calls.append(("balanceOf", to))
            return encode(["uint256"], [10**18])

        def allowance(to, args):
            owner, spender = decode(["address", "address"], args)
            calls.append(("allowance", to, owner.lower(), spender.lower()))
            return encode(["uint256"], [5])

        node.on("balanceOf(address)", balance_of)
        node.on("allowance(address,address)", allowance)
        tokens = TokenContract(rpc)

        assert await tokens.get_balance(MAKER_TOKEN, maker) == 10**18
        assert await tokens.get_allowance(MAKER_TOKEN, maker, PROXY) == 5
        assert calls == [
            ("balanceOf", MAKER_TOKEN),
            ("allowance", MAKER_TOKEN, maker.lower(), PROXY),
        ]


# ============================================================================
# Factory
# ============================================================================


def _config(**exchange):
    return OrderGuardConfig.from_dict({"exchange": dict({"address": EXCHANGE}, **exchange)})


class TestCreateValidator:

    @pytest.mark.asyncio
    async def test_addresses_from_contract(self, rpc, node):
        node.on("ZRX_TOKEN_CONTRACT()", lambda to, args: encode(["address"], [FEE_TOKEN]))
        node.on("TOKEN_TRANSFER_PROXY_CONTRACT()", lambda to, args: encode(["address"], [PROXY]))
        validator = await create_validator(_config(), rpc)
        assert validator.fee_token_address == FEE_TOKEN
        assert validator.token_transfer_proxy_address == PROXY

    @pytest.mark.asyncio
    async def test_configured_addresses_skip_reads(self, rpc, node):
        validator = await create_validator(_config(token_transfer_proxy=PROXY, fee_token=FEE_TOKEN), rpc)
        assert validator.fee_token_address == FEE_TOKEN
        assert node.requests == []

    @pytest.mark.asyncio
    async def test_signature_strategy(self, rpc):
        config = _config(token_transfer_proxy=PROXY, fee_token=FEE_TOKEN)
        validator = await create_validator(config, rpc)
        assert isinstance(validator._signature_verifier, LocalSignatureVerifier)

        config.validation.signature_strategy = "contract"
        validator = await create_validator(config, rpc)
        assert isinstance(validator._signature_verifier, ContractSignatureVerifier)

    @pytest.mark.asyncio
    async def test_invalid_config(self, rpc):
        with pytest.raises(ConfigurationError):
            await create_validator(OrderGuardConfig(), rpc)

    @pytest.mark.asyncio
    async def test_end_to_end_fill(self, rpc, node, make_order, sign, taker, monkeypatch):
        node.on("getUnavailableTakerTokenAmount(bytes32)", lambda to, args: encode(["uint256"], [0]))
        node.on("balanceOf(address)", lambda to, args: encode(["uint256"], [10**20]))
        node.on("allowance(address,address)", lambda to, args: encode(["uint256"], [10**20]))
        validator = await create_validator(_config(token_transfer_proxy=PROXY, fee_token=FEE_TOKEN), rpc)
        monkeypatch.setattr(validator, "_clock", lambda: 1_700_000_000)

        assert await validator.validate_fill_order(sign(make_order()), 100, taker) == 100

    @pytest.mark.asyncio
    @pytest.mark.parametrize("v", [-1, 300])
    async def test_contract_strategy_rejects_out_of_range_v(
        self, rpc, node, make_order, sign, taker, monkeypatch, v
    ):
        config = _config(token_transfer_proxy=PROXY, fee_token=FEE_TOKEN)
        config.validation.signature_strategy = "contract"
        validator = await create_validator(config, rpc)
        monkeypatch.setattr(validator, "_clock", lambda: 1_700_000_000)
        signed = sign(make_order())
        bad = dataclasses.replace(signed, ec_signature=dataclasses.replace(signed.ec_signature, v=v))

        with pytest.raises(OrderValidationError) as exc:
            await validator.validate_fill_order(bad, 100, taker)
        assert exc.value.kind == ExchangeContractErr.InvalidSignature
        assert node.requests == []


class TestCreateRpcClient:

    def _config(self, **rpc):
        return OrderGuardConfig.from_dict({"exchange": {"address": EXCHANGE}, "rpc": rpc})

    @pytest.mark.asyncio
    async def test_uses_rpc_section(self, node):
        node.on("filled(bytes32)", lambda to, args: encode(["uint256"], [4]))
        client = create_rpc_client(
            self._config(url=RPC_URL, timeout=2.5), transport=httpx.MockTransport(node)
        )
        try:
            assert client.url == RPC_URL
            assert client.client.timeout == httpx.Timeout(2.5)
            exchange = ExchangeContract(client, EXCHANGE)
            assert await exchange.get_filled_taker_amount("0x" + "00" * 32) == 4
        finally:
            await client.client.aclose()

    def test_invalid_rpc_section(self):
        with pytest.raises(ConfigurationError):
            create_rpc_client(self._config(url="ws://node.test", timeout=1))
        with pytest.raises(ConfigurationError):
            create_rpc_client(self._config(url=RPC_URL, timeout=0))
