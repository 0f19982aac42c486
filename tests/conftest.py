"""
Shared fixtures: in-memory exchange/token state and a validator wired to it.
"""

from typing import Dict, List, Optional, Tuple

import pytest

from orderguard.crypto.keys import PrivateKey
from orderguard.exchange.oracles import ExchangeStateOracle, SignatureContract, TokenOracle
from orderguard.exchange.order import Order, SignedOrder
from orderguard.exchange.hashing import get_order_hash_hex
from orderguard.exchange.signature import LocalSignatureVerifier, sign_order_hash
from orderguard.exchange.validation import OrderValidator

NOW = 1_700_000_000

EXCHANGE = "0x" + "e1" * 20
OTHER_EXCHANGE = "0x" + "e2" * 20
PROXY = "0x" + "a0" * 20
FEE_TOKEN = "0x" + "fe" * 20
MAKER_TOKEN = "0x" + "1a" * 20
TAKER_TOKEN = "0x" + "2b" * 20
OTHER_TOKEN = "0x" + "3c" * 20
FEE_RECIPIENT = "0x" + "99" * 20


class FakeExchangeState(ExchangeStateOracle):
    """Fill/cancel counters held in dicts; records every hash it is asked about."""

    def __init__(self):
        self.filled: Dict[str, int] = {}
        self.cancelled: Dict[str, int] = {}
        self.reads: List[str] = []
        self.error: Optional[Exception] = None

    async def get_unavailable_taker_amount(self, order_hash, block_tag=None):
        self.reads.append(order_hash)
        if self.error is not None:
            raise self.error
        return self.filled.get(order_hash, 0) + self.cancelled.get(order_hash, 0)

    async def get_filled_taker_amount(self, order_hash, block_tag=None):
        return self.filled.get(order_hash, 0)

    async def get_cancelled_taker_amount(self, order_hash, block_tag=None):
        return self.cancelled.get(order_hash, 0)


class FakeTokenOracle(TokenOracle):
    """Balances and allowances keyed by lowercase addresses, zero by default."""

    def __init__(self):
        self.balances: Dict[Tuple[str, str], int] = {}
        self.allowances: Dict[Tuple[str, str, str], int] = {}
        self.reads: List[tuple] = []
        self.error: Optional[Exception] = None

    def fund(self, token: str, owner: str, amount: int, allowance: Optional[int] = None) -> None:
        self.balances[(token.lower(), owner.lower())] = amount
        self.allowances[(token.lower(), owner.lower(), PROXY)] = (
            amount if allowance is None else allowance
        )

    async def get_balance(self, token, owner, block_tag=None):
        self.reads.append(("balance", token.lower(), owner.lower()))
        if self.error is not None:
            raise self.error
        return self.balances.get((token.lower(), owner.lower()), 0)

    async def get_allowance(self, token, owner, spender, block_tag=None):
        self.reads.append(("allowance", token.lower(), owner.lower()))
        if self.error is not None:
            raise self.error
        return self.allowances.get((token.lower(), owner.lower(), spender.lower()), 0)


class FakeSignatureContract(SignatureContract):
    def __init__(self, answer: bool = True):
        self.answer = answer
        self.calls: List[tuple] = []

    async def is_valid_signature(self, signer, order_hash, v, r, s):
        self.calls.append((signer, order_hash, v, r, s))
        return self.answer


@pytest.fixture
def maker_key():
    return PrivateKey.from_int(0x4C0883A69102937D6231471B5DBB6204FE5129617082792AE468D01A3F362318)


@pytest.fixture
def taker_key():
    return PrivateKey.from_int(0x2)


@pytest.fixture
def maker(maker_key):
    return maker_key.address


@pytest.fixture
def taker(taker_key):
    return taker_key.address


@pytest.fixture
def make_order(maker):
    """Factory for orders with sensible defaults; keyword overrides win."""
    def _make(**overrides) -> Order:
        fields = dict(
            maker=maker,
            maker_token_address=MAKER_TOKEN,
            taker_token_address=TAKER_TOKEN,
            maker_token_amount=100,
            taker_token_amount=200,
            exchange_contract_address=EXCHANGE,
            expiration_unix_timestamp_sec=NOW + 3600,
            salt=42,
        )
        fields.update(overrides)
        return Order(**fields)
    return _make


@pytest.fixture
def sign(maker_key):
    """Sign an order with the maker key unless another key is given."""
    def _sign(order: Order, key: Optional[PrivateKey] = None) -> SignedOrder:
        signature = sign_order_hash(key or maker_key, get_order_hash_hex(order))
        return SignedOrder(order=order, ec_signature=signature)
    return _sign


@pytest.fixture
def exchange_state():
    return FakeExchangeState()


@pytest.fixture
def token_oracle():
    return FakeTokenOracle()


@pytest.fixture
def validator(exchange_state, token_oracle):
    return OrderValidator(
        exchange_state=exchange_state,
        token_oracle=token_oracle,
        signature_verifier=LocalSignatureVerifier(),
        token_transfer_proxy_address=PROXY,
        fee_token_address=FEE_TOKEN,
        clock=lambda: NOW,
    )


@pytest.fixture
def funded(token_oracle, maker, taker):
    """Maker and taker hold and have approved plenty of every token."""
    for token in (MAKER_TOKEN, TAKER_TOKEN, OTHER_TOKEN, FEE_TOKEN):
        token_oracle.fund(token, maker, 10**24)
        token_oracle.fund(token, taker, 10**24)
    return token_oracle
