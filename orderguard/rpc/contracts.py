"""
Exchange and ERC20 contract readers over JSON-RPC.

These are the production implementations of the oracle interfaces in
``orderguard.exchange.oracles``. Calldata is built from the Solidity
function signature (4-byte keccak selector + ABI-encoded arguments) and
return data is ABI-decoded.
"""

from typing import Any, Optional, Sequence, Tuple

from eth_abi import decode, encode
from eth_utils import decode_hex

from ..crypto.address import normalize_address
from ..crypto.hashing import keccak256
from ..exchange.oracles import BlockTag, ExchangeStateOracle, SignatureContract, TokenOracle
from ..exchange.order import Order
from ..logger import get_logger
from .client import JsonRpcClient

logger = get_logger(__name__)


def compute_function_selector(function_signature: str) -> bytes:
    """
    First 4 bytes of keccak256 of the canonical signature,
    e.g. ``balanceOf(address)`` -> ``0x70a08231``.
    """
    return keccak256(function_signature.encode('utf-8'))[:4]


def encode_function_call(function_signature: str, *args) -> bytes:
    """
    Encode function call data (selector + ABI-encoded arguments).

    Args:
        function_signature: Function signature, e.g. ``allowance(address,address)``
        *args: Function arguments
    """
    selector = compute_function_selector(function_signature)

    args_start = function_signature.index('(') + 1
    args_end = function_signature.rindex(')')
    arg_types_str = function_signature[args_start:args_end]

    if not arg_types_str:
        return selector

    arg_types = [t.strip() for t in arg_types_str.split(',')]
    return selector + encode(arg_types, list(args))


class _ContractReader:
    def __init__(self, client: JsonRpcClient):
        self._client = client

    async def _call(
        self,
        address: str,
        function_signature: str,
        args: Sequence[Any],
        return_types: Sequence[str],
        block_tag: Optional[BlockTag] = None,
    ) -> Tuple[Any, ...]:
        data = encode_function_call(function_signature, *args)
        logger.debug(f"[RPC] eth_call {address} {function_signature}")
        raw = await self._client.eth_call(address, data, block_tag)
        return decode(list(return_types), raw)


class ExchangeContract(_ContractReader, ExchangeStateOracle, SignatureContract):
    """Read-only view of a deployed exchange contract."""

    def __init__(self, client: JsonRpcClient, address: str):
        super().__init__(client)
        self.address = normalize_address(address)

    async def get_unavailable_taker_amount(
        self, order_hash: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        (amount,) = await self._call(
            self.address, "getUnavailableTakerTokenAmount(bytes32)",
            [decode_hex(order_hash)], ["uint256"], block_tag,
        )
        return amount

    async def get_filled_taker_amount(
        self, order_hash: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        (amount,) = await self._call(
            self.address, "filled(bytes32)", [decode_hex(order_hash)], ["uint256"], block_tag,
        )
        return amount

    async def get_cancelled_taker_amount(
        self, order_hash: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        (amount,) = await self._call(
            self.address, "cancelled(bytes32)", [decode_hex(order_hash)], ["uint256"], block_tag,
        )
        return amount

    async def is_valid_signature(
        self, signer: str, order_hash: str, v: int, r: str, s: str
    ) -> bool:
        (valid,) = await self._call(
            self.address,
            "isValidSignature(address,bytes32,uint8,bytes32,bytes32)",
            [normalize_address(signer), decode_hex(order_hash), v, decode_hex(r), decode_hex(s)],
            ["bool"],
        )
        return valid

    async def is_rounding_error(
        self, fill_taker_token_amount: int, taker_token_amount: int, maker_token_amount: int
    ) -> bool:
        """The contract's own answer, for cross-checking ``numeric.is_rounding_error``."""
        (result,) = await self._call(
            self.address,
            "isRoundingError(uint256,uint256,uint256)",
            [fill_taker_token_amount, taker_token_amount, maker_token_amount],
            ["bool"],
        )
        return result

    async def get_order_hash(self, order: Order) -> str:
        """The contract's own order hash, for cross-checking ``hashing.get_order_hash_hex``."""
        addresses = [normalize_address(a) for a in order.addresses]
        (order_hash,) = await self._call(
            self.address,
            "getOrderHash(address[5],uint256[6])",
            [addresses, list(order.values)],
            ["bytes32"],
        )
        return '0x' + order_hash.hex()

    async def get_fee_token_address(self) -> str:
        (address,) = await self._call(self.address, "ZRX_TOKEN_CONTRACT()", [], ["address"])
        return normalize_address(address)

    async def get_token_transfer_proxy_address(self) -> str:
        (address,) = await self._call(
            self.address, "TOKEN_TRANSFER_PROXY_CONTRACT()", [], ["address"]
        )
        return normalize_address(address)


class TokenContract(_ContractReader, TokenOracle):
    """ERC20 reads for any token address."""

    async def get_balance(
        self, token: str, owner: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        (balance,) = await self._call(
            normalize_address(token), "balanceOf(address)",
            [normalize_address(owner)], ["uint256"], block_tag,
        )
        return balance

    async def get_allowance(
        self, token: str, owner: str, spender: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        (allowance,) = await self._call(
            normalize_address(token), "allowance(address,address)",
            [normalize_address(owner), normalize_address(spender)], ["uint256"], block_tag,
        )
        return allowance
