"""
Read interfaces onto exchange and token contract state.

The contract owns fill/cancel counters, balances and allowances; the
validator only ever reads them through these capabilities. Every read is a
point-in-time snapshot that may be stale the moment it returns, and
``block_tag`` (``"latest"``, ``"pending"`` or a block number) pins a read to
a specific block.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

BlockTag = Union[int, str]


class ExchangeStateOracle(ABC):
    """Per-order fill and cancel counters, keyed by order hash."""

    @abstractmethod
    async def get_unavailable_taker_amount(
        self, order_hash: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        """Filled plus cancelled taker token amount."""
        pass

    @abstractmethod
    async def get_filled_taker_amount(
        self, order_hash: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        pass

    @abstractmethod
    async def get_cancelled_taker_amount(
        self, order_hash: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        pass


class TokenOracle(ABC):
    """ERC20 balances and allowances."""

    @abstractmethod
    async def get_balance(
        self, token: str, owner: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        pass

    @abstractmethod
    async def get_allowance(
        self, token: str, owner: str, spender: str, block_tag: Optional[BlockTag] = None
    ) -> int:
        pass


class SignatureContract(ABC):
    """The exchange contract's own ``isValidSignature`` check."""

    @abstractmethod
    async def is_valid_signature(
        self, signer: str, order_hash: str, v: int, r: str, s: str
    ) -> bool:
        pass
