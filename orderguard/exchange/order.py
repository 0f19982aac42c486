"""
Order data model.

Orders are immutable once built. Amounts are Python ints in a token's base
units; addresses are 0x-prefixed hex strings. ``to_dict`` / ``from_dict``
use the camelCase JSON layout relayers publish orders in, with amounts as
decimal strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from ..constants import NULL_ADDRESS


@dataclass(frozen=True)
class ECSignature:
    """Elliptic curve signature over an order hash."""
    v: int
    r: str  # 0x + 32 bytes hex
    s: str  # 0x + 32 bytes hex

    def to_dict(self) -> Dict[str, Any]:
        return {"v": self.v, "r": self.r, "s": self.s}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ECSignature":
        return cls(v=int(data["v"]), r=data["r"], s=data["s"])


@dataclass(frozen=True)
class Order:
    """An unsigned exchange order."""
    maker: str
    maker_token_address: str
    taker_token_address: str
    maker_token_amount: int
    taker_token_amount: int
    exchange_contract_address: str
    expiration_unix_timestamp_sec: int
    salt: int
    taker: str = NULL_ADDRESS        # NULL_ADDRESS: anyone may fill
    fee_recipient: str = NULL_ADDRESS
    maker_fee: int = 0
    taker_fee: int = 0

    @property
    def addresses(self) -> Tuple[str, str, str, str, str]:
        """``address[5]`` argument of the contract's order methods."""
        return (
            self.maker,
            self.taker,
            self.maker_token_address,
            self.taker_token_address,
            self.fee_recipient,
        )

    @property
    def values(self) -> Tuple[int, int, int, int, int, int]:
        """``uint256[6]`` argument of the contract's order methods."""
        return (
            self.maker_token_amount,
            self.taker_token_amount,
            self.maker_fee,
            self.taker_fee,
            self.expiration_unix_timestamp_sec,
            self.salt,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maker": self.maker,
            "taker": self.taker,
            "makerFee": str(self.maker_fee),
            "takerFee": str(self.taker_fee),
            "makerTokenAmount": str(self.maker_token_amount),
            "takerTokenAmount": str(self.taker_token_amount),
            "makerTokenAddress": self.maker_token_address,
            "takerTokenAddress": self.taker_token_address,
            "salt": str(self.salt),
            "exchangeContractAddress": self.exchange_contract_address,
            "feeRecipient": self.fee_recipient,
            "expirationUnixTimestampSec": str(self.expiration_unix_timestamp_sec),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            maker=data["maker"],
            taker=data.get("taker", NULL_ADDRESS),
            maker_fee=int(data.get("makerFee", 0)),
            taker_fee=int(data.get("takerFee", 0)),
            maker_token_amount=int(data["makerTokenAmount"]),
            taker_token_amount=int(data["takerTokenAmount"]),
            maker_token_address=data["makerTokenAddress"],
            taker_token_address=data["takerTokenAddress"],
            salt=int(data["salt"]),
            exchange_contract_address=data["exchangeContractAddress"],
            fee_recipient=data.get("feeRecipient", NULL_ADDRESS),
            expiration_unix_timestamp_sec=int(data["expirationUnixTimestampSec"]),
        )


@dataclass(frozen=True)
class SignedOrder:
    """An order together with the maker's signature over its hash."""
    order: Order
    ec_signature: ECSignature

    def __getattr__(self, name: str) -> Any:
        # Order fields read straight through, e.g. signed_order.maker
        if name in ("order", "ec_signature"):
            raise AttributeError(name)
        return getattr(self.order, name)

    def to_dict(self) -> Dict[str, Any]:
        data = self.order.to_dict()
        data["ecSignature"] = self.ec_signature.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignedOrder":
        return cls(
            order=Order.from_dict(data),
            ec_signature=ECSignature.from_dict(data["ecSignature"]),
        )


# ---------------------------------------------------------------------------
# Batch request items
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrderFillRequest:
    signed_order: SignedOrder
    fill_taker_token_amount: int


@dataclass(frozen=True)
class OrderFillOrKillRequest:
    signed_order: SignedOrder
    fill_taker_token_amount: int


@dataclass(frozen=True)
class OrderCancellationRequest:
    order: Order
    cancel_taker_token_amount: int
