"""
orderguard RPC

JSON-RPC backed implementations of the exchange and token oracles.
"""

from .client import JsonRpcClient, format_block_tag
from .contracts import (
    ExchangeContract,
    TokenContract,
    compute_function_selector,
    encode_function_call,
)

__all__ = [
    "JsonRpcClient",
    "format_block_tag",
    "ExchangeContract",
    "TokenContract",
    "compute_function_selector",
    "encode_function_call",
]
