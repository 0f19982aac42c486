"""
Wires an OrderValidator from configuration and a JSON-RPC client.
"""

import httpx

from .config import OrderGuardConfig
from .exchange.signature import create_signature_verifier
from .exchange.validation import OrderValidator
from .logger import LogManager, get_logger
from .rpc import ExchangeContract, JsonRpcClient, TokenContract

logger = get_logger(__name__)


def create_rpc_client(config: OrderGuardConfig, **client_options) -> JsonRpcClient:
    """
    JSON-RPC client for the ``[rpc]`` section.

    The underlying ``httpx.AsyncClient`` belongs to the caller, who closes
    it with ``await client.aclose()`` on the returned wrapper's ``client``.
    Extra keyword arguments go to ``httpx.AsyncClient``.

    Raises:
        ConfigurationError: If the ``[rpc]`` section does not validate
    """
    config.rpc.validate()
    http_client = httpx.AsyncClient(timeout=config.rpc.timeout, **client_options)
    logger.debug(f"[RPC] {config.rpc.url} (timeout {config.rpc.timeout}s)")
    return JsonRpcClient(config.rpc.url, http_client)


async def create_validator(config: OrderGuardConfig, rpc_client: JsonRpcClient) -> OrderValidator:
    """
    Build an ``OrderValidator`` backed by the configured exchange contract.

    Token transfer proxy and fee token addresses left empty in the config
    are read from the exchange contract itself.

    Raises:
        ConfigurationError: If the config does not validate
    """
    config.validate()
    LogManager().set_level(config.logging.level)

    exchange = ExchangeContract(rpc_client, config.exchange.address)
    proxy_address = config.exchange.token_transfer_proxy
    if not proxy_address:
        proxy_address = await exchange.get_token_transfer_proxy_address()
    fee_token_address = config.exchange.fee_token
    if not fee_token_address:
        fee_token_address = await exchange.get_fee_token_address()

    verifier = create_signature_verifier(config.validation.signature_strategy, exchange)
    logger.info(
        f"Validator ready: exchange {exchange.address}, proxy {proxy_address}, "
        f"fee token {fee_token_address}, signatures {config.validation.signature_strategy}"
    )
    return OrderValidator(
        exchange_state=exchange,
        token_oracle=TokenContract(rpc_client),
        signature_verifier=verifier,
        token_transfer_proxy_address=proxy_address,
        fee_token_address=fee_token_address,
    )
