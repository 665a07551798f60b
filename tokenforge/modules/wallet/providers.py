"""
Wallet provider capability used by the transaction submitter.

A provider is handed to the submitter explicitly, so tests and other wallets
can replace the JSON-RPC backed default.
"""
import logging
from typing import Any, Protocol

from eth_account import Account
from web3 import AsyncWeb3, Web3
from web3.exceptions import ProviderConnectionError
from web3.providers import AsyncHTTPProvider

from tokenforge.common.exceptions import (
    InsufficientFundsError,
    InsufficientTokenBalanceError,
    ProviderError,
    SubmissionError,
    UserRejectedError,
    WalletLockedError,
    WalletUnavailableError,
)
from tokenforge.configuration.config import settings

logger = logging.getLogger(__name__)

# Códigos EIP-1193 / JSON-RPC
USER_REJECTED_CODE = 4001
UNAUTHORIZED_CODE = 4100
INTERNAL_ERROR_CODE = -32603

USER_REJECTED_HINTS = ("user rejected", "user denied", "rejected by user")
LOCKED_HINTS = ("unknown account", "authentication needed", "locked", "not authorized")
TOKEN_BALANCE_HINTS = ("transfer amount exceeds balance", "insufficient token balance")
INSUFFICIENT_FUNDS_HINTS = ("insufficient funds", "insufficient balance", "gas required exceeds")


class WalletProvider(Protocol):
    async def get_accounts(self) -> list[str]: ...

    async def get_chain_id(self) -> int: ...

    async def request_sign_and_send(self, tx_params: dict[str, Any]) -> str: ...

    async def call(self, tx_params: dict[str, Any]) -> bytes: ...


def _rpc_error_details(exc: BaseException) -> tuple[int | None, str]:
    rpc_response = getattr(exc, "rpc_response", None)
    if isinstance(rpc_response, dict) and isinstance(rpc_response.get("error"), dict):
        error = rpc_response["error"]
        return error.get("code"), str(error.get("message", ""))
    if exc.args and isinstance(exc.args[0], dict):
        error = exc.args[0]
        return error.get("code"), str(error.get("message", ""))
    return getattr(exc, "code", None), str(exc)


def classify_provider_error(exc: BaseException) -> SubmissionError:
    """Map whatever the provider raised onto the submission error taxonomy."""
    if isinstance(exc, SubmissionError):
        return exc
    if isinstance(exc, (ProviderConnectionError, ConnectionError, TimeoutError)):
        return WalletUnavailableError(f"Wallet provider unreachable: {exc}")

    code, message = _rpc_error_details(exc)
    lowered = message.lower()

    if code == USER_REJECTED_CODE or any(hint in lowered for hint in USER_REJECTED_HINTS):
        return UserRejectedError("Transaction was rejected by user")
    if code == UNAUTHORIZED_CODE or any(hint in lowered for hint in LOCKED_HINTS):
        return WalletLockedError(f"Wallet account is locked or not authorized: {message}")
    if any(hint in lowered for hint in TOKEN_BALANCE_HINTS):
        return InsufficientTokenBalanceError()
    if code == INTERNAL_ERROR_CODE or any(hint in lowered for hint in INSUFFICIENT_FUNDS_HINTS):
        return InsufficientFundsError(f"Transaction failed - insufficient funds or gas: {message}")
    return ProviderError(f"Transaction failed: {message or type(exc).__name__}")


class Web3WalletProvider:
    """
    JSON-RPC wallet backed by ``web3.AsyncWeb3``.

    With a private key the transaction is signed locally (nonce taken from the
    pending pool on every send); without one the node's unlocked accounts sign
    through ``eth_sendTransaction``.
    """

    def __init__(
        self,
        rpc_url: str = settings.RPC_URL,
        private_key: str = settings.WALLET_PRIVATE_KEY,
        gas_buffer: float = settings.GAS_BUFFER_MULTIPLIER,
        w3: AsyncWeb3 | None = None,
    ):
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": 60}))
        self._account = Account.from_key(private_key) if private_key else None
        self._gas_buffer = gas_buffer

    async def get_accounts(self) -> list[str]:
        if self._account is not None:
            return [self._account.address]
        try:
            return list(await self.w3.eth.accounts)
        except Exception as e:
            raise classify_provider_error(e) from e

    async def get_chain_id(self) -> int:
        try:
            return int(await self.w3.eth.chain_id)
        except Exception as e:
            raise classify_provider_error(e) from e

    async def call(self, tx_params: dict[str, Any]) -> bytes:
        try:
            return bytes(await self.w3.eth.call(tx_params))
        except Exception as e:
            raise classify_provider_error(e) from e

    async def request_sign_and_send(self, tx_params: dict[str, Any]) -> str:
        tx = dict(tx_params)
        try:
            if "gas" not in tx:
                estimate = await self.w3.eth.estimate_gas(tx)
                tx["gas"] = int(estimate * self._gas_buffer)

            if self._account is None:
                tx_hash = await self.w3.eth.send_transaction(tx)
            else:
                tx.setdefault("chainId", await self.w3.eth.chain_id)
                tx.setdefault(
                    "nonce",
                    await self.w3.eth.get_transaction_count(self._account.address, "pending"),
                )
                tx.setdefault("gasPrice", await self.w3.eth.gas_price)
                signed = self._account.sign_transaction(tx)
                tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            logger.debug(f"Error del proveedor al enviar transacción a {tx.get('to')}: {e}")
            raise classify_provider_error(e) from e

        return Web3.to_hex(tx_hash)
