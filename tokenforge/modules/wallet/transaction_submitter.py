from eth_abi.exceptions import DecodingError
from eth_utils import to_checksum_address

from tokenforge.common.exceptions import (
    InsufficientTokenBalanceError,
    NetworkMismatchError,
    NoAccountError,
    ProviderError,
    WalletUnavailableError,
)
from tokenforge.configuration.config import settings
from tokenforge.modules.multisend.utils.validators import check_address, to_base_units
from tokenforge.modules.wallet.erc20 import decode_uint256, encode_balance_of, encode_transfer
from tokenforge.modules.wallet.providers import WalletProvider


class TransactionSubmitter:
    """
    Sends exactly one transfer per call through the injected wallet provider.

    The hash is returned as soon as the provider accepts the broadcast; there is
    no wait for a receipt and no retry. Calling twice sends twice.
    """

    def __init__(
        self,
        provider: WalletProvider | None,
        expected_chain_id: int = settings.EXPECTED_CHAIN_ID,
        native_decimals: int = settings.NATIVE_DECIMALS,
        token_decimals: int = settings.TOKEN_DECIMALS,
    ):
        self.provider = provider
        self.expected_chain_id = expected_chain_id
        self.native_decimals = native_decimals
        self.token_decimals = token_decimals

    async def ensure_ready(self, sender: str | None = None) -> str:
        """Return the account that will sign, after checking wallet, account and chain."""
        if self.provider is None:
            raise WalletUnavailableError("No wallet provider available")

        accounts = await self.provider.get_accounts()
        if not accounts:
            raise NoAccountError("No wallet account is connected")

        chain_id = await self.provider.get_chain_id()
        if chain_id != self.expected_chain_id:
            raise NetworkMismatchError(self.expected_chain_id, chain_id)

        if sender is None:
            return accounts[0]
        for account in accounts:
            if account.lower() == sender.lower():
                return account
        raise NoAccountError(f"Account {sender} is not authorized by the wallet")

    async def _signer(self, sender: str | None, check_ready: bool) -> str:
        # Con check_ready=False el llamador ya validó cuenta y red para este sender
        if check_ready or sender is None:
            return await self.ensure_ready(sender)
        if self.provider is None:
            raise WalletUnavailableError("No wallet provider available")
        return sender

    async def send_native(
        self,
        to: str,
        amount: str,
        sender: str | None = None,
        check_ready: bool = True,
    ) -> str:
        recipient = check_address(to, "to")
        value = to_base_units(amount, self.native_decimals)
        account = await self._signer(sender, check_ready)

        return await self.provider.request_sign_and_send(
            {
                "from": account,
                "to": to_checksum_address(recipient),
                "value": value,
            }
        )

    async def send_token(
        self,
        token_address: str,
        to: str,
        amount: str,
        sender: str | None = None,
        check_ready: bool = True,
    ) -> str:
        token = to_checksum_address(check_address(token_address, "token_address"))
        recipient = check_address(to, "to")
        value = to_base_units(amount, self.token_decimals)
        account = await self._signer(sender, check_ready)

        balance = await self.token_balance(token, account)
        if balance < value:
            raise InsufficientTokenBalanceError(token, balance, value)

        return await self.provider.request_sign_and_send(
            {
                "from": account,
                "to": token,
                "value": 0,
                "data": encode_transfer(recipient, value),
            }
        )

    async def token_balance(self, token_address: str, owner: str) -> int:
        if self.provider is None:
            raise WalletUnavailableError("No wallet provider available")

        token = to_checksum_address(check_address(token_address, "token_address"))
        raw = await self.provider.call({"to": token, "data": encode_balance_of(owner)})
        try:
            return decode_uint256(raw)
        except DecodingError as e:
            raise ProviderError(f"Could not read balanceOf from {token}: {e}") from e
