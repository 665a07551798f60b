import logging
from collections.abc import Iterable
from decimal import Decimal

from tokenforge.common.exceptions import DuplicateAddressError, NoValidRowsError, ValidationError
from tokenforge.modules.multisend.dtos.multisend import Recipient
from tokenforge.modules.multisend.utils.validators import check_address, check_amount, sum_amounts

logger = logging.getLogger(__name__)


class AddressBook:
    """
    In-memory recipient list that is always valid and free of duplicate addresses.

    Nothing here touches the network or the database; the list is handed to the
    batch orchestrator once the user is done editing it.
    """

    def __init__(self, recipients: Iterable[Recipient] | None = None):
        self._recipients: list[Recipient] = []
        for recipient in recipients or []:
            self.add_recipient(recipient.address, recipient.amount)

    def __len__(self) -> int:
        return len(self._recipients)

    @property
    def recipients(self) -> list[Recipient]:
        return list(self._recipients)

    def contains(self, address: str) -> bool:
        wanted = address.strip().lower()
        return any(r.address.lower() == wanted for r in self._recipients)

    def add_recipient(self, address: str, amount: str) -> Recipient:
        """
        Validate and append one recipient.

        Raises a ``ValidationError`` subclass for an empty or malformed address, a
        non-numeric or non-positive amount, or an address already in the list
        (compared case-insensitively). The list is untouched on error.
        """
        checked_address = check_address(address)
        checked_amount = check_amount(amount)
        if self.contains(checked_address):
            raise DuplicateAddressError(checked_address)

        recipient = Recipient(address=checked_address, amount=checked_amount)
        self._recipients.append(recipient)
        return recipient

    def import_from_text(self, text: str) -> int:
        """
        Add every valid ``address,amount`` line of ``text``.

        Lines that fail validation are dropped without an error. Returns how many
        recipients were added; raises ``NoValidRowsError`` when none were.
        """
        lines = [line.strip() for line in (text or "").splitlines()]
        lines = [line for line in lines if line]

        added = 0
        for line in lines:
            address, _, amount = line.partition(",")
            try:
                self.add_recipient(address, amount)
            except ValidationError as e:
                logger.debug(f"Línea descartada en la importación: {line!r} ({e.code})")
                continue
            added += 1

        if added == 0:
            raise NoValidRowsError(len(lines))
        return added

    def remove_recipient(self, index: int) -> None:
        if 0 <= index < len(self._recipients):
            del self._recipients[index]

    def clear(self) -> None:
        self._recipients.clear()

    def total_amount(self) -> Decimal:
        return sum_amounts(r.amount for r in self._recipients)
