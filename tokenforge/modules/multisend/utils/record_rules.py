"""Rules every batch record write must respect, whatever store holds it."""
from collections.abc import Sequence
from typing import Any

from tokenforge.common.enums.batch_status import BatchStatus
from tokenforge.common.exceptions import ResultsExceedRecipientsError, TerminalRecordError

# Campos que un registro terminal ya no puede cambiar
RESULT_FIELDS = ("status", "transaction_hashes", "failed_addresses")


def check_results_fit(
    recipient_count: int,
    transaction_hashes: Sequence[str],
    failed_addresses: Sequence[str],
) -> None:
    result_count = len(transaction_hashes) + len(failed_addresses)
    if result_count > recipient_count:
        raise ResultsExceedRecipientsError(result_count, recipient_count)


def check_update_allowed(
    record_id: str,
    current: dict[str, Any],
    changes: dict[str, Any],
    recipient_count: int,
) -> None:
    """
    Validate a partial update against the stored record.

    ``current`` and ``changes`` map field names to values; ``changes`` only
    holds the fields being written. A terminal record keeps its status and
    results; ``gas_used`` can still be filled in.
    """
    status = BatchStatus(current["status"])
    if status.is_terminal:
        for field in RESULT_FIELDS:
            if field in changes and changes[field] != current[field]:
                raise TerminalRecordError(record_id, status.value)

    check_results_fit(
        recipient_count,
        changes.get("transaction_hashes", current["transaction_hashes"]) or [],
        changes.get("failed_addresses", current["failed_addresses"]) or [],
    )
