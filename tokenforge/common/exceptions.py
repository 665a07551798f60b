"""
Typed exception hierarchy for TokenForge.

Every class carries a machine readable ``code`` so controllers and callers can
branch on the type instead of parsing messages.

    TokenForgeError
    +-- ValidationError
    |   +-- MissingValueError
    |   +-- InvalidAddressError
    |   +-- InvalidAmountError
    |   +-- DuplicateAddressError
    |   +-- NoValidRowsError
    |   +-- ResultsExceedRecipientsError
    +-- PreconditionError
    +-- SubmissionError
    |   +-- WalletUnavailableError
    |   +-- WalletLockedError
    |   |   +-- NoAccountError
    |   +-- UserRejectedError
    |   +-- InsufficientFundsError
    |   +-- InsufficientTokenBalanceError
    |   +-- NetworkMismatchError
    |   +-- ProviderError
    +-- RecordNotFoundError
    +-- TerminalRecordError
"""


class TokenForgeError(Exception):
    """Base exception for all TokenForge errors."""

    code: str = "TOKENFORGE_ERROR"


# Validation


class ValidationError(TokenForgeError, ValueError):
    """Input rejected before any state was touched."""

    code: str = "VALIDATION_ERROR"


class MissingValueError(ValidationError):
    code: str = "MISSING_VALUE"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing value for '{field}'")


class InvalidAddressError(ValidationError):
    code: str = "INVALID_ADDRESS"

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Invalid address: {address!r} (expected 0x followed by 40 hex characters)")


class InvalidAmountError(ValidationError):
    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: str, reason: str = "must be a positive number"):
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount!r}: {reason}")


class DuplicateAddressError(ValidationError):
    code: str = "DUPLICATE_ADDRESS"

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Address already in the recipients list: {address}")


class NoValidRowsError(ValidationError):
    """A bulk import where every line was rejected."""

    code: str = "NO_VALID_ROWS"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__(f"No valid recipients found in {line_count} line(s)")


class ResultsExceedRecipientsError(ValidationError):
    """More transfer results than recipients on a batch record."""

    code: str = "RESULTS_EXCEED_RECIPIENTS"

    def __init__(self, result_count: int, recipient_count: int):
        self.result_count = result_count
        self.recipient_count = recipient_count
        super().__init__(
            f"{result_count} transaction result(s) recorded for {recipient_count} recipient(s)"
        )


# Batch start


class PreconditionError(TokenForgeError):
    """A batch could not start; no record was created."""

    code: str = "PRECONDITION_FAILED"


# Wallet / submission


class SubmissionError(TokenForgeError):
    """One transfer could not be signed or broadcast."""

    code: str = "SUBMISSION_ERROR"


class WalletUnavailableError(SubmissionError):
    code: str = "WALLET_UNAVAILABLE"


class WalletLockedError(SubmissionError):
    code: str = "WALLET_LOCKED"


class NoAccountError(WalletLockedError):
    code: str = "NO_ACCOUNT"


class UserRejectedError(SubmissionError):
    code: str = "USER_REJECTED"


class InsufficientFundsError(SubmissionError):
    code: str = "INSUFFICIENT_FUNDS"


class InsufficientTokenBalanceError(SubmissionError):
    code: str = "INSUFFICIENT_TOKEN_BALANCE"

    def __init__(
        self,
        token_address: str | None = None,
        balance: int | None = None,
        requested: int | None = None,
    ):
        self.token_address = token_address
        self.balance = balance
        self.requested = requested
        message = "Insufficient token balance"
        if token_address:
            message += f" on {token_address}"
        if balance is not None and requested is not None:
            message += f": have {balance}, need {requested}"
        super().__init__(message)


class NetworkMismatchError(SubmissionError):
    code: str = "NETWORK_MISMATCH"

    def __init__(self, expected_chain_id: int, actual_chain_id: int):
        self.expected_chain_id = expected_chain_id
        self.actual_chain_id = actual_chain_id
        super().__init__(
            f"Connected to chain {actual_chain_id}, expected chain {expected_chain_id}"
        )


class ProviderError(SubmissionError):
    code: str = "PROVIDER_ERROR"


# Storage


class RecordNotFoundError(TokenForgeError):
    code: str = "RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record not found: {record_id}")


class TerminalRecordError(TokenForgeError):
    """A finished batch record cannot change status or results."""

    code: str = "RECORD_TERMINAL"

    def __init__(self, record_id: str, status: str):
        self.record_id = record_id
        self.status = status
        super().__init__(f"Record {record_id} is already {status} and cannot be changed")
