import enum


class BatchStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PARTIALLY_FAILED = "partially_failed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not BatchStatus.PENDING
