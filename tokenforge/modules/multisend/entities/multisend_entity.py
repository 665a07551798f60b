import uuid

from sqlalchemy import JSON, Column, Enum, String

from tokenforge.common.entities.base import BaseEntity
from tokenforge.common.enums.batch_status import BatchStatus
from tokenforge.common.enums.token_type import TokenType


def _new_id() -> str:
    return str(uuid.uuid4())


class MultisendEntity(BaseEntity):

    __tablename__ = "multisend_transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    sender_address = Column(String(255), nullable=False, index=True)
    # Lista ordenada de {"address", "amount"}: el orden es el orden de envío
    recipients = Column(JSON, nullable=False)
    total_amount = Column(String(78), nullable=False)
    token_type = Column(
        Enum(TokenType, name="tokentype", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=TokenType.NATIVE,
    )
    token_address = Column(String(42), nullable=True)
    token_symbol = Column(String(32), nullable=False, default="MON")
    status = Column(
        Enum(BatchStatus, name="batchstatus", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=BatchStatus.PENDING,
    )
    transaction_hashes = Column(JSON, nullable=False, default=list)
    failed_addresses = Column(JSON, nullable=False, default=list)
    gas_used = Column(String(78), nullable=True)

    def __repr__(self):
        return (
            f"<Multisend(id='{self.id}', sender='{self.sender_address}', "
            f"recipients={len(self.recipients or [])}, status='{self.status.value}')>"
        )
