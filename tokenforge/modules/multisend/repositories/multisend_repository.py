from typing import Any

from sqlalchemy import func

from tokenforge.common.enums.batch_status import BatchStatus
from tokenforge.common.repositories import BaseRepository
from tokenforge.common.resilience import retry_db_operation
from tokenforge.modules.multisend.dtos.multisend import MultisendCreate, MultisendUpdate
from tokenforge.modules.multisend.entities import MultisendEntity
from tokenforge.modules.multisend.utils.record_rules import check_update_allowed


class MultisendRepository(BaseRepository[MultisendEntity]):

    model = MultisendEntity

    @retry_db_operation(max_attempts=3, initial_wait=0.5, max_wait=5.0)
    def get_by_id(self, record_id: str) -> MultisendEntity | None:
        return (
            self.session.query(MultisendEntity)
            .filter(MultisendEntity.id == record_id)
            .first()
        )

    def get_all(
        self,
        skip: int = 0,
        limit: int | None = 100,
        filters: dict[str, Any] | None = None,
    ) -> list[MultisendEntity]:
        return super().get_all(skip=skip, limit=limit, filters=filters)

    @retry_db_operation(max_attempts=3, initial_wait=0.5, max_wait=5.0)
    def get_by_sender(
        self,
        sender_address: str,
        skip: int = 0,
        limit: int | None = 100,
    ) -> list[MultisendEntity]:
        # Las direcciones se comparan sin distinguir mayúsculas
        return (
            self.session.query(MultisendEntity)
            .filter(func.lower(MultisendEntity.sender_address) == sender_address.lower())
            .order_by(MultisendEntity.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def create(self, multisend_data: MultisendCreate) -> MultisendEntity:
        data = multisend_data.model_dump(mode="json")
        # Todo registro nace en pending, sin importar lo que envíe el cliente
        data["status"] = BatchStatus.PENDING
        data["token_type"] = multisend_data.token_type
        db_multisend = MultisendEntity(**data)
        return super().create(db_multisend)

    def update(self, record_id: str, multisend_data: MultisendUpdate) -> MultisendEntity | None:
        db_multisend = self.get_by_id(record_id)
        if not db_multisend:
            return None

        update_data = {
            key: value
            for key, value in multisend_data.model_dump(exclude_unset=True, mode="python").items()
            if value is not None
        }
        if "status" in update_data and isinstance(update_data["status"], str):
            update_data["status"] = BatchStatus(update_data["status"].lower())
        # Listas nuevas para que SQLAlchemy detecte el cambio en las columnas JSON
        for key in ("transaction_hashes", "failed_addresses"):
            if key in update_data:
                update_data[key] = list(update_data[key])

        check_update_allowed(
            record_id,
            {
                "status": db_multisend.status,
                "transaction_hashes": db_multisend.transaction_hashes or [],
                "failed_addresses": db_multisend.failed_addresses or [],
            },
            update_data,
            len(db_multisend.recipients or []),
        )
        return super().update(db_multisend, update_data)
