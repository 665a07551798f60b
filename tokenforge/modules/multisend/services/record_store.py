"""
Durable storage for multisend batch records.

The orchestrator only needs create-before-submit and update-after-complete;
whether a record lives in the database or in process memory is a deployment
choice (``RECORD_STORE_BACKEND``).
"""
import itertools
import logging
import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Protocol

from sqlalchemy.orm import Session

from tokenforge.common.entities.base import utc_now
from tokenforge.common.enums.batch_status import BatchStatus
from tokenforge.common.resilience import db_circuit_breaker
from tokenforge.configuration.config import get_session, settings
from tokenforge.modules.multisend.dtos.multisend import (
    MultisendCreate,
    MultisendResponse,
    MultisendUpdate,
)
from tokenforge.modules.multisend.repositories.multisend_repository import MultisendRepository
from tokenforge.modules.multisend.utils.record_rules import check_update_allowed

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    def create(self, record: MultisendCreate) -> MultisendResponse: ...

    def update(self, record_id: str, fields: MultisendUpdate) -> MultisendResponse | None: ...

    def get(self, record_id: str) -> MultisendResponse | None: ...

    def list_all(self, skip: int = 0, limit: int | None = None) -> list[MultisendResponse]: ...

    def list_by_sender(
        self, sender_address: str, skip: int = 0, limit: int | None = None
    ) -> list[MultisendResponse]: ...


class RepositoryRecordStore:
    """Record store backed by the SQLAlchemy repository; every call commits on its own."""

    def __init__(self, session_factory: Callable[[], Session] = get_session):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @db_circuit_breaker()
    def create(self, record: MultisendCreate) -> MultisendResponse:
        with self._session() as session:
            entity = MultisendRepository(session).create(record)
            return MultisendResponse.model_validate(entity)

    @db_circuit_breaker()
    def update(self, record_id: str, fields: MultisendUpdate) -> MultisendResponse | None:
        with self._session() as session:
            entity = MultisendRepository(session).update(record_id, fields)
            if entity is None:
                return None
            return MultisendResponse.model_validate(entity)

    @db_circuit_breaker()
    def get(self, record_id: str) -> MultisendResponse | None:
        with self._session() as session:
            entity = MultisendRepository(session).get_by_id(record_id)
            if entity is None:
                return None
            return MultisendResponse.model_validate(entity)

    @db_circuit_breaker()
    def list_all(self, skip: int = 0, limit: int | None = None) -> list[MultisendResponse]:
        with self._session() as session:
            entities = MultisendRepository(session).get_all(skip=skip, limit=limit)
            return [MultisendResponse.model_validate(e) for e in entities]

    @db_circuit_breaker()
    def list_by_sender(
        self, sender_address: str, skip: int = 0, limit: int | None = None
    ) -> list[MultisendResponse]:
        with self._session() as session:
            entities = MultisendRepository(session).get_by_sender(sender_address, skip=skip, limit=limit)
            return [MultisendResponse.model_validate(e) for e in entities]


class InMemoryRecordStore:
    """Process-local record store; updates are serialized by a single lock."""

    def __init__(self):
        self._records: dict[str, tuple[int, MultisendResponse]] = {}
        self._lock = threading.Lock()
        self._sequence = itertools.count()

    def create(self, record: MultisendCreate) -> MultisendResponse:
        stored = MultisendResponse(
            **record.model_dump(),
            id=str(uuid.uuid4()),
            status=BatchStatus.PENDING,
            created_at=utc_now(),
        )
        with self._lock:
            self._records[stored.id] = (next(self._sequence), stored)
        return stored.model_copy(deep=True)

    def update(self, record_id: str, fields: MultisendUpdate) -> MultisendResponse | None:
        changes = {
            key: value
            for key, value in fields.model_dump(exclude_unset=True).items()
            if value is not None
        }
        with self._lock:
            entry = self._records.get(record_id)
            if entry is None:
                return None
            sequence, current = entry
            check_update_allowed(
                record_id,
                {
                    "status": current.status,
                    "transaction_hashes": current.transaction_hashes,
                    "failed_addresses": current.failed_addresses,
                },
                changes,
                len(current.recipients),
            )
            updated = current.model_copy(update={**changes, "updated_at": utc_now()}, deep=True)
            self._records[record_id] = (sequence, updated)
        return updated.model_copy(deep=True)

    def get(self, record_id: str) -> MultisendResponse | None:
        with self._lock:
            entry = self._records.get(record_id)
        return entry[1].model_copy(deep=True) if entry else None

    def _newest_first(self) -> list[MultisendResponse]:
        with self._lock:
            entries = list(self._records.values())
        entries.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [record for _, record in entries]

    @staticmethod
    def _page(records: list[MultisendResponse], skip: int, limit: int | None) -> list[MultisendResponse]:
        end = skip + limit if limit is not None else None
        return [record.model_copy(deep=True) for record in records[skip:end]]

    def list_all(self, skip: int = 0, limit: int | None = None) -> list[MultisendResponse]:
        return self._page(self._newest_first(), skip, limit)

    def list_by_sender(
        self, sender_address: str, skip: int = 0, limit: int | None = None
    ) -> list[MultisendResponse]:
        wanted = sender_address.lower()
        matching = [r for r in self._newest_first() if r.sender_address.lower() == wanted]
        return self._page(matching, skip, limit)


_memory_store: InMemoryRecordStore | None = None


def get_record_store() -> RecordStore:
    """Record store selected by ``RECORD_STORE_BACKEND``."""
    global _memory_store  # noqa: PLW0603
    backend = settings.RECORD_STORE_BACKEND.lower()
    if backend == "memory":
        if _memory_store is None:
            logger.info("Usando almacenamiento en memoria para los registros de multisend")
            _memory_store = InMemoryRecordStore()
        return _memory_store
    if backend == "database":
        return RepositoryRecordStore()
    raise ValueError(f"Unknown RECORD_STORE_BACKEND: {settings.RECORD_STORE_BACKEND!r}")
