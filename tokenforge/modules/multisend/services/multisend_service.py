from tokenforge.modules.multisend.dtos.multisend import (
    MultisendCreate,
    MultisendResponse,
    MultisendUpdate,
    RecipientImportRequest,
    RecipientImportResponse,
)
from tokenforge.modules.multisend.services.address_book import AddressBook
from tokenforge.modules.multisend.services.record_store import RecordStore


class MultisendService:

    def __init__(self, store: RecordStore):
        self.store = store

    def get_multisend(self, record_id: str) -> MultisendResponse | None:
        return self.store.get(record_id)

    def get_multisends(
        self,
        skip: int = 0,
        limit: int = 100,
        sender_address: str | None = None,
    ) -> list[MultisendResponse]:
        if sender_address:
            return self.store.list_by_sender(sender_address, skip=skip, limit=limit)
        return self.store.list_all(skip=skip, limit=limit)

    def create_multisend(self, multisend_data: MultisendCreate) -> MultisendResponse:
        return self.store.create(multisend_data)

    def update_multisend(self, record_id: str, multisend_data: MultisendUpdate) -> MultisendResponse | None:
        return self.store.update(record_id, multisend_data)

    @staticmethod
    def import_recipients(request: RecipientImportRequest) -> RecipientImportResponse:
        book = AddressBook(request.recipients)
        added = book.import_from_text(request.text)
        return RecipientImportResponse(
            added=added,
            recipients=book.recipients,
            total_amount=str(book.total_amount()),
        )
