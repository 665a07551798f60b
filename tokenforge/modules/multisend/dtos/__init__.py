from tokenforge.modules.multisend.dtos.multisend import (
    BatchOutcome,
    BatchSpec,
    MultisendBase,
    MultisendCreate,
    MultisendResponse,
    MultisendUpdate,
    Recipient,
    RecipientImportRequest,
    RecipientImportResponse,
)

__all__ = [
    "BatchOutcome",
    "BatchSpec",
    "MultisendBase",
    "MultisendCreate",
    "MultisendResponse",
    "MultisendUpdate",
    "Recipient",
    "RecipientImportRequest",
    "RecipientImportResponse",
]
