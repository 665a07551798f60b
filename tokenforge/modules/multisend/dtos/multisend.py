from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from tokenforge.common.enums.batch_status import BatchStatus
from tokenforge.common.enums.token_type import TokenType
from tokenforge.configuration.config import settings
from tokenforge.modules.multisend.utils.record_rules import check_results_fit
from tokenforge.modules.multisend.utils.validators import check_address, check_amount


class Recipient(BaseModel):
    address: str = Field(..., description="0x-prefixed, 40 hex characters")
    amount: str = Field(..., description="Positive decimal amount in whole units")

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        return check_address(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _validate_amount(cls, value) -> str:
        return check_amount(value)


class MultisendBase(BaseModel):
    sender_address: str = Field(..., min_length=1, max_length=255)
    recipients: list[Recipient] = Field(..., min_length=1)
    total_amount: str = Field(..., min_length=1, max_length=78)
    token_type: TokenType = Field(default=TokenType.NATIVE)
    token_address: str | None = Field(None, max_length=42)
    token_symbol: str = Field(default=settings.NATIVE_SYMBOL, max_length=32)


class MultisendCreate(MultisendBase):
    transaction_hashes: list[str] = Field(default_factory=list)
    failed_addresses: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_token_and_results(self):
        if self.token_type == TokenType.ERC20 and not self.token_address:
            raise ValueError("token_address is required when token_type is 'erc20'")
        check_results_fit(len(self.recipients), self.transaction_hashes, self.failed_addresses)
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "sender_address": "0x1111111111111111111111111111111111111111",
                "recipients": [
                    {"address": "0x2222222222222222222222222222222222222222", "amount": "1.5"},
                    {"address": "0x3333333333333333333333333333333333333333", "amount": "2"},
                ],
                "total_amount": "3.5",
                "token_type": "native",
                "token_address": None,
                "token_symbol": "MON",
            }
        }


class MultisendUpdate(BaseModel):
    status: BatchStatus | None = Field(None)
    transaction_hashes: list[str] | None = Field(None)
    failed_addresses: list[str] | None = Field(None)
    gas_used: str | None = Field(None, max_length=78)

    class Config:
        json_schema_extra = {
            "example": {
                "status": "partially_failed",
                "transaction_hashes": ["0xabc..."],
                "failed_addresses": ["0x3333333333333333333333333333333333333333"],
            }
        }


class MultisendResponse(MultisendBase):
    id: str = Field(...)
    status: BatchStatus = Field(...)
    transaction_hashes: list[str] = Field(default_factory=list)
    failed_addresses: list[str] = Field(default_factory=list)
    gas_used: str | None = Field(None)
    created_at: datetime = Field(...)
    updated_at: datetime | None = Field(None)

    class Config:
        from_attributes = True


class BatchSpec(BaseModel):
    """What the caller wants sent; validated again by the orchestrator before it starts."""

    recipients: list[Recipient] = Field(default_factory=list)
    token_type: TokenType = Field(default=TokenType.NATIVE)
    token_address: str | None = Field(None)
    token_symbol: str = Field(default=settings.NATIVE_SYMBOL, max_length=32)
    sender_address: str | None = Field(
        None, description="Defaults to the first account exposed by the wallet"
    )

    @field_validator("token_address", "sender_address")
    @classmethod
    def _validate_optional_address(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return check_address(value)

    class Config:
        json_schema_extra = {
            "example": {
                "recipients": [
                    {"address": "0x2222222222222222222222222222222222222222", "amount": "1.5"},
                    {"address": "0x3333333333333333333333333333333333333333", "amount": "2"},
                ],
                "token_type": "native",
                "token_symbol": "MON",
            }
        }


class BatchOutcome(BaseModel):
    record_id: str
    status: BatchStatus
    transaction_hashes: list[str]
    failed_addresses: list[str]


class RecipientImportRequest(BaseModel):
    text: str = Field(..., description="One 'address,amount' pair per line")
    recipients: list[Recipient] = Field(
        default_factory=list, description="Recipients already in the list (kept first)"
    )


class RecipientImportResponse(BaseModel):
    added: int
    recipients: list[Recipient]
    total_amount: str
