from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from tokenforge.common.enums.contract_type import ContractType
from tokenforge.common.enums.deployment_status import DeploymentStatus
from tokenforge.modules.multisend.utils.validators import check_address


class DeploymentBase(BaseModel):
    contract_type: ContractType = Field(..., description="erc20, erc721 o erc1155")
    contract_name: str = Field(..., min_length=1, max_length=255)
    contract_symbol: str = Field(..., min_length=1, max_length=32)
    total_supply: str | None = Field(None, max_length=78, description="Solo ERC-20")
    base_uri: str | None = Field(None, max_length=512, description="ERC-721 / ERC-1155")
    token_image: str | None = Field(None, max_length=512)
    ipfs_hash: str | None = Field(None, max_length=128)
    deployer_address: str = Field(..., min_length=1, max_length=255)
    constructor_args: list[Any] | dict[str, Any] | None = Field(None)
    compiled_bytecode: str | None = Field(None)
    abi: list[dict[str, Any]] | None = Field(None)

    @field_validator("deployer_address")
    @classmethod
    def _validate_deployer(cls, value: str) -> str:
        return check_address(value, "deployer_address")


class DeploymentCreate(DeploymentBase):

    class Config:
        json_schema_extra = {
            "example": {
                "contract_type": "erc20",
                "contract_name": "Forge Token",
                "contract_symbol": "FRG",
                "total_supply": "1000000",
                "deployer_address": "0x1111111111111111111111111111111111111111",
            }
        }


class DeploymentUpdate(BaseModel):
    status: DeploymentStatus | None = Field(None)
    contract_address: str | None = Field(None, max_length=42)
    transaction_hash: str | None = Field(None, max_length=66)
    ipfs_hash: str | None = Field(None, max_length=128)
    compiled_bytecode: str | None = Field(None)
    abi: list[dict[str, Any]] | None = Field(None)

    @field_validator("contract_address")
    @classmethod
    def _validate_contract_address(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return check_address(value, "contract_address")


class DeploymentResponse(DeploymentBase):
    id: str = Field(...)
    status: DeploymentStatus = Field(...)
    contract_address: str | None = Field(None)
    transaction_hash: str | None = Field(None)
    created_at: datetime = Field(...)
    updated_at: datetime | None = Field(None)

    class Config:
        from_attributes = True


class DeploymentEstimateRequest(BaseModel):
    contract_type: ContractType = Field(...)
    contract_name: str | None = Field(None, max_length=255)
    contract_symbol: str | None = Field(None, max_length=32)


class DeploymentEstimateResponse(BaseModel):
    gas_limit: int
    gas_price: str = Field(..., description="Wei")
    gas_cost: str = Field(..., description="Wei")
    estimated_cost: str = Field(..., description="En unidades nativas, 4 decimales")
    native_symbol: str
