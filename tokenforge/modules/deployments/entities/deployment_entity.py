import uuid

from sqlalchemy import JSON, Column, Enum, String, Text

from tokenforge.common.entities.base import BaseEntity
from tokenforge.common.enums.contract_type import ContractType
from tokenforge.common.enums.deployment_status import DeploymentStatus


def _new_id() -> str:
    return str(uuid.uuid4())


class DeploymentEntity(BaseEntity):

    __tablename__ = "deployments"

    id = Column(String(36), primary_key=True, default=_new_id)
    contract_type = Column(
        Enum(ContractType, name="contracttype", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    contract_name = Column(String(255), nullable=False)
    contract_symbol = Column(String(32), nullable=False)
    total_supply = Column(String(78), nullable=True)  # Solo ERC-20
    base_uri = Column(String(512), nullable=True)  # ERC-721 / ERC-1155
    token_image = Column(String(512), nullable=True)
    ipfs_hash = Column(String(128), nullable=True)
    contract_address = Column(String(42), nullable=True)
    transaction_hash = Column(String(66), nullable=True)
    deployer_address = Column(String(255), nullable=False, index=True)
    status = Column(
        Enum(DeploymentStatus, name="deploymentstatus", native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=DeploymentStatus.PENDING,
    )
    constructor_args = Column(JSON, nullable=True)
    compiled_bytecode = Column(Text, nullable=True)
    abi = Column(JSON, nullable=True)

    def __repr__(self):
        return (
            f"<Deployment(id='{self.id}', type='{self.contract_type.value}', "
            f"name='{self.contract_name}', status='{self.status.value}')>"
        )
