from tokenforge.common.enums.batch_status import BatchStatus
from tokenforge.common.enums.contract_type import ContractType
from tokenforge.common.enums.deployment_status import DeploymentStatus
from tokenforge.common.enums.token_type import TokenType

__all__ = ["BatchStatus", "ContractType", "DeploymentStatus", "TokenType"]
