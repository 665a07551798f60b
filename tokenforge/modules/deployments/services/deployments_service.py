from decimal import Decimal

from sqlalchemy.orm import Session

from tokenforge.common.enums.contract_type import ContractType
from tokenforge.configuration.config import settings
from tokenforge.modules.deployments.dtos.deployment import (
    DeploymentCreate,
    DeploymentEstimateResponse,
    DeploymentResponse,
    DeploymentUpdate,
)
from tokenforge.modules.deployments.repositories.deployment_repository import DeploymentRepository

# Límites de gas fijos por tipo de contrato
GAS_LIMITS = {
    ContractType.ERC20: 1_500_000,
    ContractType.ERC721: 2_000_000,
    ContractType.ERC1155: 2_500_000,
}
DEFAULT_GAS_LIMIT = 2_500_000
GAS_PRICE_WEI = 20_000_000_000  # 20 gwei


def estimate_deployment_cost(contract_type: ContractType) -> DeploymentEstimateResponse:
    gas_limit = GAS_LIMITS.get(contract_type, DEFAULT_GAS_LIMIT)
    gas_cost = gas_limit * GAS_PRICE_WEI
    estimated = Decimal(gas_cost).scaleb(-settings.NATIVE_DECIMALS).quantize(Decimal("0.0001"))
    return DeploymentEstimateResponse(
        gas_limit=gas_limit,
        gas_price=str(GAS_PRICE_WEI),
        gas_cost=str(gas_cost),
        estimated_cost=str(estimated),
        native_symbol=settings.NATIVE_SYMBOL,
    )


class DeploymentsService:

    def __init__(self, db: Session):
        self.repository = DeploymentRepository(db)

    def get_deployment(self, deployment_id: str) -> DeploymentResponse | None:
        deployment = self.repository.get_by_id(deployment_id)
        if not deployment:
            return None
        return DeploymentResponse.model_validate(deployment)

    def get_deployments(
        self,
        skip: int = 0,
        limit: int = 100,
        deployer_address: str | None = None,
    ) -> list[DeploymentResponse]:
        filters = {"deployer_address": deployer_address} if deployer_address else None
        deployments = self.repository.get_all(skip=skip, limit=limit, filters=filters)
        return [DeploymentResponse.model_validate(d) for d in deployments]

    def create_deployment(self, deployment_data: DeploymentCreate) -> DeploymentResponse:
        deployment = self.repository.create(deployment_data)
        return DeploymentResponse.model_validate(deployment)

    def update_deployment(
        self,
        deployment_id: str,
        deployment_data: DeploymentUpdate,
    ) -> DeploymentResponse | None:
        deployment = self.repository.update(deployment_id, deployment_data)
        if not deployment:
            return None
        return DeploymentResponse.model_validate(deployment)
