from tokenforge.common.enums.deployment_status import DeploymentStatus
from tokenforge.common.repositories import BaseRepository
from tokenforge.modules.deployments.dtos.deployment import DeploymentCreate, DeploymentUpdate
from tokenforge.modules.deployments.entities import DeploymentEntity


class DeploymentRepository(BaseRepository[DeploymentEntity]):

    model = DeploymentEntity

    def create(self, deployment_data: DeploymentCreate) -> DeploymentEntity:
        data = deployment_data.model_dump()
        data["status"] = DeploymentStatus.PENDING
        return super().create(DeploymentEntity(**data))

    def update(self, deployment_id: str, deployment_data: DeploymentUpdate) -> DeploymentEntity | None:
        db_deployment = self.get_by_id(deployment_id)
        if not db_deployment:
            return None

        update_data = {
            key: value
            for key, value in deployment_data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        return super().update(db_deployment, update_data)
