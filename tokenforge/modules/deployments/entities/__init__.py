from tokenforge.modules.deployments.entities.deployment_entity import DeploymentEntity

__all__ = ["DeploymentEntity"]
