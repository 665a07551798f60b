from tokenforge.modules.deployments.dtos.deployment import (
    DeploymentBase,
    DeploymentCreate,
    DeploymentEstimateRequest,
    DeploymentEstimateResponse,
    DeploymentResponse,
    DeploymentUpdate,
)

__all__ = [
    "DeploymentBase",
    "DeploymentCreate",
    "DeploymentEstimateRequest",
    "DeploymentEstimateResponse",
    "DeploymentResponse",
    "DeploymentUpdate",
]
