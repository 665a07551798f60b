import enum


class DeploymentStatus(str, enum.Enum):
    PENDING = "pending"
    DEPLOYED = "deployed"
    FAILED = "failed"
