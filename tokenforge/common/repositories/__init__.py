from tokenforge.configuration.config import (
    Base,
    get_db,
)

from .base_repository import (
    BaseRepository,
    ModelType,
)

__all__ = [
    "Base",
    "get_db",
    "BaseRepository",
    "ModelType",
]
