from tokenforge.common.entities.base import BaseEntity, utc_now

__all__ = ["BaseEntity", "utc_now"]
