from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, func

from tokenforge.configuration.config import Base


def utc_now() -> datetime:
    return datetime.now(UTC)


class BaseEntity(Base):
    __abstract__ = True

    # Default en Python para conservar microsegundos (el orden por created_at depende de ello)
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utc_now)

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id}, created_at={self.created_at}, updated_at={self.updated_at})>"
