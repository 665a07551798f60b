from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


class Settings(BaseSettings):
    DATABASE_URL: str = Field(
        default="sqlite:///./tokenforge.db", description="Database connection URL"
    )
    APP_NAME: str = "TokenForge API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    RPC_URL: str = Field(
        default="https://testnet-rpc.monad.xyz/", description="JSON-RPC endpoint of the chain"
    )
    EXPECTED_CHAIN_ID: int = Field(default=10143, description="Chain id every batch must run on")
    CHAIN_NAME: str = Field(default="Monad Testnet", description="Human readable chain name")
    NATIVE_SYMBOL: str = Field(default="MON", description="Symbol of the native currency")
    WALLET_PRIVATE_KEY: str = Field(
        default="", description="Local signing key (empty uses the node's unlocked accounts)"
    )
    NATIVE_DECIMALS: int = Field(default=18, description="Decimals of the native currency")
    TOKEN_DECIMALS: int = Field(default=18, description="Decimals assumed for ERC-20 tokens")
    GAS_BUFFER_MULTIPLIER: float = Field(
        default=1.3, description="Multiplier applied to gas estimates before sending"
    )
    INTER_TRANSACTION_DELAY_SECONDS: float = Field(
        default=2.0, description="Pause between two submissions of the same batch"
    )
    PERSIST_BATCH_PROGRESS: bool = Field(
        default=True, description="Write partial results back to the record after every recipient"
    )
    RECORD_STORE_BACKEND: str = Field(
        default="database", description="Where batch records live: 'database' or 'memory'"
    )

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

# Database
_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None

Base = declarative_base()


def get_engine() -> Engine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
        _engine = create_engine(
            settings.DATABASE_URL,
            pool_pre_ping=True,
            echo=settings.DEBUG,
            connect_args=connect_args,
        )
    return _engine


def get_session() -> Session:
    global _SessionFactory  # noqa: PLW0603
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory()


def configure_engine(engine: Engine) -> None:
    """Point the session factory at another engine (used by tests and scripts)."""
    global _engine, _SessionFactory  # noqa: PLW0603
    _engine = engine
    _SessionFactory = sessionmaker(bind=engine, expire_on_commit=False)


def get_db():
    db = get_session()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        import logging
        logger = logging.getLogger("uvicorn.error")
        logger.error(f"Error en get_db: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()
