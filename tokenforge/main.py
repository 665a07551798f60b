import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tokenforge.configuration.config import Base, get_engine, settings
from tokenforge.modules.deployments.controller import router as deployments_router
from tokenforge.modules.deployments.entities import DeploymentEntity  # noqa: F401
from tokenforge.modules.multisend.controller import router as multisend_router
from tokenforge.modules.multisend.entities import MultisendEntity  # noqa: F401

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

description = f"""
## TokenForge API

Envío de tokens a muchos destinatarios y registro de despliegues de contratos en
{settings.CHAIN_NAME} (chain id {settings.EXPECTED_CHAIN_ID}).

### Features

* **Multisend**: one transfer per recipient, strictly in order, with a durable record
* **Native and ERC-20** transfers through a pluggable wallet provider
* **Bulk import** of `address,amount` lines
* **Deployments**: contract deployment records and cost estimates
"""

tags_metadata = [
    {
        "name": "multisend",
        "description": "Run batches of transfers and query their records.",
    },
    {
        "name": "deployments",
        "description": "Contract deployment records and gas estimates.",
    },
    {
        "name": "health",
        "description": "Health endpoints to verify that the service is working.",
    },
]

logger = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        Base.metadata.create_all(bind=get_engine())
        logger.info("Tablas de la base de datos verificadas")
    except Exception as e:
        logger.error(f"Error al crear las tablas: {str(e)}", exc_info=True)

    logger.info(
        "Red esperada: %s (chain id %s), backend de registros: %s",
        settings.CHAIN_NAME,
        settings.EXPECTED_CHAIN_ID,
        settings.RECORD_STORE_BACKEND,
    )
    docs_path = app.docs_url or "/docs"
    logger.info("Swagger UI disponible en http://%s:%s%s", settings.HOST, settings.PORT, docs_path)
    yield
    logger.info("Aplicación detenida")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=description,
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    license_info={
        "name": "MIT",
    },
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(multisend_router, prefix="/api/v1")
app.include_router(deployments_router, prefix="/api/v1")


@app.get("/", tags=["health"])
def root():
    """Health endpoint to verify that the service is working."""
    return {
        "message": f"{settings.APP_NAME} está funcionando",
        "version": settings.APP_VERSION,
    }


@app.get("/health", tags=["health"])
def health_check():
    """Health endpoint to verify that the service is working."""
    return {"status": "healthy", "chain_id": settings.EXPECTED_CHAIN_ID}
