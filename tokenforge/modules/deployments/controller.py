from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tokenforge.common.repositories import get_db
from tokenforge.modules.deployments.dtos.deployment import (
    DeploymentCreate,
    DeploymentEstimateRequest,
    DeploymentEstimateResponse,
    DeploymentResponse,
    DeploymentUpdate,
)
from tokenforge.modules.deployments.services.deployments_service import (
    DeploymentsService,
    estimate_deployment_cost,
)

router = APIRouter(prefix="/deployments", tags=["deployments"])


@router.post(
    "",
    response_model=DeploymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar un despliegue",
    description="Registra un despliegue de contrato en estado pending.",
    responses={
        201: {"description": "Despliegue registrado exitosamente"},
        422: {"description": "Error de validación de datos"},
    },
)
def create_deployment(
    deployment: DeploymentCreate,
    db: Session = Depends(get_db),
):
    """
    - **contract_type**: `erc20`, `erc721` o `erc1155`
    - **contract_name** / **contract_symbol**: requeridos
    - **deployer_address**: cuenta que despliega
    """
    service = DeploymentsService(db)
    return service.create_deployment(deployment)


@router.get(
    "",
    response_model=list[DeploymentResponse],
    summary="Listar despliegues",
    description="Lista paginada, del más reciente al más antiguo.",
)
def get_deployments(
    skip: int = 0,
    limit: int = 100,
    deployer_address: str | None = None,
    db: Session = Depends(get_db),
):
    service = DeploymentsService(db)
    return service.get_deployments(skip=skip, limit=limit, deployer_address=deployer_address)


@router.post(
    "/estimate",
    response_model=DeploymentEstimateResponse,
    summary="Estimar costo de despliegue",
    description="Límite de gas fijo por tipo de contrato a 20 gwei.",
    responses={
        200: {
            "description": "Estimación calculada",
            "content": {
                "application/json": {
                    "example": {
                        "gas_limit": 1500000,
                        "gas_price": "20000000000",
                        "gas_cost": "30000000000000000",
                        "estimated_cost": "0.0300",
                        "native_symbol": "MON",
                    }
                }
            },
        }
    },
)
def estimate_deployment(request: DeploymentEstimateRequest):
    return estimate_deployment_cost(request.contract_type)


@router.get(
    "/{deployment_id}",
    response_model=DeploymentResponse,
    summary="Obtener un despliegue por ID",
    responses={404: {"description": "Despliegue no encontrado"}},
)
def get_deployment(
    deployment_id: str,
    db: Session = Depends(get_db),
):
    service = DeploymentsService(db)
    deployment = service.get_deployment(deployment_id)
    if not deployment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Despliegue con ID {deployment_id} no encontrado",
        )
    return deployment


@router.put(
    "/{deployment_id}",
    response_model=DeploymentResponse,
    summary="Actualizar un despliegue",
    description="Registra la dirección, el hash o el estado final del despliegue.",
    responses={
        404: {"description": "Despliegue no encontrado"},
        422: {"description": "Error de validación de datos"},
    },
)
def update_deployment(
    deployment_id: str,
    deployment: DeploymentUpdate,
    db: Session = Depends(get_db),
):
    service = DeploymentsService(db)
    updated = service.update_deployment(deployment_id, deployment)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Despliegue con ID {deployment_id} no encontrado",
        )
    return updated
