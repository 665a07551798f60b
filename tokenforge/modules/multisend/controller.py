import logging

from fastapi import APIRouter, Depends, HTTPException, status

from tokenforge.common.exceptions import PreconditionError, TerminalRecordError, ValidationError
from tokenforge.modules.multisend.dtos.multisend import (
    BatchOutcome,
    BatchSpec,
    MultisendCreate,
    MultisendResponse,
    MultisendUpdate,
    RecipientImportRequest,
    RecipientImportResponse,
)
from tokenforge.modules.multisend.services.batch_orchestrator import BatchOrchestrator
from tokenforge.modules.multisend.services.multisend_service import MultisendService
from tokenforge.modules.multisend.services.record_store import RecordStore, get_record_store
from tokenforge.modules.wallet.providers import Web3WalletProvider
from tokenforge.modules.wallet.transaction_submitter import TransactionSubmitter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/multisend", tags=["multisend"])

_record_example = {
    "id": "5f0c3a4e-8a51-4c1b-9f59-2f1c3c2a9b10",
    "sender_address": "0x1111111111111111111111111111111111111111",
    "recipients": [
        {"address": "0x2222222222222222222222222222222222222222", "amount": "1.5"},
        {"address": "0x3333333333333333333333333333333333333333", "amount": "2"},
    ],
    "total_amount": "3.5",
    "token_type": "native",
    "token_address": None,
    "token_symbol": "MON",
    "status": "partially_failed",
    "transaction_hashes": ["0x9b2f...e1"],
    "failed_addresses": ["0x3333333333333333333333333333333333333333"],
    "gas_used": "0",
    "created_at": "2024-01-15T10:30:00Z",
    "updated_at": "2024-01-15T10:30:04Z",
}


def get_multisend_service(store: RecordStore = Depends(get_record_store)) -> MultisendService:
    return MultisendService(store)


def get_transaction_submitter() -> TransactionSubmitter:
    return TransactionSubmitter(Web3WalletProvider())


def get_batch_orchestrator(
    store: RecordStore = Depends(get_record_store),
    submitter: TransactionSubmitter = Depends(get_transaction_submitter),
) -> BatchOrchestrator:
    return BatchOrchestrator(submitter, store)


@router.post(
    "",
    response_model=MultisendResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar un multisend",
    description="Crea un registro de multisend en estado pending. No envía ninguna transacción.",
    responses={
        201: {
            "description": "Registro creado exitosamente",
            "content": {"application/json": {"example": {**_record_example, "status": "pending"}}},
        },
        422: {"description": "Error de validación de datos"},
    },
)
def create_multisend(
    multisend: MultisendCreate,
    service: MultisendService = Depends(get_multisend_service),
):
    """
    Crear un registro de multisend.

    - **sender_address**: Cuenta que firma los envíos
    - **recipients**: Lista ordenada de `{address, amount}` (al menos uno)
    - **total_amount**: Suma de los montos al momento del envío
    - **token_type**: `native` o `erc20` (requiere **token_address**)
    """
    return service.create_multisend(multisend)


@router.get(
    "",
    response_model=list[MultisendResponse],
    summary="Listar multisends",
    description="Lista los registros del más reciente al más antiguo. Se puede filtrar por remitente.",
    responses={
        200: {
            "description": "Lista de registros obtenida exitosamente",
            "content": {"application/json": {"example": [_record_example]}},
        }
    },
)
def get_multisends(
    skip: int = 0,
    limit: int = 100,
    sender_address: str | None = None,
    service: MultisendService = Depends(get_multisend_service),
):
    """
    - **skip**: Número de registros a saltar
    - **limit**: Número máximo de registros a retornar
    - **sender_address**: Solo los lotes de esta cuenta (sin distinguir mayúsculas)
    """
    return service.get_multisends(skip=skip, limit=limit, sender_address=sender_address)


@router.post(
    "/batches",
    response_model=BatchOutcome,
    status_code=status.HTTP_201_CREATED,
    summary="Ejecutar un lote",
    description=(
        "Envía una transferencia por destinatario, en orden y de a una, con una pausa fija "
        "entre envíos. El registro se crea en pending antes del primer envío."
    ),
    responses={
        201: {
            "description": "Lote ejecutado; el estado indica cuántos envíos fallaron",
            "content": {
                "application/json": {
                    "example": {
                        "record_id": _record_example["id"],
                        "status": "partially_failed",
                        "transaction_hashes": ["0x9b2f...e1"],
                        "failed_addresses": ["0x3333333333333333333333333333333333333333"],
                    }
                }
            },
        },
        400: {"description": "Wallet no disponible, sin cuenta o en otra red"},
        422: {"description": "Destinatarios o token inválidos"},
    },
)
async def run_batch(
    spec: BatchSpec,
    orchestrator: BatchOrchestrator = Depends(get_batch_orchestrator),
):
    try:
        return await orchestrator.run_batch(spec)
    except PreconditionError as e:
        if isinstance(e.__cause__, ValidationError) or not spec.recipients:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
        logger.info(f"Lote rechazado antes de iniciar: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.post(
    "/recipients/import",
    response_model=RecipientImportResponse,
    summary="Importar destinatarios desde texto",
    description=(
        "Agrega una línea `address,amount` por destinatario. Las líneas inválidas o "
        "duplicadas se descartan sin error."
    ),
    responses={
        200: {"description": "Destinatarios agregados"},
        422: {"description": "Ninguna línea válida"},
    },
)
def import_recipients(request: RecipientImportRequest):
    try:
        return MultisendService.import_recipients(request)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": e.code, "message": str(e)},
        ) from e


@router.get(
    "/{record_id}",
    response_model=MultisendResponse,
    summary="Obtener un multisend por ID",
    responses={
        200: {
            "description": "Registro encontrado",
            "content": {"application/json": {"example": _record_example}},
        },
        404: {"description": "Registro no encontrado"},
    },
)
def get_multisend(
    record_id: str,
    service: MultisendService = Depends(get_multisend_service),
):
    multisend = service.get_multisend(record_id)
    if not multisend:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Multisend con ID {record_id} no encontrado",
        )
    return multisend


@router.put(
    "/{record_id}",
    response_model=MultisendResponse,
    summary="Actualizar un multisend",
    description="Actualiza estado y resultados. Solo se modifican los campos enviados.",
    responses={
        200: {"description": "Registro actualizado exitosamente"},
        404: {"description": "Registro no encontrado"},
        409: {"description": "El registro ya terminó y no admite cambios de estado o resultados"},
        422: {"description": "Error de validación de datos"},
    },
)
def update_multisend(
    record_id: str,
    multisend: MultisendUpdate,
    service: MultisendService = Depends(get_multisend_service),
):
    try:
        updated = service.update_multisend(record_id, multisend)
    except TerminalRecordError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": e.code, "message": str(e)},
        ) from e
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": e.code, "message": str(e)},
        ) from e
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Multisend con ID {record_id} no encontrado",
        )
    return updated
