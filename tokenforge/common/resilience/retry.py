"""
Módulo de retry para operaciones de base de datos que pueden fallar temporalmente.
Usa tenacity para implementar estrategias de reintento con backoff exponencial.

Las transferencias on-chain nunca pasan por aquí: un envío fallido es definitivo
para ese destinatario dentro de un batch.
"""
import logging
from typing import TypeVar

from psycopg2 import OperationalError as Psycopg2OperationalError
from sqlalchemy.exc import DisconnectionError, OperationalError, TimeoutError
from tenacity import (
    after_log,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Excepciones de base de datos que deben ser reintentadas
DB_RETRY_EXCEPTIONS = (
    OperationalError,
    DisconnectionError,
    TimeoutError,
    Psycopg2OperationalError,
    ConnectionError,
)


def retry_db_operation(
    max_attempts: int = 3,
    initial_wait: float = 1.0,
    max_wait: float = 10.0,
    multiplier: float = 2.0,
):
    """
    Decorador para reintentar operaciones de base de datos que pueden fallar.

    Args:
        max_attempts: Número máximo de intentos (default: 3)
        initial_wait: Tiempo de espera inicial en segundos (default: 1.0)
        max_wait: Tiempo máximo de espera en segundos (default: 10.0)
        multiplier: Multiplicador para backoff exponencial (default: 2.0)

    Returns:
        Decorador que envuelve la función con lógica de retry
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=multiplier,
            min=initial_wait,
            max=max_wait,
        ),
        retry=retry_if_exception_type(DB_RETRY_EXCEPTIONS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.ERROR),
        reraise=True,
    )
