"""
Circuit breaker para no seguir golpeando una base de datos que está fallando.
Usa pybreaker; solo los errores de conexión cuentan como fallos.
"""
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from pybreaker import CircuitBreaker, CircuitBreakerError

from tokenforge.common.resilience.retry import DB_RETRY_EXCEPTIONS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_not_db_failure(exc: BaseException) -> bool:
    return not isinstance(exc, DB_RETRY_EXCEPTIONS)


_db_circuit_breaker = CircuitBreaker(
    fail_max=5,  # Abre el circuito después de 5 fallos consecutivos
    reset_timeout=60,  # Mantiene abierto por 60 segundos
    exclude=[_is_not_db_failure],
    name="DatabaseCircuitBreaker",
)


def get_db_circuit_breaker() -> CircuitBreaker:
    return _db_circuit_breaker


def circuit_breaker(
    breaker: CircuitBreaker,
    fallback_func: Callable[[Exception], Any] | None = None,
):
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return breaker.call(func, *args, **kwargs)
            except CircuitBreakerError as e:
                logger.warning(f"Circuit breaker abierto para {func.__name__}: {e}")
                if fallback_func:
                    return fallback_func(e)
                raise

        return wrapper

    return decorator


def db_circuit_breaker(fallback_func: Callable[[Exception], Any] | None = None):
    return circuit_breaker(_db_circuit_breaker, fallback_func)
