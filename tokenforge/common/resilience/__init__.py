from tokenforge.common.resilience.circuit_breaker import (
    db_circuit_breaker,
    get_db_circuit_breaker,
)
from tokenforge.common.resilience.retry import DB_RETRY_EXCEPTIONS, retry_db_operation

__all__ = [
    "DB_RETRY_EXCEPTIONS",
    "db_circuit_breaker",
    "get_db_circuit_breaker",
    "retry_db_operation",
]
