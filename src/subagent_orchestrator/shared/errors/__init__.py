"""Shared errors module.

Система обработки ошибок оркестратора.
"""

from subagent_orchestrator.shared.errors.base import AppException
from subagent_orchestrator.shared.errors.context import (
    get_task_id,
    reset_task_id,
    set_task_id,
    task_id_var,
)
from subagent_orchestrator.shared.errors.domain_errors import (
    CancellationRequestedError,
    ConcurrencyLimitExceededError,
    ConfigurationError,
    ExecutionFailedError,
    ExecutionTimeoutError,
    InvalidInputError,
    InvalidInstructionsError,
    InvalidTimeoutError,
    InvalidToolInputError,
    NoExecutorError,
)
from subagent_orchestrator.shared.errors.schemas import ErrorDetail, ErrorResponse

__all__ = [
    # Base
    "AppException",
    # Context
    "task_id_var",
    "get_task_id",
    "set_task_id",
    "reset_task_id",
    # Domain errors
    "ConfigurationError",
    "NoExecutorError",
    "ConcurrencyLimitExceededError",
    "InvalidInputError",
    "InvalidInstructionsError",
    "InvalidTimeoutError",
    "InvalidToolInputError",
    "ExecutionFailedError",
    "ExecutionTimeoutError",
    "CancellationRequestedError",
    # Schemas
    "ErrorDetail",
    "ErrorResponse",
]
