"""Domain errors.

Доменные исключения оркестратора задач.

Все они поднимаются внутри TaskOrchestrator и конвертируются в TaskResult
на его границе, наружу не пробрасываются.
"""

from subagent_orchestrator.core.constants import TASK_CANCELLED_MESSAGE, TASK_TIMEOUT_MESSAGE
from subagent_orchestrator.core.enums import TaskErrorCode
from subagent_orchestrator.shared.errors.base import AppException


class ConfigurationError(AppException):
    """Оркестратор не сконфигурирован."""

    code = "CONFIGURATION_ERROR"


class NoExecutorError(ConfigurationError):
    """Executor не установлен. Установите executor перед запуском задач."""

    code = TaskErrorCode.NO_EXECUTOR.value


class ConcurrencyLimitExceededError(AppException):
    """Достигнут лимит одновременно выполняемых sub-агентов."""

    code = TaskErrorCode.CONCURRENCY_LIMIT_EXCEEDED.value

    def __init__(self, max_concurrent: int) -> None:
        """Инициализация исключения.

        Args:
            max_concurrent: Текущий лимит параллельных задач.

        """
        super().__init__(
            message=(
                f"Достигнут лимит одновременно выполняемых sub-агентов ({max_concurrent}). "
                "Дождитесь завершения запущенных задач."
            ),
            details={"max_concurrent": max_concurrent},
        )


class InvalidInputError(AppException):
    """Некорректные входные данные задачи."""

    code = "INVALID_INPUT"


class InvalidInstructionsError(InvalidInputError):
    """Инструкции обязательны для запуска задачи."""

    code = TaskErrorCode.INVALID_INSTRUCTIONS.value


class InvalidTimeoutError(InvalidInputError):
    """Некорректный таймаут задачи."""

    code = TaskErrorCode.INVALID_TIMEOUT.value

    def __init__(self, timeout_ms: int, reason: str) -> None:
        """Инициализация исключения.

        Args:
            timeout_ms: Переданный таймаут в миллисекундах.
            reason: Почему таймаут отклонён.

        """
        super().__init__(
            message=reason,
            details={"field": "timeout", "timeout_ms": timeout_ms},
        )


class InvalidToolInputError(InvalidInputError):
    """Некорректные аргументы вызова task tool."""

    code = TaskErrorCode.INVALID_TOOL_INPUT.value


class ExecutionFailedError(AppException):
    """Executor завершился с ошибкой."""

    code = TaskErrorCode.EXECUTION_FAILURE.value

    def __init__(self, task_id: str, error: str) -> None:
        """Инициализация исключения.

        Args:
            task_id: Идентификатор задачи.
            error: Сообщение исходной ошибки executor'а.

        """
        super().__init__(message=error, task_id=task_id)


class ExecutionTimeoutError(AppException):
    """Задача превысила таймаут."""

    code = TaskErrorCode.EXECUTION_TIMEOUT.value

    def __init__(self, task_id: str, timeout_ms: int) -> None:
        """Инициализация исключения.

        Args:
            task_id: Идентификатор задачи.
            timeout_ms: Таймаут, который был превышен.

        """
        super().__init__(
            message=TASK_TIMEOUT_MESSAGE,
            details={"timeout_ms": timeout_ms},
            task_id=task_id,
        )


class CancellationRequestedError(AppException):
    """Задача была отменена."""

    code = TaskErrorCode.CANCELLATION_REQUESTED.value

    def __init__(self, task_id: str) -> None:
        """Инициализация исключения.

        Args:
            task_id: Идентификатор задачи.

        """
        super().__init__(message=TASK_CANCELLED_MESSAGE, task_id=task_id)
