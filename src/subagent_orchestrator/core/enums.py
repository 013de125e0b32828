"""Enums для Sub-Agent Orchestrator.

Централизованное хранилище всех enum'ов проекта.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Статус задачи sub-агента."""

    PENDING = "pending"  # Создана, ещё не запущена
    RUNNING = "running"  # Executor выполняет задачу
    COMPLETED = "completed"  # Executor вернул результат
    FAILED = "failed"  # Executor упал с ошибкой
    CANCELLED = "cancelled"  # Отменена пользователем или системой
    TIMEOUT = "timeout"  # Executor не уложился в таймаут

    @property
    def is_terminal(self) -> bool:
        """Терминальный ли статус (дальнейших переходов нет)."""
        return self in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        """Можно ли ещё отменить задачу в этом статусе."""
        return self in (TaskStatus.PENDING, TaskStatus.RUNNING)


TERMINAL_STATUSES = frozenset(
    {
        TaskStatus.COMPLETED,
        TaskStatus.FAILED,
        TaskStatus.CANCELLED,
        TaskStatus.TIMEOUT,
    }
)


class LogFormat(str, Enum):
    """Формат вывода логов."""

    JSON = "json"
    TEXT = "text"


class AppEnvironment(str, Enum):
    """Окружение приложения."""

    LOCAL = "local"  # Локальная разработка
    DEV = "dev"  # Dev сборка
    PROD = "prod"  # Production сборка


class TaskErrorCode(str, Enum):
    """Стабильные коды ошибок, которые видит вызывающий код в TaskResult."""

    NO_EXECUTOR = "NO_EXECUTOR"
    CONCURRENCY_LIMIT_EXCEEDED = "CONCURRENCY_LIMIT_EXCEEDED"
    INVALID_INSTRUCTIONS = "INVALID_INSTRUCTIONS"
    INVALID_TIMEOUT = "INVALID_TIMEOUT"
    INVALID_TOOL_INPUT = "INVALID_TOOL_INPUT"
    EXECUTION_FAILURE = "EXECUTION_FAILURE"
    EXECUTION_TIMEOUT = "EXECUTION_TIMEOUT"
    CANCELLATION_REQUESTED = "CANCELLATION_REQUESTED"
