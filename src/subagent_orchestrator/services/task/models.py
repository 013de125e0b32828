"""Модели данных задач sub-агентов.

SubAgentTask - запись жизненного цикла одной задачи.
TaskResult - структурированный результат spawn() для вызывающего кода.
TaskSummary - агрегированные счётчики по статусам.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from subagent_orchestrator.core.enums import TaskStatus
from subagent_orchestrator.shared.errors import (
    AppException,
    CancellationRequestedError,
    ExecutionFailedError,
    ExecutionTimeoutError,
)


def utc_now() -> datetime:
    """Текущее время в UTC."""
    return datetime.now(UTC)


class SubAgentTask(BaseModel):
    """Запись жизненного цикла задачи sub-агента.

    Экземпляры в реестре принадлежат TaskStateManager. Наружу (вызывающему
    коду, broadcaster'у, executor'у) отдаются только копии из snapshot().
    """

    id: str = Field(..., description="Уникальный идентификатор задачи")
    instructions: str = Field(..., min_length=1, description="Инструкции для sub-агента")
    input: str | None = Field(default=None, description="Дополнительные входные данные")
    description: str | None = Field(default=None, description="Краткое описание для логов и UI")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Статус задачи")
    created_at: datetime = Field(default_factory=utc_now, description="Время создания")
    started_at: datetime | None = Field(default=None, description="Время перехода в running")
    completed_at: datetime | None = Field(default=None, description="Время перехода в терминальный статус")
    result: str | None = Field(default=None, description="Результат (только для completed)")
    error: str | None = Field(default=None, description="Причина failed/timeout/cancelled")

    @property
    def is_terminal(self) -> bool:
        """Находится ли задача в терминальном статусе."""
        return self.status.is_terminal

    def snapshot(self) -> "SubAgentTask":
        """Независимая копия задачи для передачи за пределы реестра."""
        return self.model_copy(deep=True)


class TaskResult(BaseModel):
    """Результат запуска задачи.

    Все исходы spawn() (успех, отказ в допуске, ошибка executor'а, таймаут,
    отмена) возвращаются этой моделью, исключения наружу не пробрасываются.
    """

    success: bool = Field(..., description="Задача завершилась с результатом")
    task_id: str = Field(default="", description="ID задачи, пустой если задача не создавалась")
    status: TaskStatus = Field(..., description="Итоговый статус задачи")
    result: str | None = Field(default=None, description="Результат executor'а")
    error: str | None = Field(default=None, description="Сообщение об ошибке")
    error_code: str | None = Field(default=None, description="Код ошибки из таксономии")
    timed_out: bool = Field(default=False, description="Задача завершилась по таймауту")
    details: dict[str, Any] = Field(default_factory=dict, description="Структурированные детали ошибки")

    @classmethod
    def from_error(
        cls,
        error: AppException,
        task_id: str = "",
        status: TaskStatus = TaskStatus.FAILED,
    ) -> "TaskResult":
        """Собрать неуспешный результат из доменного исключения.

        Код, сообщение и details берутся из error.to_response(). task_id
        передаётся явно: отказ в допуске не создаёт задачу, даже если spawn()
        вызван изнутри executor'а другой задачи.

        Args:
            error: Доменное исключение
            task_id: ID задачи (пустой, если задача не была создана)
            status: Статус, который увидит вызывающий код

        Returns:
            TaskResult с success=False

        """
        response = error.to_response()
        return cls(
            success=False,
            task_id=task_id,
            status=status,
            error=response.message,
            error_code=response.error,
            timed_out=isinstance(error, ExecutionTimeoutError),
            details=response.details,
        )

    @classmethod
    def from_task(cls, task: SubAgentTask, timeout_ms: int = 0) -> "TaskResult":
        """Собрать результат по терминальному состоянию задачи.

        Args:
            task: Задача в терминальном статусе
            timeout_ms: Таймаут задачи, попадает в details ошибки таймаута

        Returns:
            TaskResult, соответствующий статусу задачи

        Raises:
            ValueError: Если задача ещё не завершена

        """
        if task.status is TaskStatus.COMPLETED:
            return cls(success=True, task_id=task.id, status=task.status, result=task.result)

        error: AppException
        if task.status is TaskStatus.CANCELLED:
            error = CancellationRequestedError(task.id)
        elif task.status is TaskStatus.TIMEOUT:
            error = ExecutionTimeoutError(task.id, timeout_ms)
        elif task.status is TaskStatus.FAILED:
            error = ExecutionFailedError(task.id, task.error or "")
        else:
            msg = f"Задача {task.id} ещё не завершена (status={task.status.value})"
            raise ValueError(msg)

        return cls.from_error(error, task_id=task.id, status=task.status)


class TaskSummary(BaseModel):
    """Счётчики задач по статусам."""

    total: int = 0
    pending: int = 0
    running: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0
    timed_out: int = 0
