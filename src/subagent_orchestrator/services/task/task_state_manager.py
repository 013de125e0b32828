"""Task State Manager - реестр задач и их переходы состояний.

Отвечает ТОЛЬКО за реестр задач, state machine и broadcast изменений.
НЕ отвечает за допуск задач, executor и таймауты (это TaskOrchestrator).

State machine:
    pending -> running -> completed | failed | timeout
    pending | running -> cancelled

Все методы синхронные: между проверкой статуса и его изменением нет точек
переключения event loop'а, поэтому блокировки не нужны.

Example:
    >>> manager = TaskStateManager()
    >>> task = manager.create("Проанализировать код", input=source)
    >>> manager.mark_as_running(task)
    >>> manager.mark_as_completed(task, "Найдено 2 проблемы")

"""

import uuid
from collections.abc import Callable
from datetime import datetime

from subagent_orchestrator.core.constants import (
    TASK_CANCELLED_MESSAGE,
    TASK_ID_PREFIX,
    TASK_TIMEOUT_MESSAGE,
)
from subagent_orchestrator.core.enums import TaskStatus
from subagent_orchestrator.services.task.models import SubAgentTask, TaskSummary, utc_now
from subagent_orchestrator.shared.logging import get_logger

logger = get_logger()

TaskBroadcaster = Callable[[SubAgentTask], None]

_SUMMARY_FIELDS = {
    TaskStatus.PENDING: "pending",
    TaskStatus.RUNNING: "running",
    TaskStatus.COMPLETED: "completed",
    TaskStatus.FAILED: "failed",
    TaskStatus.CANCELLED: "cancelled",
    TaskStatus.TIMEOUT: "timed_out",
}


def generate_task_id() -> str:
    """Сгенерировать уникальный ID задачи."""
    return f"{TASK_ID_PREFIX}{uuid.uuid4().hex}"


def _not_before(previous: datetime | None) -> datetime:
    """Текущее время, но не раньше previous (временные метки не откатываются)."""
    now = utc_now()
    if previous is not None and now < previous:
        return previous
    return now


class TaskStateManager:
    """Manager реестра задач sub-агентов.

    Инвариант: running_count всегда равен числу задач реестра в статусе
    running. Счётчик ведётся инкрементально на входе в running и выходе из
    него, а не пересчитывается при чтении.

    Attributes:
        broadcaster: Callback, получающий копию задачи после каждого изменения

    """

    def __init__(self, broadcaster: TaskBroadcaster | None = None) -> None:
        """Инициализировать TaskStateManager.

        Args:
            broadcaster: Callback для трансляции изменений (опционально)

        """
        self._tasks: dict[str, SubAgentTask] = {}
        self._running_count = 0
        self.broadcaster = broadcaster

    @property
    def running_count(self) -> int:
        """Число задач в статусе running."""
        return self._running_count

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    # ------------------------------------------------------------------
    # Переходы состояний
    # ------------------------------------------------------------------

    def create(
        self,
        instructions: str,
        input: str | None = None,
        description: str | None = None,
    ) -> SubAgentTask:
        """Создать задачу в статусе pending и зарегистрировать её.

        Args:
            instructions: Уже нормализованные (trim) инструкции
            input: Дополнительные данные
            description: Краткое описание для логов и UI

        Returns:
            Задача из реестра

        """
        task_id = generate_task_id()
        while task_id in self._tasks:
            task_id = generate_task_id()

        task = SubAgentTask(
            id=task_id,
            instructions=instructions,
            input=input,
            description=description,
        )
        self._tasks[task_id] = task

        logger.debug("Задача зарегистрирована", task_id=task_id, description=description)
        self._broadcast(task)
        return task

    def mark_as_running(self, task: SubAgentTask) -> bool:
        """Перевести задачу pending -> running.

        Args:
            task: Задача из реестра

        Returns:
            True, если переход выполнен

        """
        if task.status is not TaskStatus.PENDING:
            logger.warning(
                "Пропуск перехода в running",
                task_id=task.id,
                status=task.status.value,
            )
            return False

        task.status = TaskStatus.RUNNING
        task.started_at = _not_before(task.created_at)
        if self._is_tracked(task):
            self._running_count += 1

        logger.debug("Задача отмечена как running", task_id=task.id)
        self._broadcast(task)
        return True

    def mark_as_completed(self, task: SubAgentTask, result: str) -> bool:
        """Перевести задачу running -> completed.

        Args:
            task: Задача из реестра
            result: Результат executor'а

        Returns:
            True, если переход выполнен (False - задача уже не running)

        """
        return self._finish(task, TaskStatus.COMPLETED, result=result)

    def mark_as_failed(self, task: SubAgentTask, error_message: str) -> bool:
        """Перевести задачу running -> failed.

        Args:
            task: Задача из реестра
            error_message: Сообщение об ошибке executor'а

        Returns:
            True, если переход выполнен

        """
        return self._finish(task, TaskStatus.FAILED, error=error_message)

    def mark_as_timeout(self, task: SubAgentTask) -> bool:
        """Перевести задачу running -> timeout.

        Args:
            task: Задача из реестра

        Returns:
            True, если переход выполнен

        """
        return self._finish(task, TaskStatus.TIMEOUT, error=TASK_TIMEOUT_MESSAGE)

    def mark_as_cancelled(self, task: SubAgentTask) -> bool:
        """Перевести задачу pending | running -> cancelled.

        Args:
            task: Задача из реестра

        Returns:
            True, если задача была отменена; False, если она уже завершена

        """
        if not task.status.is_active:
            return False

        was_running = task.status is TaskStatus.RUNNING
        task.status = TaskStatus.CANCELLED
        task.completed_at = _not_before(task.started_at or task.created_at)
        task.error = TASK_CANCELLED_MESSAGE
        if was_running and self._is_tracked(task):
            self._running_count -= 1

        logger.debug("Задача отмечена как cancelled", task_id=task.id, was_running=was_running)
        self._broadcast(task)
        return True

    def _finish(
        self,
        task: SubAgentTask,
        status: TaskStatus,
        result: str | None = None,
        error: str | None = None,
    ) -> bool:
        """Общий переход running -> терминальный статус.

        Задача, уже не находящаяся в running (например, отменённая пока
        executor работал), не изменяется: запоздалый исход игнорируется.
        """
        if task.status is not TaskStatus.RUNNING:
            logger.debug(
                "Запоздалый исход задачи проигнорирован",
                task_id=task.id,
                status=task.status.value,
                ignored=status.value,
            )
            return False

        task.status = status
        task.completed_at = _not_before(task.started_at)
        task.result = result
        task.error = error
        # Задача, брошенная через clear_all(), уже не учитывается в счётчике
        if self._is_tracked(task):
            self._running_count -= 1

        logger.debug("Задача отмечена как " + status.value, task_id=task.id)
        self._broadcast(task)
        return True

    # ------------------------------------------------------------------
    # Запросы
    # ------------------------------------------------------------------

    def get(self, task_id: str) -> SubAgentTask | None:
        """Получить задачу из реестра (живой объект, только для оркестратора).

        Args:
            task_id: ID задачи

        Returns:
            Задача или None

        """
        return self._tasks.get(task_id)

    def list_tasks(self, status: TaskStatus | None = None) -> list[SubAgentTask]:
        """Копии задач реестра в порядке создания.

        Args:
            status: Фильтр по статусу (опционально)

        Returns:
            Список копий задач

        """
        return [
            task.snapshot()
            for task in self._tasks.values()
            if status is None or task.status is status
        ]

    def summary(self) -> TaskSummary:
        """Посчитать задачи по статусам."""
        summary = TaskSummary(total=len(self._tasks))
        for task in self._tasks.values():
            field = _SUMMARY_FIELDS[task.status]
            setattr(summary, field, getattr(summary, field) + 1)
        return summary

    # ------------------------------------------------------------------
    # Очистка
    # ------------------------------------------------------------------

    def clear_finished(self) -> int:
        """Удалить задачи в терминальных статусах.

        Returns:
            Количество удалённых задач

        """
        finished = [task_id for task_id, task in self._tasks.items() if task.is_terminal]
        for task_id in finished:
            del self._tasks[task_id]

        logger.debug("Завершённые задачи удалены", cleared=len(finished))
        return len(finished)

    def clear_all(self) -> None:
        """Очистить реестр полностью, включая выполняемые задачи."""
        orphaned = self._running_count
        self._tasks.clear()
        self._running_count = 0

        if orphaned:
            logger.warning("Реестр очищен при выполняющихся задачах", orphaned=orphaned)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _is_tracked(self, task: SubAgentTask) -> bool:
        """Находится ли именно этот объект задачи в реестре."""
        return self._tasks.get(task.id) is task

    def _broadcast(self, task: SubAgentTask) -> None:
        """Отправить копию задачи broadcaster'у.

        Ошибка broadcaster'а логируется и не влияет ни на состояние задачи,
        ни на её выполнение.
        """
        if self.broadcaster is None:
            return

        try:
            self.broadcaster(task.snapshot())
        except Exception as e:
            logger.exception(
                "Ошибка broadcaster'а",
                task_id=task.id,
                status=task.status.value,
                error=str(e),
            )
