"""Task Executor - контракт выполнения задачи sub-агента.

Оркестратор ничего не знает о том, как выполняется работа: он получает
executor извне (dependency injection) и только вызывает execute().

Example:
    >>> async def run_subagent(task: SubAgentTask) -> str:
    ...     return await llm.complete(task.instructions, task.input)
    >>> orchestrator.set_executor(FunctionExecutor(run_subagent))

"""

from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from subagent_orchestrator.services.task.models import SubAgentTask
from subagent_orchestrator.shared.logging import get_logger

logger = get_logger()

ExecuteFn = Callable[[SubAgentTask], Awaitable[str]]


@runtime_checkable
class SubAgentExecutor(Protocol):
    """Executor, выполняющий задачу sub-агента.

    Контракт:
    - execute() должен рано или поздно завершиться (результатом или исключением)
    - результат - строка
    - task - копия задачи, её изменение не влияет на реестр оркестратора
    - единственный контракт на вход: task.instructions и task.input
    """

    async def execute(self, task: SubAgentTask) -> str:
        """Выполнить задачу и вернуть результат."""
        ...


class FunctionExecutor:
    """Адаптер, превращающий async функцию в SubAgentExecutor.

    Attributes:
        fn: Функция, выполняющая задачу
        name: Имя executor'а для логов

    """

    def __init__(self, fn: ExecuteFn, name: str | None = None) -> None:
        """Инициализировать FunctionExecutor.

        Args:
            fn: Async функция (task) -> str
            name: Имя для логов, по умолчанию имя функции

        """
        self.fn = fn
        self.name = name or getattr(fn, "__name__", type(fn).__name__)

    async def execute(self, task: SubAgentTask) -> str:
        """Выполнить задачу через обёрнутую функцию.

        Args:
            task: Копия задачи

        Returns:
            Результат функции

        """
        logger.debug("Вызов executor функции", executor=self.name, task_id=task.id)
        return await self.fn(task)

    def __repr__(self) -> str:
        return f"FunctionExecutor({self.name})"
