"""Кооперативная отмена задач.

Оркестратор не прерывает executor принудительно: при отмене или таймауте он
перестаёт ждать результат и выставляет CancelToken задачи. Executor, которому
важно не тратить ресурсы впустую, может проверять токен сам:

Example:
    >>> async def execute(self, task: SubAgentTask) -> str:
    ...     token = current_cancel_token()
    ...     for step in plan(task):
    ...         if token is not None and token.cancelled:
    ...             return "stopped"
    ...         await step()

"""

import asyncio
from contextvars import ContextVar


class CancelToken:
    """Сигнал отмены одной задачи.

    Выставляется один раз и больше не сбрасывается.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        """Запрошена ли отмена."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        """Причина отмены: "cancelled" или "timeout"."""
        return self._reason

    def cancel(self, reason: str) -> None:
        """Запросить отмену. Повторные вызовы игнорируются.

        Args:
            reason: Причина отмены

        """
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> None:
        """Дождаться запроса отмены."""
        await self._event.wait()


# Токен задачи, которую выполняет текущий executor
_cancel_token_var: ContextVar[CancelToken | None] = ContextVar("cancel_token", default=None)


def current_cancel_token() -> CancelToken | None:
    """Получить CancelToken задачи, внутри executor'а которой выполняется код.

    Returns:
        CancelToken или None вне выполнения задачи

    """
    return _cancel_token_var.get()


def bind_cancel_token(token: CancelToken) -> None:
    """Сделать token текущим для контекста executor'а.

    Вызывается оркестратором внутри отдельной asyncio.Task executor'а, у
    которой собственная копия контекста, поэтому значение не утекает наружу.

    Args:
        token: Токен выполняемой задачи

    """
    _cancel_token_var.set(token)
