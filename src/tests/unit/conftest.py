"""Pytest configuration для unit тестов."""

import asyncio
import sys
from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from loguru import logger

from subagent_orchestrator.services.task import SubAgentTask, TaskOrchestrator


class GatedExecutor:
    """Executor, который завершается только по команде теста.

    Attributes:
        started: Выставляется при первом вызове execute()
        release: Тест выставляет, чтобы executor вернул результат
        finished: Выставляется после возврата результата
        calls: Копии задач, полученные executor'ом

    """

    def __init__(self, result: str = "done") -> None:
        self.result = result
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.finished = asyncio.Event()
        self.calls: list[SubAgentTask] = []

    async def execute(self, task: SubAgentTask) -> str:
        self.calls.append(task)
        self.started.set()
        await self.release.wait()
        self.finished.set()
        return self.result


@pytest.fixture
def make_executor() -> Callable[..., MagicMock]:
    """Фабрика mock executor'ов с задержкой, результатом или ошибкой."""

    def factory(
        result: object = "done",
        delay: float = 0.01,
        error: BaseException | None = None,
    ) -> MagicMock:
        async def execute(task: SubAgentTask) -> object:
            await asyncio.sleep(delay)
            if error is not None:
                raise error
            return result

        executor = MagicMock()
        executor.execute = AsyncMock(side_effect=execute)
        return executor

    return factory


@pytest.fixture
def gated_executor() -> GatedExecutor:
    """Executor, управляемый тестом через asyncio.Event."""
    return GatedExecutor()


@pytest.fixture
def broadcaster() -> MagicMock:
    """Mock broadcaster, записывающий все копии задач."""
    return MagicMock()


@pytest.fixture
def orchestrator(broadcaster: MagicMock) -> TaskOrchestrator:
    """Оркестратор с лимитом 3 и mock broadcaster'ом, без executor'а."""
    orchestrator = TaskOrchestrator(max_concurrent=3, default_timeout_ms=5_000)
    orchestrator.set_broadcaster(broadcaster)
    return orchestrator


@pytest.fixture
def log_messages() -> Iterator[list[dict]]:
    """Перехват записей Loguru для проверки логирования."""
    records: list[dict] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def restore_logger() -> Iterator[None]:
    """Вернуть Loguru в состояние по умолчанию после теста setup_logging()."""
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def broadcast_statuses(broadcaster: MagicMock) -> Callable[..., list[str]]:
    """Статусы задач из вызовов broadcaster'а в порядке вызовов."""

    def statuses(task_id: str | None = None) -> list[str]:
        return [
            call.args[0].status.value
            for call in broadcaster.call_args_list
            if task_id is None or call.args[0].id == task_id
        ]

    return statuses
