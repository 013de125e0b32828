"""Интеграционные сценарии оркестратора.

Executor'ы с реальными задержками, без mock'ов: проверяется поведение
event loop'а целиком (параллельные spawn(), таймауты, отмена).
"""

import asyncio

import pytest

from subagent_orchestrator import (
    FunctionExecutor,
    SubAgentTask,
    TaskOrchestrator,
    TaskStatus,
    create_task_handler,
    create_task_orchestrator,
    current_cancel_token,
)
from subagent_orchestrator.core.config import TaskSettings


def sleeping_executor(delay: float, result: str = "done") -> FunctionExecutor:
    """Executor, отвечающий через delay секунд."""

    async def run(task: SubAgentTask) -> str:
        await asyncio.sleep(delay)
        return result

    return FunctionExecutor(run, name=f"sleep-{delay}")


@pytest.mark.integration
class TestOrchestratorScenarios:
    """Сквозные сценарии жизненного цикла задач."""

    @pytest.mark.asyncio
    async def test_simple_task(self) -> None:
        """Задача выполняется и остаётся в реестре как completed."""
        statuses: list[str] = []
        orchestrator = create_task_orchestrator(
            executor=sleeping_executor(0.01, "done"),
            broadcaster=lambda task: statuses.append(task.status.value),
        )

        result = await orchestrator.spawn("Сделать работу")

        assert result.success is True
        assert result.result == "done"
        assert statuses == ["pending", "running", "completed"]
        assert orchestrator.get_summary().completed == 1

    @pytest.mark.asyncio
    async def test_fourth_parallel_spawn_is_rejected(self) -> None:
        """При лимите 3 четвёртый параллельный запуск отклоняется."""
        orchestrator = TaskOrchestrator(max_concurrent=3, executor=sleeping_executor(0.05))

        results = await asyncio.gather(*(orchestrator.spawn(f"Задача {i}") for i in range(4)))

        assert [r.success for r in results] == [True, True, True, False]
        assert results[3].error_code == "CONCURRENCY_LIMIT_EXCEEDED"
        assert results[3].task_id == ""
        assert orchestrator.get_summary().total == 3
        assert orchestrator.running_count == 0

    @pytest.mark.asyncio
    async def test_slow_executor_times_out(self) -> None:
        """Executor дольше таймаута даёт timeout, не дожидаясь executor'а."""
        orchestrator = TaskOrchestrator(executor=sleeping_executor(1.0))
        loop = asyncio.get_running_loop()

        started = loop.time()
        result = await orchestrator.spawn("Долгая задача", timeout_ms=10)
        elapsed = loop.time() - started

        assert result.status is TaskStatus.TIMEOUT
        assert result.timed_out is True
        assert elapsed < 0.5
        assert orchestrator.running_count == 0

        await orchestrator.shutdown()

    @pytest.mark.asyncio
    async def test_cooperative_executor_stops_on_cancel(self) -> None:
        """Executor, проверяющий CancelToken, завершается после отмены."""
        steps: list[int] = []
        stopped = asyncio.Event()

        async def run(task: SubAgentTask) -> str:
            token = current_cancel_token()
            for step in range(100):
                if token.cancelled:
                    stopped.set()
                    return "остановлено"
                steps.append(step)
                await asyncio.sleep(0.01)
            return "выполнено"

        orchestrator = TaskOrchestrator(executor=FunctionExecutor(run))
        spawn = asyncio.create_task(orchestrator.spawn("Длинная задача"))
        await asyncio.sleep(0.05)

        assert orchestrator.cancel(orchestrator.get_all_tasks()[0].id) is True
        result = await spawn
        await asyncio.wait_for(stopped.wait(), timeout=1)

        assert result.status is TaskStatus.CANCELLED
        assert len(steps) < 100
        assert orchestrator.get_all_tasks()[0].status is TaskStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_tool_calls_share_concurrency_limit(self) -> None:
        """Параллельные вызовы task tool подчиняются общему лимиту."""
        task_settings = TaskSettings(max_concurrent=2)
        orchestrator = create_task_orchestrator(task_settings, executor=sleeping_executor(0.05))
        handler = create_task_handler(orchestrator, task_settings)

        results = await asyncio.gather(*(handler({"instructions": f"Задача {i}"}) for i in range(3)))

        assert sum(r.success for r in results) == 2
        assert [r.error_code for r in results if not r.success] == ["CONCURRENCY_LIMIT_EXCEEDED"]

    @pytest.mark.asyncio
    async def test_slots_reused_after_completion(self) -> None:
        """Последовательные волны задач используют освободившиеся слоты."""
        orchestrator = TaskOrchestrator(max_concurrent=2, executor=sleeping_executor(0.01))

        for wave in range(3):
            results = await asyncio.gather(*(orchestrator.spawn(f"Волна {wave}") for _ in range(2)))
            assert all(r.success for r in results)

        assert orchestrator.get_summary().completed == 6
        assert orchestrator.clear_finished_tasks() == 6
