"""Task Orchestrator - допуск, выполнение и отмена задач sub-агентов.

Orchestrator координирует SubAgentExecutor и TaskStateManager:
- проверяет допуск задачи (executor, лимит параллельности, инструкции)
- запускает гонку executor'а с таймаутом и отменой
- переводит задачу в терминальный статус и возвращает TaskResult

Example:
    >>> orchestrator = create_task_orchestrator(executor=FunctionExecutor(run_subagent))
    >>> orchestrator.set_broadcaster(lambda task: ui.update(task))
    >>> result = await orchestrator.spawn("Проанализировать код", input=source)
    >>> if result.success:
    ...     print(result.result)

"""

import asyncio

from subagent_orchestrator.core.config import TaskSettings, settings
from subagent_orchestrator.core.constants import DEFAULT_MAX_CONCURRENT, DEFAULT_TASK_TIMEOUT_MS
from subagent_orchestrator.core.enums import TaskStatus
from subagent_orchestrator.services.task.cancellation import CancelToken, bind_cancel_token
from subagent_orchestrator.services.task.models import SubAgentTask, TaskResult, TaskSummary
from subagent_orchestrator.services.task.task_executor import SubAgentExecutor
from subagent_orchestrator.services.task.task_state_manager import TaskBroadcaster, TaskStateManager
from subagent_orchestrator.shared.errors import (
    AppException,
    ConcurrencyLimitExceededError,
    ExecutionFailedError,
    ExecutionTimeoutError,
    InvalidInstructionsError,
    InvalidTimeoutError,
    NoExecutorError,
    set_task_id,
)
from subagent_orchestrator.shared.logging import get_logger

logger = get_logger()


async def _run_executor(executor: SubAgentExecutor, task: SubAgentTask, token: CancelToken) -> str:
    """Вызвать executor в контексте задачи.

    Выполняется в отдельной asyncio.Task со своей копией контекста:
    task_id попадает во все логи executor'а, token доступен через
    current_cancel_token().
    """
    set_task_id(task.id)
    bind_cancel_token(token)
    return await executor.execute(task)


def _error_message(error: BaseException) -> str:
    """Человекочитаемое сообщение исключения executor'а."""
    return str(error) or type(error).__name__


class TaskOrchestrator:
    """Orchestrator задач sub-агентов.

    Однопоточная кооперативная модель: все изменения реестра синхронны,
    единственная точка ожидания - гонка executor'а с таймаутом и отменой.
    Очереди нет: сверх лимита max_concurrent задачи сразу отклоняются.

    Attributes:
        state_manager: Реестр задач и state machine

    """

    def __init__(
        self,
        state_manager: TaskStateManager | None = None,
        executor: SubAgentExecutor | None = None,
        *,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        default_timeout_ms: int = DEFAULT_TASK_TIMEOUT_MS,
    ) -> None:
        """Инициализировать TaskOrchestrator.

        Args:
            state_manager: TaskStateManager (по умолчанию новый, пустой)
            executor: Executor задач (можно установить позже)
            max_concurrent: Максимум одновременно выполняемых задач
            default_timeout_ms: Таймаут задачи по умолчанию в миллисекундах

        Raises:
            ValueError: Если лимиты не положительные

        """
        if max_concurrent < 1:
            msg = f"max_concurrent ({max_concurrent}) должен быть >= 1"
            raise ValueError(msg)
        if default_timeout_ms < 1:
            msg = f"default_timeout_ms ({default_timeout_ms}) должен быть >= 1"
            raise ValueError(msg)

        self.state_manager = state_manager if state_manager is not None else TaskStateManager()
        self._executor = executor
        self._max_concurrent = max_concurrent
        self._default_timeout_ms = default_timeout_ms

        self._cancel_tokens: dict[str, CancelToken] = {}
        # Вызовы executor'а, которые проиграли гонку и ещё не завершились
        self._detached: set[asyncio.Task[str]] = set()

        logger.info(
            "TaskOrchestrator инициализирован",
            max_concurrent=max_concurrent,
            default_timeout_ms=default_timeout_ms,
        )

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def set_executor(self, executor: SubAgentExecutor) -> None:
        """Установить executor задач."""
        self._executor = executor
        logger.debug("Executor установлен", executor=repr(executor))

    def clear_executor(self) -> None:
        """Убрать executor. Уже запущенные задачи продолжают выполняться."""
        self._executor = None

    def has_executor(self) -> bool:
        """Установлен ли executor."""
        return self._executor is not None

    def set_broadcaster(self, broadcaster: TaskBroadcaster) -> None:
        """Установить callback для трансляции изменений задач."""
        self.state_manager.broadcaster = broadcaster

    def clear_broadcaster(self) -> None:
        """Убрать broadcaster."""
        self.state_manager.broadcaster = None

    def has_broadcaster(self) -> bool:
        """Установлен ли broadcaster."""
        return self.state_manager.broadcaster is not None

    @property
    def running_count(self) -> int:
        """Число выполняющихся задач."""
        return self.state_manager.running_count

    @property
    def max_concurrent(self) -> int:
        """Лимит одновременно выполняемых задач."""
        return self._max_concurrent

    @property
    def default_timeout_ms(self) -> int:
        """Таймаут задачи по умолчанию."""
        return self._default_timeout_ms

    # ------------------------------------------------------------------
    # Spawn
    # ------------------------------------------------------------------

    async def spawn(
        self,
        instructions: str,
        input: str | None = None,
        timeout_ms: int | None = None,
        *,
        description: str | None = None,
    ) -> TaskResult:
        """Создать задачу и выполнить её до терминального статуса.

        Args:
            instructions: Инструкции для sub-агента
            input: Дополнительные входные данные (опционально)
            timeout_ms: Таймаут в миллисекундах (по умолчанию default_timeout_ms)
            description: Краткое описание для логов и UI (опционально)

        Returns:
            TaskResult. Отказ в допуске, ошибка executor'а, таймаут и отмена
            тоже возвращаются как TaskResult, а не исключением.

        """
        try:
            executor = self._admit(instructions, timeout_ms)
        except AppException as e:
            logger.warning("Задача отклонена", error_code=e.code, reason=e.message)
            return TaskResult.from_error(e)

        task = self.state_manager.create(
            instructions=instructions.strip(),
            input=input.strip() if input is not None else None,
            description=description,
        )
        effective_timeout_ms = timeout_ms if timeout_ms is not None else self._default_timeout_ms

        logger.info(
            "Задача создана",
            task_id=task.id,
            description=description,
            timeout_ms=effective_timeout_ms,
            has_input=input is not None,
        )

        # Broadcaster мог отменить задачу прямо в момент публикации pending
        if task.status is not TaskStatus.PENDING:
            return TaskResult.from_task(task)

        return await self._execute(task, executor, effective_timeout_ms)

    def _admit(self, instructions: str, timeout_ms: int | None) -> SubAgentExecutor:
        """Проверить допуск задачи. Порядок проверок фиксирован.

        Returns:
            Executor, которым будет выполнена задача

        Raises:
            NoExecutorError: Executor не установлен
            ConcurrencyLimitExceededError: Достигнут лимит параллельности
            InvalidInstructionsError: Пустые инструкции
            InvalidTimeoutError: Неположительный таймаут

        """
        if self._executor is None:
            raise NoExecutorError

        if self.state_manager.running_count >= self._max_concurrent:
            raise ConcurrencyLimitExceededError(self._max_concurrent)

        if not isinstance(instructions, str) or not instructions.strip():
            raise InvalidInstructionsError

        if timeout_ms is not None and timeout_ms <= 0:
            raise InvalidTimeoutError(timeout_ms, f"Таймаут должен быть положительным, получено {timeout_ms} мс")

        return self._executor

    # ------------------------------------------------------------------
    # Execution race
    # ------------------------------------------------------------------

    async def _execute(
        self,
        task: SubAgentTask,
        executor: SubAgentExecutor,
        timeout_ms: int,
    ) -> TaskResult:
        """Выполнить задачу: гонка executor'а с таймаутом и отменой.

        Args:
            task: Задача из реестра в статусе pending
            executor: Executor, зафиксированный при допуске
            timeout_ms: Таймаут в миллисекундах

        Returns:
            TaskResult по итоговому статусу задачи

        """
        self.state_manager.mark_as_running(task)
        if task.status is not TaskStatus.RUNNING:
            return TaskResult.from_task(task, timeout_ms)

        token = CancelToken()
        self._cancel_tokens[task.id] = token

        execution = asyncio.create_task(
            _run_executor(executor, task.snapshot(), token),
            name=f"subagent-executor-{task.id}",
        )
        cancel_waiter = asyncio.create_task(token.wait(), name=f"subagent-cancel-{task.id}")

        try:
            done, _ = await asyncio.wait(
                {execution, cancel_waiter},
                timeout=timeout_ms / 1000,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            # Отменили сам вызов spawn(): задача считается отменённой. Объект
            # задачи отменяется напрямую, он мог уже выпасть из реестра
            if self.state_manager.mark_as_cancelled(task):
                logger.info("Задача отменена вместе с вызовом spawn()", task_id=task.id)
            token.cancel("cancelled")
            self._detach(execution)
            raise
        finally:
            cancel_waiter.cancel()
            self._cancel_tokens.pop(task.id, None)

        if execution in done:
            return self._settle(task, execution, timeout_ms)

        self._detach(execution)

        if token.cancelled:
            logger.info("Ожидание executor'а прекращено: задача отменена", task_id=task.id)
            return TaskResult.from_task(task, timeout_ms)

        token.cancel("timeout")
        if self.state_manager.mark_as_timeout(task):
            logger.warning("Задача превысила таймаут", task_id=task.id, timeout_ms=timeout_ms)
            return TaskResult.from_error(
                ExecutionTimeoutError(task.id, timeout_ms),
                task_id=task.id,
                status=TaskStatus.TIMEOUT,
            )
        return TaskResult.from_task(task, timeout_ms)

    def _settle(self, task: SubAgentTask, execution: "asyncio.Task[str]", timeout_ms: int) -> TaskResult:
        """Применить исход executor'а, если задача всё ещё running."""
        if task.status is not TaskStatus.RUNNING:
            # Отмена успела раньше: результат executor'а не применяется
            self._consume(execution)
            return TaskResult.from_task(task, timeout_ms)

        if execution.cancelled():
            error_message = "Вызов executor'а был отменён"
        elif execution.exception() is not None:
            error_message = _error_message(execution.exception())
        else:
            result = execution.result()
            if isinstance(result, str):
                self.state_manager.mark_as_completed(task, result)
                logger.info("Задача завершена успешно", task_id=task.id, result_length=len(result))
                return TaskResult.from_task(task)
            error_message = f"Executor вернул {type(result).__name__} вместо строки"

        self.state_manager.mark_as_failed(task, error_message)
        logger.warning("Задача завершилась с ошибкой", task_id=task.id, error=error_message)
        return TaskResult.from_error(
            ExecutionFailedError(task.id, error_message),
            task_id=task.id,
            status=TaskStatus.FAILED,
        )

    def _detach(self, execution: "asyncio.Task[str]") -> None:
        """Оставить проигравший вызов executor'а завершаться самостоятельно."""
        if execution.done():
            self._consume(execution)
            return
        self._detached.add(execution)
        execution.add_done_callback(self._on_detached_done)

    def _on_detached_done(self, execution: "asyncio.Task[str]") -> None:
        self._detached.discard(execution)
        self._consume(execution)

    @staticmethod
    def _consume(execution: "asyncio.Task[str]") -> None:
        """Забрать исход вызова executor'а, который уже не применяется."""
        if execution.cancelled():
            logger.debug("Брошенный вызов executor'а отменён", execution=execution.get_name())
            return
        error = execution.exception()
        if error is not None:
            logger.debug(
                "Запоздалая ошибка executor'а проигнорирована",
                execution=execution.get_name(),
                error=_error_message(error),
            )
        else:
            logger.debug("Запоздалый результат executor'а проигнорирован", execution=execution.get_name())

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    def cancel(self, task_id: str) -> bool:
        """Отменить задачу в статусе pending или running.

        Отмена не прерывает executor принудительно: оркестратор перестаёт
        ждать его результат и выставляет CancelToken задачи.

        Args:
            task_id: ID задачи

        Returns:
            True, если задача отменена; False, если её нет или она уже завершена

        """
        task = self.state_manager.get(task_id)
        if task is None:
            logger.debug("Отмена несуществующей задачи", task_id=task_id)
            return False

        if not self.state_manager.mark_as_cancelled(task):
            logger.debug("Задача уже завершена, отмена невозможна", task_id=task_id, status=task.status.value)
            return False

        token = self._cancel_tokens.get(task_id)
        if token is not None:
            token.cancel("cancelled")

        logger.info("Задача отменена", task_id=task_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_task(self, task_id: str) -> SubAgentTask | None:
        """Получить копию задачи по ID."""
        task = self.state_manager.get(task_id)
        return task.snapshot() if task is not None else None

    def get_all_tasks(self) -> list[SubAgentTask]:
        """Получить копии всех задач."""
        return self.state_manager.list_tasks()

    def get_tasks_by_status(self, status: TaskStatus) -> list[SubAgentTask]:
        """Получить копии задач с указанным статусом."""
        return self.state_manager.list_tasks(TaskStatus(status))

    def get_summary(self) -> TaskSummary:
        """Счётчики задач по статусам."""
        return self.state_manager.summary()

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def clear_finished_tasks(self) -> int:
        """Удалить завершённые задачи. Возвращает количество удалённых."""
        return self.state_manager.clear_finished()

    def clear_all_tasks(self) -> None:
        """Удалить все задачи, включая выполняющиеся.

        Выполняющиеся задачи становятся "осиротевшими": их исход больше не
        отражается ни в реестре, ни в running_count.
        """
        self.state_manager.clear_all()

    async def shutdown(self) -> None:
        """Отменить брошенные вызовы executor'а (при завершении приложения)."""
        pending = list(self._detached)
        if not pending:
            return

        for execution in pending:
            execution.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        logger.info("Брошенные вызовы executor'а отменены", count=len(pending))


def create_task_orchestrator(
    task_settings: TaskSettings | None = None,
    executor: SubAgentExecutor | None = None,
    broadcaster: TaskBroadcaster | None = None,
) -> TaskOrchestrator:
    """Создать TaskOrchestrator из настроек.

    Экземпляр принадлежит хост-приложению: глобального оркестратора нет.

    Args:
        task_settings: Настройки задач (по умолчанию settings.tasks)
        executor: Executor задач (опционально)
        broadcaster: Callback для трансляции изменений (опционально)

    Returns:
        TaskOrchestrator instance

    """
    task_settings = task_settings or settings.tasks

    return TaskOrchestrator(
        state_manager=TaskStateManager(broadcaster=broadcaster),
        executor=executor,
        max_concurrent=task_settings.max_concurrent,
        default_timeout_ms=task_settings.default_timeout_ms,
    )
