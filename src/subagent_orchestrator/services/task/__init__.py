"""Task Management Module - оркестрация задач sub-агентов.

Компоненты:

- TaskOrchestrator: допуск задач, гонка executor'а с таймаутом, отмена
- TaskStateManager: реестр задач, state machine, broadcast изменений
- SubAgentExecutor: контракт внешнего executor'а (инжектируется)
- CancelToken: кооперативная отмена для executor'а
- task tool: публикация оркестратора как инструмента для LLM

Архитектура:
    ┌─────────────────────┐
    │  TaskOrchestrator   │  (координатор)
    └──────────┬──────────┘
               │
       ┌───────┴──────────┐
       │                  │
       ▼                  ▼
    Executor        TaskStateManager ──► Broadcaster
   (внешний)                             (внешний)

Example:
    >>> from subagent_orchestrator.services.task import create_task_orchestrator
    >>> orchestrator = create_task_orchestrator(executor=my_executor)
    >>> result = await orchestrator.spawn("Проанализировать код", input=source)

"""

from subagent_orchestrator.services.task.cancellation import CancelToken, current_cancel_token
from subagent_orchestrator.services.task.models import SubAgentTask, TaskResult, TaskSummary
from subagent_orchestrator.services.task.task_executor import FunctionExecutor, SubAgentExecutor
from subagent_orchestrator.services.task.task_orchestrator import (
    TaskOrchestrator,
    create_task_orchestrator,
)
from subagent_orchestrator.services.task.task_state_manager import TaskBroadcaster, TaskStateManager
from subagent_orchestrator.services.task.task_tool import (
    TaskToolInput,
    build_task_tool_definition,
    create_task_handler,
)

__all__ = [
    "CancelToken",
    "FunctionExecutor",
    "SubAgentExecutor",
    "SubAgentTask",
    "TaskBroadcaster",
    "TaskOrchestrator",
    "TaskResult",
    "TaskStateManager",
    "TaskSummary",
    "TaskToolInput",
    "build_task_tool_definition",
    "create_task_handler",
    "create_task_orchestrator",
    "current_cancel_token",
]
