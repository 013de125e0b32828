"""Sub-Agent Orchestrator.

Оркестрация задач sub-агентов для desktop-приложения: ограничение
параллельности, таймауты, отмена и трансляция статусов наблюдателю.
"""

from subagent_orchestrator.core.enums import TaskErrorCode, TaskStatus
from subagent_orchestrator.services.task import (
    CancelToken,
    FunctionExecutor,
    SubAgentExecutor,
    SubAgentTask,
    TaskBroadcaster,
    TaskOrchestrator,
    TaskResult,
    TaskStateManager,
    TaskSummary,
    build_task_tool_definition,
    create_task_handler,
    create_task_orchestrator,
    current_cancel_token,
)

__version__ = "0.1.0"

__all__ = [
    "CancelToken",
    "FunctionExecutor",
    "SubAgentExecutor",
    "SubAgentTask",
    "TaskBroadcaster",
    "TaskOrchestrator",
    "TaskResult",
    "TaskStateManager",
    "TaskErrorCode",
    "TaskStatus",
    "TaskSummary",
    "build_task_tool_definition",
    "create_task_handler",
    "create_task_orchestrator",
    "current_cancel_token",
]
