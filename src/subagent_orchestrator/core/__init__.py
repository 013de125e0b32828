"""Sub-Agent Orchestrator - Core module.

Ядро приложения: конфигурация, константы, enum'ы.
"""

from subagent_orchestrator.core.config import LogSettings, Settings, TaskSettings, settings
from subagent_orchestrator.core.constants import (
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_TASK_TIMEOUT_MS,
    MAX_TASK_TIMEOUT_MS,
    MIN_TASK_TIMEOUT_MS,
)
from subagent_orchestrator.core.enums import TERMINAL_STATUSES, TaskErrorCode, TaskStatus

__all__ = [
    "settings",
    "Settings",
    "TaskSettings",
    "LogSettings",
    "TaskStatus",
    "TaskErrorCode",
    "TERMINAL_STATUSES",
    "DEFAULT_MAX_CONCURRENT",
    "DEFAULT_TASK_TIMEOUT_MS",
    "MIN_TASK_TIMEOUT_MS",
    "MAX_TASK_TIMEOUT_MS",
]
