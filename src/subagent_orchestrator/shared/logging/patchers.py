"""Patchers для добавления task_id в логи.

Каждая запись лога, сделанная во время выполнения задачи (включая код
executor'а), получает task_id этой задачи. Это позволяет отфильтровать
все логи одного sub-агента.
"""

from typing import Any

from subagent_orchestrator.core.constants import NO_TASK_ID
from subagent_orchestrator.shared.errors.context import get_task_id


def task_id_patcher(record: dict[str, Any]) -> None:
    """Patch Loguru record для добавления task_id.

    Явно переданный task_id (logger.info(..., task_id=...)) имеет приоритет
    над значением из context var.

    Args:
        record: Loguru record dictionary, который будет модифицирован in-place

    """
    extra = record["extra"]
    if extra.get("task_id"):
        return
    extra["task_id"] = get_task_id() or NO_TASK_ID


def install_task_id_patcher() -> None:
    """Установить task_id_patcher в глобальный Loguru logger."""
    from loguru import logger

    logger.configure(patcher=task_id_patcher)
