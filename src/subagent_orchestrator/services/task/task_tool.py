"""Task Tool - публикация оркестратора как инструмента для LLM.

Модель вызывает tool "task" с аргументами instructions/input/timeout/description.
Handler валидирует аргументы, проверяет границы таймаута и делегирует запуск
в TaskOrchestrator.spawn().

Example:
    >>> handler = create_task_handler(orchestrator)
    >>> tools = [build_task_tool_definition()]
    >>> result = await handler({"instructions": "Найти уязвимости", "input": source})

"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from subagent_orchestrator.core.config import TaskSettings, settings
from subagent_orchestrator.core.constants import TASK_TOOL_NAME
from subagent_orchestrator.services.task.models import TaskResult
from subagent_orchestrator.services.task.task_orchestrator import TaskOrchestrator
from subagent_orchestrator.shared.errors import InvalidTimeoutError, InvalidToolInputError
from subagent_orchestrator.shared.logging import get_logger

logger = get_logger()

TaskToolHandler = Callable[[Mapping[str, Any]], Awaitable[TaskResult]]


class TaskToolInput(BaseModel):
    """Аргументы вызова task tool."""

    model_config = ConfigDict(extra="ignore")

    instructions: str = Field(
        default="",
        description="Инструкции для sub-агента (пустые отклоняет оркестратор)",
    )
    input: str | None = Field(default=None, description="Дополнительные входные данные")
    timeout: float | None = Field(
        default=None,
        allow_inf_nan=False,
        description="Таймаут в миллисекундах, округляется до целого",
    )
    description: str | None = Field(default=None, description="Краткое описание задачи")


def _minutes(ms: int) -> str:
    return f"{ms / 60_000:g}"


def validate_timeout(timeout_ms: int, task_settings: TaskSettings) -> int:
    """Проверить, что таймаут лежит в допустимых для tool границах.

    Args:
        timeout_ms: Таймаут в миллисекундах
        task_settings: Настройки с границами таймаута

    Returns:
        Проверенный таймаут

    Raises:
        InvalidTimeoutError: Если таймаут вне [min_timeout_ms, max_timeout_ms]

    """
    if timeout_ms > task_settings.max_timeout_ms:
        raise InvalidTimeoutError(
            timeout_ms,
            f"Таймаут не может превышать {task_settings.max_timeout_ms} мс "
            f"({_minutes(task_settings.max_timeout_ms)} мин)",
        )
    if timeout_ms < task_settings.min_timeout_ms:
        raise InvalidTimeoutError(
            timeout_ms,
            f"Таймаут должен быть не меньше {task_settings.min_timeout_ms} мс",
        )
    return timeout_ms


def build_task_tool_definition(task_settings: TaskSettings | None = None) -> dict[str, Any]:
    """Собрать описание task tool в формате tool use API.

    Args:
        task_settings: Настройки задач (по умолчанию settings.tasks)

    Returns:
        Словарь с name, description и input_schema

    """
    task_settings = task_settings or settings.tasks
    default_minutes = _minutes(task_settings.default_timeout_ms)
    max_minutes = _minutes(task_settings.max_timeout_ms)

    description = f"""Spawn a sub-agent to handle a complex, multi-step task autonomously.

Use this for:
- Complex analysis requiring multiple steps
- Tasks that can run in parallel
- Delegating work while continuing with other operations
- Breaking down large problems into smaller pieces

The sub-agent receives instructions and optional input, executes the task,
and returns the result. Tasks have a timeout limit and can be cancelled.

Maximum concurrent sub-agents: {task_settings.max_concurrent}
Default timeout: {default_minutes} minutes
Maximum timeout: {max_minutes} minutes"""

    return {
        "name": TASK_TOOL_NAME,
        "description": description,
        "input_schema": {
            "type": "object",
            "properties": {
                "instructions": {
                    "type": "string",
                    "description": (
                        "Instructions for the sub-agent to execute. "
                        "Be specific about what you want the sub-agent to accomplish."
                    ),
                },
                "input": {
                    "type": "string",
                    "description": (
                        "Optional input data to provide to the sub-agent "
                        "(e.g., code to analyze, data to process)."
                    ),
                },
                "timeout": {
                    "type": "number",
                    "description": (
                        f"Timeout in milliseconds (default: {task_settings.default_timeout_ms}, "
                        f"min: {task_settings.min_timeout_ms}, max: {task_settings.max_timeout_ms})"
                    ),
                },
                "description": {
                    "type": "string",
                    "description": "Brief description of what this task does (for logging/display)",
                },
            },
            "required": ["instructions"],
        },
    }


def create_task_handler(
    orchestrator: TaskOrchestrator,
    task_settings: TaskSettings | None = None,
) -> TaskToolHandler:
    """Создать handler вызовов task tool.

    Args:
        orchestrator: Оркестратор, в который делегируется запуск
        task_settings: Настройки с границами таймаута (по умолчанию settings.tasks)

    Returns:
        Async функция (payload) -> TaskResult, не бросающая исключений на
        некорректных аргументах

    """
    task_settings = task_settings or settings.tasks

    async def handle_task_tool(payload: Mapping[str, Any]) -> TaskResult:
        try:
            tool_input = TaskToolInput.model_validate(payload)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"])
            error = InvalidToolInputError(
                message=f"Некорректные аргументы task tool: {field}: {first['msg']}",
                details={"field": field, "message": first["msg"]},
            )
            logger.warning("Вызов task tool отклонён", error_code=error.code, field=field)
            return TaskResult.from_error(error)

        timeout_ms = round(tool_input.timeout) if tool_input.timeout is not None else task_settings.default_timeout_ms
        try:
            validate_timeout(timeout_ms, task_settings)
        except InvalidTimeoutError as e:
            logger.warning("Вызов task tool отклонён", error_code=e.code, timeout_ms=timeout_ms)
            return TaskResult.from_error(e)

        return await orchestrator.spawn(
            tool_input.instructions,
            input=tool_input.input,
            timeout_ms=timeout_ms,
            description=tool_input.description,
        )

    return handle_task_tool
