"""Error context management.

Управление контекстом для task_id текущей задачи.
"""

from contextvars import ContextVar, Token

# Context var для task_id
task_id_var: ContextVar[str] = ContextVar("task_id", default="")


def get_task_id() -> str:
    """Получить task_id задачи, в контексте которой выполняется код.

    Returns:
        Строка task_id или пустая строка вне задачи.

    """
    return task_id_var.get()


def set_task_id(task_id: str) -> Token[str]:
    """Установить task_id в контекст.

    Args:
        task_id: Идентификатор задачи.

    Returns:
        Token для восстановления предыдущего значения через reset_task_id().

    """
    return task_id_var.set(task_id)


def reset_task_id(token: Token[str]) -> None:
    """Восстановить task_id, действовавший до set_task_id().

    Args:
        token: Token, полученный от set_task_id().

    """
    task_id_var.reset(token)
