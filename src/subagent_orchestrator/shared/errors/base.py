"""Base exception class for orchestrator errors.

Базовая логика исключений: код ошибки и сообщение выводятся из класса,
task_id берётся явно или из контекста выполняемой задачи.
"""

import re
from typing import Any

from loguru import logger
from pydantic import ValidationError

from subagent_orchestrator.shared.errors.context import get_task_id
from subagent_orchestrator.shared.errors.schemas import ErrorDetail, ErrorResponse

_CLASS_SUFFIXES = ("Exception", "Error")


def code_from_class_name(name: str) -> str:
    """Построить код ошибки из имени класса.

    NoExecutorError -> NO_EXECUTOR, BrokenPipeException -> BROKEN_PIPE.
    Имя, совпадающее с суффиксом (Error), не обрезается.

    Args:
        name: Имя класса исключения

    Returns:
        Код в UPPER_SNAKE_CASE

    """
    for suffix in _CLASS_SUFFIXES:
        if name.endswith(suffix) and name != suffix:
            name = name[: -len(suffix)]
            break
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).upper()


class AppException(Exception):
    """Базовый класс для всех ошибок оркестратора.

    Подклассу достаточно docstring'а: code выводится из имени класса,
    default_message - из первой строки docstring'а. Наружу ошибка уходит
    через to_response(), из которого TaskResult берёт код, сообщение и details.

    Attributes:
        code: Стабильный код ошибки
        message: Человекочитаемое сообщение
        details: Проверенные ErrorDetail дополнительные данные
        task_id: Задача, к которой относится ошибка ("" вне задачи)

    """

    code: str = "INTERNAL_ERROR"
    default_message: str = "Внутренняя ошибка оркестратора"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | ErrorDetail | None = None,
        code: str | None = None,
        *,
        task_id: str | None = None,
    ) -> None:
        """Инициализация исключения.

        Args:
            message: Сообщение об ошибке (по умолчанию default_message).
            details: Дополнительные детали.
            code: Код ошибки вместо кода класса.
            task_id: ID задачи; по умолчанию задача текущего контекста.

        Raises:
            ValueError: Если details не проходят валидацию ErrorDetail.

        """
        self.message = message or self.default_message
        self.details = self._normalize_details(details)
        self.task_id = task_id if task_id is not None else get_task_id()
        if code is not None:
            self.code = code

        super().__init__(self.message)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        if "code" not in cls.__dict__:
            cls.code = code_from_class_name(cls.__name__)

        if "default_message" not in cls.__dict__:
            cls.default_message = cls.__doc__.strip().split("\n")[0] if cls.__doc__ else cls.__name__

    def _normalize_details(self, details: dict[str, Any] | ErrorDetail | None) -> dict[str, Any]:
        if details is None:
            return {}
        if isinstance(details, ErrorDetail):
            return details.model_dump(exclude_none=True)

        try:
            return ErrorDetail(**details).model_dump(exclude_none=True)
        except ValidationError as e:
            logger.exception("Некорректные details исключения", exception=type(self).__name__)
            msg = "Invalid details format"
            raise ValueError(msg) from e

    def to_response(self) -> ErrorResponse:
        """Сериализация в Pydantic модель.

        Returns:
            ErrorResponse с данными ошибки.

        """
        return ErrorResponse(
            error=self.code,
            message=self.message,
            details=self.details,
            task_id=self.task_id,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, task_id={self.task_id!r})"
