"""Error schemas.

Pydantic схемы для ошибок.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Детальная информация об ошибке."""

    model_config = ConfigDict(extra="allow")

    field: str | None = Field(default=None, description="Поле с ошибкой")
    message: str | None = Field(default=None, description="Сообщение об ошибке")
    code: str | None = Field(default=None, description="Код ошибки")
    context: dict[str, Any] | None = Field(default=None, description="Дополнительный контекст")


class ErrorResponse(BaseModel):
    """Стандартное структурированное описание ошибки."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "CONCURRENCY_LIMIT_EXCEEDED",
                "message": "Достигнут лимит одновременно выполняемых sub-агентов (3)",
                "details": {"max_concurrent": 3},
                "task_id": "",
            }
        }
    )

    error: str = Field(..., description="Код ошибки")
    message: str = Field(..., description="Человекочитаемое сообщение")
    details: dict[str, Any] = Field(default_factory=dict, description="Дополнительные детали")
    task_id: str = Field(default="", description="ID задачи, в контексте которой возникла ошибка")
