"""Sub-Agent Orchestrator - Configuration.

Конфигурация приложения через Pydantic Settings.
Строгая типизация, валидация лимитов и централизованное управление.
"""

from typing import Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from subagent_orchestrator.core.constants import (
    DEFAULT_APP_NAME,
    DEFAULT_LOG_FILE,
    DEFAULT_MAX_CONCURRENT,
    DEFAULT_TASK_TIMEOUT_MS,
    MAX_TASK_TIMEOUT_MS,
    MIN_TASK_TIMEOUT_MS,
)
from subagent_orchestrator.core.enums import AppEnvironment, LogFormat


class TaskSettings(BaseModel):
    """Настройки оркестратора задач."""

    max_concurrent: int = Field(
        default=DEFAULT_MAX_CONCURRENT,
        ge=1,
        description="Максимум одновременно выполняемых sub-агентов",
    )
    default_timeout_ms: int = Field(
        default=DEFAULT_TASK_TIMEOUT_MS,
        ge=1,
        description="Таймаут задачи по умолчанию в миллисекундах",
    )
    min_timeout_ms: int = Field(
        default=MIN_TASK_TIMEOUT_MS,
        ge=1,
        description="Минимальный таймаут, допустимый через task tool",
    )
    max_timeout_ms: int = Field(
        default=MAX_TASK_TIMEOUT_MS,
        ge=1,
        description="Максимальный таймаут, допустимый через task tool",
    )

    @field_validator("max_timeout_ms")
    @classmethod
    def validate_max_timeout(cls, value: int, info: ValidationInfo) -> int:
        """Валидация максимального таймаута.

        Args:
            value: Значение max_timeout_ms для проверки.
            info: Информация о валидации.

        Returns:
            Проверенное значение max_timeout_ms.

        Raises:
            ValueError: Если max_timeout_ms меньше min_timeout_ms.

        """
        if "min_timeout_ms" in info.data and value < info.data["min_timeout_ms"]:
            msg = f"max_timeout_ms ({value}) должен быть >= min_timeout_ms"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def validate_default_timeout(self) -> "TaskSettings":
        """Таймаут по умолчанию должен лежать в допустимом диапазоне.

        Raises:
            ValueError: Если default_timeout_ms вне [min_timeout_ms, max_timeout_ms].

        """
        if not self.min_timeout_ms <= self.default_timeout_ms <= self.max_timeout_ms:
            msg = (
                f"default_timeout_ms ({self.default_timeout_ms}) должен быть в диапазоне "
                f"{self.min_timeout_ms}-{self.max_timeout_ms}"
            )
            raise ValueError(msg)
        return self


class LogSettings(BaseModel):
    """Настройки логирования."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Уровень логирования",
    )
    format: LogFormat = Field(
        default=LogFormat.TEXT,
        description="Формат логов",
    )
    file_path: str | None = Field(
        default=None,
        description=f"Путь к файлу логов (например {DEFAULT_LOG_FILE}), None - без файла",
    )
    rotation: str = Field(
        default="10 MB",
        description="Ротация логов",
    )
    retention: str = Field(
        default="10 days",
        description="Время хранения логов",
    )


class Settings(BaseSettings):
    """Главные настройки приложения.

    Все настройки загружаются из переменных окружения с префиксом SUBAGENT__.
    Пример: SUBAGENT__TASKS__MAX_CONCURRENT=5
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        env_prefix="SUBAGENT__",
        extra="ignore",
    )

    app_name: str = Field(default=DEFAULT_APP_NAME, description="Название приложения")
    environment: AppEnvironment = Field(
        default=AppEnvironment.LOCAL,
        description="Окружение",
    )
    debug: bool = Field(default=False, description="Режим отладки")

    tasks: TaskSettings = Field(default_factory=TaskSettings)
    log: LogSettings = Field(default_factory=LogSettings)


# Глобальный объект настроек (singleton)
settings = Settings()
