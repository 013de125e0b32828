"""Модуль структурированного логирования.

Предоставляет единый интерфейс для логирования во всем оркестраторе:
- Автоматическое добавление task_id выполняемой задачи
- JSON формат для файлов и prod окружения
- Human-readable формат для разработки

Основное использование:
    >>> from subagent_orchestrator.shared.logging import setup_logging, get_logger
    >>> setup_logging()  # Вызвать один раз при старте хост-приложения
    >>> logger = get_logger(__name__)
    >>> logger.info("Test message")  # task_id добавится автоматически
"""

from subagent_orchestrator.shared.logging.config import (
    InterceptHandler,
    configure_third_party_loggers,
    get_logger,
    setup_logging,
)
from subagent_orchestrator.shared.logging.formatters import console_formatter, json_formatter
from subagent_orchestrator.shared.logging.patchers import install_task_id_patcher, task_id_patcher

__all__ = [
    "InterceptHandler",
    "configure_third_party_loggers",
    "console_formatter",
    "get_logger",
    "install_task_id_patcher",
    "json_formatter",
    "setup_logging",
    "task_id_patcher",
]
