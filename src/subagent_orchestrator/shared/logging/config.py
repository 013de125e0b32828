"""Logging configuration.

Настройка логирования через Loguru.
"""

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from subagent_orchestrator.core.config import LogSettings, settings
from subagent_orchestrator.core.enums import LogFormat
from subagent_orchestrator.shared.logging.formatters import console_formatter, json_formatter
from subagent_orchestrator.shared.logging.patchers import install_task_id_patcher

if TYPE_CHECKING:
    from loguru import Logger


class InterceptHandler(logging.Handler):
    """Обработчик для перехвата логов стандартной библиотеки logging."""

    def emit(self, record: logging.LogRecord) -> None:
        """Перехват и отправка логов в Loguru.

        Args:
            record: Запись лога из стандартного logging.

        """
        # Получаем уровень логирования
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Получаем глубину стека
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        # Логируем через Loguru
        logger.opt(depth=depth, exception=record.exc_info).log(
            level,
            record.getMessage(),
        )


def setup_logging(log_settings: LogSettings | None = None) -> None:
    """Настроить логирование приложения.

    Вызывается хост-приложением один раз при старте. Библиотечный код
    оркестратора только пишет в logger и ничего не настраивает сам.

    Args:
        log_settings: Настройки логирования, по умолчанию settings.log.

    """
    log_settings = log_settings or settings.log

    # Удаляем стандартный обработчик Loguru
    logger.remove()

    # Патчер для добавления task_id в extra
    install_task_id_patcher()

    is_json = log_settings.format is LogFormat.JSON

    # Добавляем вывод в stdout
    logger.add(
        sys.stdout,
        format=json_formatter if is_json else console_formatter,
        level=log_settings.level,
        colorize=not is_json,
        backtrace=True,
        diagnose=settings.debug,
    )

    if log_settings.file_path:
        # Создаем директорию для логов
        log_path = Path(log_settings.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Файл всегда в JSON
        logger.add(
            str(log_path),
            format=json_formatter,
            level=log_settings.level,
            rotation=log_settings.rotation,
            retention=log_settings.retention,
            compression="zip",
            backtrace=True,
            diagnose=settings.debug,
        )

    # Перехватываем логи стандартного logging
    configure_third_party_loggers()

    logger.info(
        "Logger initialized",
        level=log_settings.level,
        format=log_settings.format.value,
        file=log_settings.file_path,
    )


def configure_third_party_loggers() -> None:
    """Перенаправить стандартный logging (asyncio и хост-приложение) в Loguru."""
    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(logging.INFO)

    # asyncio пишет о забытых задачах и медленных callback'ах
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> "Logger":
    """Получить настроенный logger instance.

    Args:
        name: Имя логгера (обычно __name__ модуля)

    Returns:
        Настроенный Loguru logger

    """
    if name:
        return logger.bind(logger_name=name)
    return logger
