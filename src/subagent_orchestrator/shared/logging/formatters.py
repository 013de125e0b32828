"""Форматтеры логов для Loguru.

Предоставляет форматтеры для структурированного логирования:
- JSON формат для файлов и prod окружения (с task_id)
- Human-readable формат для разработки
"""

from typing import Any

import orjson


def json_formatter(record: dict[str, Any]) -> str:
    """JSON форматтер для structured logging.

    Создает JSON запись лога с полями:
    - timestamp (ISO 8601)
    - level (INFO, ERROR, etc.)
    - logger (имя модуля)
    - message (сообщение лога)
    - task_id (добавляется через patcher)
    - extra (дополнительные поля из logger.bind() или logger.info(..., key=value))
    - exception (тип и текст, если есть)

    Args:
        record: Loguru record dictionary

    Returns:
        Шаблон для Loguru, содержащий готовую JSON строку

    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        "message": record["message"],
    }

    for key, value in record.get("extra", {}).items():
        if key != "serialized":
            log_entry[key] = value

    if record["exception"] is not None:
        exception_info = record["exception"]
        log_entry["exception"] = {
            "type": exception_info.type.__name__ if exception_info.type else None,
            "value": str(exception_info.value) if exception_info.value else None,
        }

    # Готовая строка кладётся в extra, чтобы Loguru не разбирал её как шаблон
    record["extra"]["serialized"] = orjson.dumps(log_entry, default=str).decode("utf-8")
    return "{extra[serialized]}\n"


def console_formatter(record: dict[str, Any]) -> str:
    """Human-readable форматтер для разработки.

    Формат:
    2024-01-06 12:34:56.789 | INFO     | module:function:42 | [task_xxx] - Message

    Args:
        record: Loguru record dictionary

    Returns:
        Шаблон формата для Loguru

    """
    base_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"
    )

    if record.get("extra", {}).get("task_id"):
        base_format += " | <yellow>[{extra[task_id]}]</yellow>"

    base_format += " - <level>{message}</level>\n"

    if record["exception"] is not None:
        base_format += "{exception}\n"

    return base_format
