"""Константы для Sub-Agent Orchestrator.

Централизованное хранилище всех магических чисел и строк.
"""

# === Лимиты параллельности ===
DEFAULT_MAX_CONCURRENT = 3

# === Таймауты (в миллисекундах) ===
DEFAULT_TASK_TIMEOUT_MS = 300_000  # 5 минут
MIN_TASK_TIMEOUT_MS = 1_000  # 1 секунда
MAX_TASK_TIMEOUT_MS = 600_000  # 10 минут

# === Идентификаторы ===
TASK_ID_PREFIX = "task_"

# === Фиксированные сообщения терминальных статусов ===
TASK_TIMEOUT_MESSAGE = "Задача превысила таймаут"
TASK_CANCELLED_MESSAGE = "Задача была отменена"

# === Tool ===
TASK_TOOL_NAME = "task"

# === Названия приложений ===
DEFAULT_APP_NAME = "Sub-Agent Orchestrator"

# === Логи ===
DEFAULT_LOG_FILE = "logs/subagent-orchestrator.log"
NO_TASK_ID = "no-task"
