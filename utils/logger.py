import logging
import sys
from pathlib import Path

# Глобальный словарь для отслеживания инициализированных логгеров
_initialized_loggers = set()

LOG_FILE = Path("logs/swap_runner.log")


def setup_logger(name: str = None) -> logging.Logger:
    """Настройка системы логирования без дублирования"""
    if name is None:
        name = __name__

    logger = logging.getLogger(name)

    # Если логгер уже инициализирован - возвращаем его
    if name in _initialized_loggers:
        return logger

    logger.setLevel(logging.INFO)

    # ✅ ПРОВЕРЯЕМ, ЧТОБЫ НЕ ДОБАВЛЯТЬ ОБРАБОТЧИКИ ПОВТОРНО
    if not logger.handlers:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Консольный handler
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        # Файловый handler
        LOG_FILE.parent.mkdir(exist_ok=True)
        file_handler = logging.FileHandler(LOG_FILE, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _initialized_loggers.add(name)

    return logger
