# envdiag/logs.py
from __future__ import annotations

import logging
import logging.handlers
import os
from enum import Enum
from pathlib import Path

DEFAULT_LOG_DIR = Path(os.path.expanduser("~")) / ".envdiag"
DEFAULT_LOG_FILE = DEFAULT_LOG_DIR / "envdiag.log"
DEFAULT_LEVEL = "WARNING"

# хендлеры вешаем на логгер пакета, корневой не трогаем
PACKAGE_LOGGER = "envdiag"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def resolve_level(value: str | None) -> tuple[str, str | None]:
    """
    Нормализует имя уровня. Возвращает (уровень, отвергнутое значение).
    Неизвестное имя из конфига или окружения не должно ронять запуск:
    подставляем DEFAULT_LEVEL и отдаём мусор наружу, чтобы о нём предупредить.
    """
    if value is None or not str(value).strip():
        return DEFAULT_LEVEL, None
    name = str(value).strip().upper()
    if name in LogLevel.__members__:
        return name, None
    return DEFAULT_LEVEL, value


def _file_handler(log_file: Path, fmt: logging.Formatter) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    fh = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=1_000_000, backupCount=5, encoding="utf-8"
    )
    fh.setFormatter(fmt)
    return fh


def setup_logging(
    level: str | None = None, file_path: str | os.PathLike[str] | None = None
) -> Path | None:
    """
    Конфигурирует логирование пакета envdiag:
      - ротация по 1 МБ, хранит 5 файлов
      - консольный вывод в stderr (stdout занят отчётом)
      - формат: ts level logger msg
    Уровень — аргумент или ENVDIAG_LOG_LEVEL (по умолчанию WARNING).
    Путь — аргумент или ENVDIAG_LOG_FILE (по умолчанию ~/.envdiag/envdiag.log).
    Если файл открыть нельзя, пишем только в консоль и возвращаем None.
    """
    log_level, rejected = resolve_level(level or os.environ.get("ENVDIAG_LOG_LEVEL"))
    log_file = Path(file_path or os.environ.get("ENVDIAG_LOG_FILE") or DEFAULT_LOG_FILE)

    pkg = logging.getLogger(PACKAGE_LOGGER)
    if getattr(pkg, "_envdiag_configured", False):
        return log_file

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    pkg.setLevel(log_level)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    pkg.addHandler(ch)

    file_error: OSError | None = None
    try:
        pkg.addHandler(_file_handler(log_file, fmt))
    except OSError as err:
        file_error = err

    pkg._envdiag_configured = True  # type: ignore[attr-defined]

    log = logging.getLogger(__name__)
    if rejected is not None:
        log.warning("Unknown log level %r, using %s", rejected, log_level)
    if file_error is not None:
        log.warning("Log file %s unavailable (%s), console only", log_file, file_error)
        return None
    log.info("Logging initialized at %s, file=%s", log_level, log_file)
    return log_file
