import logging
import sys
from pathlib import Path
from datetime import datetime
import json

# Attributes every LogRecord carries; anything else was passed through ``extra``
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for production log shipping"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}
        if extra:
            log_obj["extra"] = extra

        return json.dumps(log_obj, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Colour a copy so other handlers still see the plain level name
        record = logging.makeLogRecord(vars(record))
        log_color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{log_color}{record.levelname}{self.RESET}"
        record.name = f"\033[94m{record.name}{self.RESET}"
        return super().format(record)


def setup_logging(
    level: str = "INFO",
    app_name: str = "vdesk",
    enable_json: bool = False,
    log_file: str | None = None
) -> None:
    """
    Configure the root logger once at startup

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        app_name: Application logger name
        enable_json: Use JSON formatting on the console
        log_file: Optional file path; file output is always JSON
    """

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(numeric_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)

    if enable_json:
        console_formatter = JSONFormatter()
    else:
        console_formatter = ColoredFormatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    configure_loggers(app_name, numeric_level)

    logger = logging.getLogger(app_name)
    logger.info(f"Logging configured successfully - Level: {level}")


def configure_loggers(app_name: str, level: int = logging.INFO) -> None:
    """Tune levels of the application and third-party loggers"""

    logging.getLogger(app_name).setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)

    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("beanie").setLevel(logging.WARNING)

    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("sentry_sdk").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name"""
    return logging.getLogger(name)
