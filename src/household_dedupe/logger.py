import logging
import logging.config
import os

_FALSE_VALUES = {"0", "false", "no", "off"}


class ColourizedFormatter(logging.Formatter):
    """
    Formatter that wraps the level name in ANSI colours.
    """
    GREY = "\x1b[90m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_color: bool = True) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        colour = self.LEVEL_COLORS.get(record.levelno) if self.use_color else None
        if colour is None:
            return super().format(record)

        orig_levelname = record.levelname
        record.levelname = f"{colour}{orig_levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Handlers further down the chain must see the plain name.
            record.levelname = orig_levelname


def _colour_enabled() -> bool:
    return os.getenv("LOG_COLOR", "true").strip().lower() not in _FALSE_VALUES


def get_logging_config() -> dict:
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir = os.getenv("LOG_DIR")
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatters: dict[str, dict] = {
        "default": {
            "()": "household_dedupe.logger.ColourizedFormatter",
            "fmt": log_format,
            "use_color": _colour_enabled(),
        },
        "plain": {
            "format": log_format,
        },
    }
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
            "formatter": "default",
        },
    }
    root_handlers = ["console"]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": os.path.join(log_dir, "app.log"),
            "formatter": "plain",
        }
        root_handlers.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": log_level_name,
            },
        },
    }


def setup_logging() -> None:
    logging.config.dictConfig(get_logging_config())


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
