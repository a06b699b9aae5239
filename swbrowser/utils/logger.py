"""
Centralized logging for the databank browser.

`LoggerManager` hands out named, singleton `logging.Logger` instances wired
with a console handler (colored when `colorlog` is installed) and a file
handler (plain text or JSON). `JsonLogFormatter` renders structured records
for the file handler.
"""

import os
import sys
import logging
import json
from typing import Optional

try:
    from colorlog import ColoredFormatter

    COLORLOG_AVAILABLE = True
except ImportError:
    COLORLOG_AVAILABLE = False


class LoggerManager:
    """
    Factory for configured, process-wide `logging.Logger` instances.

    The first call for a given name builds the logger; later calls return the
    same object so handlers are never attached twice. Defaults (level, log
    directory, JSON file output) are set at startup through `configure()`,
    typically from the `logging` section of the settings file. Module-level
    loggers exist before that call, so `configure()` rebuilds the handlers of
    every logger already handed out.

    Loggers do not propagate to the root logger, so each record is emitted
    exactly once per handler.
    """

    _loggers = {}
    _options = {}  # name -> arguments passed to get_logger
    _default_log_dir = "logs"
    _default_level = "INFO"
    _default_json = False

    @classmethod
    def configure(
        cls,
        level: Optional[str] = None,
        log_dir: Optional[str] = None,
        use_json: Optional[bool] = None,
    ) -> None:
        """
        Set defaults and re-apply them to existing loggers.

        Arguments given explicitly to `get_logger()` (a fixed log file, level
        or JSON flag) still take precedence over these defaults.

        Args:
            level (Optional[str]): Default threshold ("DEBUG", "INFO", ...).
            log_dir (Optional[str]): Directory for per-logger log files.
            use_json (Optional[bool]): Write file logs as JSON lines.
        """
        if level:
            cls._default_level = level.upper()
        if log_dir:
            cls._default_log_dir = log_dir
        if use_json is not None:
            cls._default_json = use_json

        for name, logger in cls._loggers.items():
            cls._build(logger, name, **cls._options.get(name, {}))

    @classmethod
    def get_logger(
        cls,
        name: str,
        log_file: Optional[str] = None,
        level: Optional[str] = None,
        use_json: Optional[bool] = None,
        use_color: bool = True,
    ) -> logging.Logger:
        """
        Retrieve or create a logger configured for console and file output.

        Args:
            name (str): Logger name, usually the module's `__name__`.
            log_file (Optional[str]): Explicit log file path. Defaults to
                `<log_dir>/<top-level name>.log`.
            level (Optional[str]): Threshold; falls back to the configured default.
            use_json (Optional[bool]): JSON file output; falls back to the
                configured default.
            use_color (bool): Colored console output when `colorlog` is available.

        Returns:
            logging.Logger: A fully configured logger instance.
        """
        if name in cls._loggers:
            return cls._loggers[name]

        logger = logging.getLogger(name)
        logger.propagate = False
        options = {
            "log_file": log_file,
            "level": level,
            "use_json": use_json,
            "use_color": use_color,
        }
        cls._build(logger, name, **options)

        cls._options[name] = options
        cls._loggers[name] = logger
        return logger

    @classmethod
    def _build(
        cls,
        logger: logging.Logger,
        name: str,
        log_file: Optional[str] = None,
        level: Optional[str] = None,
        use_json: Optional[bool] = None,
        use_color: bool = True,
    ) -> None:
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

        level = (level or cls._default_level).upper()
        if use_json is None:
            use_json = cls._default_json
        logger.setLevel(level)

        if not log_file:
            log_file = os.path.join(cls._default_log_dir, f"{name.split('.')[0]}.log")
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logger.addHandler(cls._setup_file_handler(log_file, level, use_json))
        logger.addHandler(cls._setup_console_handler(level, use_color))

    @classmethod
    def reset(cls) -> None:
        """Close and forget every logger created through the manager."""
        for name, logger in cls._loggers.items():
            for handler in logger.handlers[:]:
                handler.close()
                logger.removeHandler(handler)
            cls._options.pop(name, None)
        cls._loggers.clear()

    @staticmethod
    def _setup_file_handler(
        filepath: str, level: str, use_json: bool
    ) -> logging.Handler:
        # The file is opened on the first record, not at import
        handler = logging.FileHandler(filepath, encoding="utf-8", delay=True)
        handler.setLevel(level)
        handler.setFormatter(LoggerManager._get_formatter(use_json=use_json, color=False))
        return handler

    @staticmethod
    def _setup_console_handler(level: str, use_color: bool) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(LoggerManager._get_formatter(use_json=False, color=use_color))
        return handler

    @staticmethod
    def _get_formatter(
        use_json: bool = False, color: bool = False
    ) -> logging.Formatter:
        """
        Build the formatter for a handler.

        Args:
            use_json (bool): Return a `JsonLogFormatter`.
            color (bool): Return a colored formatter when `colorlog` is installed.

        Returns:
            logging.Formatter: A formatter instance.
        """
        if use_json:
            return JsonLogFormatter()

        fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        datefmt = "%Y-%m-%d %H:%M:%S"

        if color and COLORLOG_AVAILABLE:
            return ColoredFormatter(
                fmt="%(log_color)s" + fmt,
                datefmt=datefmt,
                log_colors={
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'bold_red',
                },
            )
        return logging.Formatter(fmt, datefmt)


class JsonLogFormatter(logging.Formatter):
    """
    Render a log record as one JSON object per line.

    Example Output:
        {
            "timestamp": "2025-05-07 13:12:01",
            "level": "WARNING",
            "logger": "swbrowser.enrichment.swapi_client",
            "message": "swapi.request.timeout",
            "endpoint": "people"
        }

    Structured fields are passed with `extra={"extra_data": {...}}`.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": self.formatTime(record, "%Y-%m-%d %H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if hasattr(record, "extra_data"):
            log_record.update(record.extra_data)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)
