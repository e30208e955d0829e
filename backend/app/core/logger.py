import logging
import sys
from pathlib import Path

from pythonjsonlogger import jsonlogger

from app.core.config import settings


class LoggerConfig:
    """Configuration for logger singleton"""

    def __init__(self, name: str = "relay"):
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            self._setup_logging()

    def _build_formatter(self) -> logging.Formatter:
        if settings.LOG_FORMAT.lower() == "text":
            return logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        # Fields passed through ``extra`` become top-level JSON keys.
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "ts", "levelname": "level", "message": "msg"},
        )

    def _setup_logging(self):
        formatter = self._build_formatter()

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        self.logger.addHandler(console)

        if settings.LOG_FILE:
            file_handler = logging.FileHandler(Path(settings.LOG_FILE))
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        self.logger.setLevel(settings.LOG_LEVEL.upper())

    def get_logger(self):
        return self.logger


logger_config = LoggerConfig()
logger = logger_config.get_logger()
