import logging
import logging.handlers
import sys
from typing import Dict, Any
from pathlib import Path

COMPONENTS = ["simple_planner.planning", "simple_planner.bridges", "simple_planner.utils"]


class SystemLogger:

    def __init__(self, config: Dict[str, Any]):
        self.config = config

        self.log_level = getattr(logging, config.get("level", "INFO").upper())
        self.log_dir = Path(config.get("log_dir", "logs"))
        self.max_file_size = config.get("max_file_size_mb", 10) * 1024 * 1024
        self.backup_count = config.get("backup_count", 5)

        self.console_format = config.get(
            "console_format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        self.file_format = config.get(
            "file_format",
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
        )

        self.component_loggers = {}

        if self.config.get("file_logging", False):
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup_root_logger()

        self._setup_component_loggers()

        self.logger = logging.getLogger(__name__)
        self.logger.debug("System Logger initialized")

    def _setup_root_logger(self):

        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)

        root_logger.handlers.clear()

        if self.config.get("console_logging", True):
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.log_level)
            console_handler.setFormatter(logging.Formatter(self.console_format))
            root_logger.addHandler(console_handler)

        if self.config.get("file_logging", False):
            log_file = self.log_dir / "planner.log"
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=self.max_file_size, backupCount=self.backup_count
            )
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(logging.Formatter(self.file_format))
            root_logger.addHandler(file_handler)

    def _setup_component_loggers(self):

        for component in COMPONENTS:
            short_name = component.rsplit(".", 1)[-1]
            component_config = self.config.get("components", {}).get(short_name, {})

            if component_config.get("enabled", True):
                logger = logging.getLogger(component)
                logger.setLevel(getattr(logging, component_config.get("level", "NOTSET").upper()))
                self.component_loggers[short_name] = logger

    def get_logger(self, name: str) -> logging.Logger:

        return logging.getLogger(name)


def setup_logging(config: Dict[str, Any] = None) -> SystemLogger:

    default_config = {
        "level": "INFO",
        "log_dir": "logs",
        "console_logging": True,
        "file_logging": False,
        "max_file_size_mb": 10,
        "backup_count": 5,
        "components": {
            "planning": {"enabled": True, "level": "INFO"},
            "bridges": {"enabled": True, "level": "INFO"},
            "utils": {"enabled": True, "level": "WARNING"},
        },
    }

    merged_config = {**default_config, **(config or {})}

    return SystemLogger(merged_config)


def get_logger(name: str) -> logging.Logger:

    return logging.getLogger(name)
