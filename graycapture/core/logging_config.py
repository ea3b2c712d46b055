"""
Standardized logging configuration for graycapture.

Library modules only create loggers with logging.getLogger(__name__);
applications call setup_logging() once to attach handlers.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict

from .constants import MAX_LOG_FILE_SIZE, DEBUG_DIR_PREFIX


class GrayCaptureLogger:
    """Standardized logger configuration for graycapture."""

    LEVELS = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }

    # Module-specific default levels
    MODULE_LEVELS = {
        'graycapture.scanning': logging.INFO,
        'graycapture.projector': logging.INFO,
        'graycapture.camera': logging.INFO,
        'graycapture.patterns': logging.WARNING,
        'graycapture.core': logging.WARNING,
    }

    @classmethod
    def setup_logging(
        cls,
        level: str = 'INFO',
        log_file: Optional[str] = None,
        console: bool = True,
        module_levels: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Setup standardized logging configuration.

        Args:
            level: Default logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional log file path
            console: Whether to log to console
            module_levels: Optional module-specific log levels
        """
        numeric_level = cls.LEVELS.get(level.upper(), logging.INFO)

        detailed_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        simple_formatter = logging.Formatter(
            '%(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)  # Capture all, filter at handler level
        root_logger.handlers.clear()

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(numeric_level)
            console_handler.setFormatter(simple_formatter)
            root_logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=MAX_LOG_FILE_SIZE,
                backupCount=3
            )
            file_handler.setLevel(logging.DEBUG)  # File gets everything
            file_handler.setFormatter(detailed_formatter)
            root_logger.addHandler(file_handler)

        # DEBUG opens up every module; otherwise keep the module defaults
        for module, default_level in cls.MODULE_LEVELS.items():
            module_logger = logging.getLogger(module)
            module_logger.setLevel(numeric_level if numeric_level == logging.DEBUG else default_level)

        if module_levels:
            for module, level_str in module_levels.items():
                module_level = cls.LEVELS.get(level_str.upper(), logging.INFO)
                logging.getLogger(module).setLevel(module_level)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """
        Get a logger instance with the given name.

        Args:
            name: Logger name (usually __name__)

        Returns:
            Logger instance
        """
        return logging.getLogger(name)

    @classmethod
    def setup_debug_logging(cls, session_name: Optional[str] = None,
                            base_dir: Optional[Path] = None) -> str:
        """
        Setup debug logging with an automatic session directory.

        Args:
            session_name: Optional session name
            base_dir: Directory holding session folders (default ~/.graycapture/logs)

        Returns:
            Path to debug log file
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        session = session_name or f"{DEBUG_DIR_PREFIX}_{timestamp}"
        root = Path(base_dir) if base_dir else Path.home() / '.graycapture' / 'logs'
        debug_dir = root / session
        debug_dir.mkdir(parents=True, exist_ok=True)

        log_file = debug_dir / 'debug.log'
        cls.setup_logging(
            level='DEBUG',
            log_file=str(log_file),
            console=True
        )

        logger = logging.getLogger('graycapture')
        logger.info(f"Debug session started: {session}")
        logger.debug(f"Debug logs: {log_file}")

        return str(log_file)


def setup_logging(**kwargs) -> None:
    """Setup logging with default configuration."""
    GrayCaptureLogger.setup_logging(**kwargs)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return GrayCaptureLogger.get_logger(name)


def debug_mode(session_name: Optional[str] = None) -> str:
    """Enable debug mode with full logging."""
    return GrayCaptureLogger.setup_debug_logging(session_name)
