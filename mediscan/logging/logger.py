import logging
import sys
from typing import TextIO


class Log:
    """Centralized logging for the report engine.

    Keyword fields are appended to the message as ``key=value`` pairs so that
    render and classification events stay greppable in plain stdout logs.
    """

    _logger: logging.Logger = logging.getLogger("mediscan")

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and install a single stream handler (stdout by default)."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **fields: object) -> None:
        cls._logger.info(cls._format(message, fields))

    @classmethod
    def error(cls, message: str, **fields: object) -> None:
        cls._logger.error(cls._format(message, fields))

    @classmethod
    def warning(cls, message: str, **fields: object) -> None:
        cls._logger.warning(cls._format(message, fields))

    @classmethod
    def debug(cls, message: str, **fields: object) -> None:
        if cls._logger.isEnabledFor(logging.DEBUG):
            cls._logger.debug(cls._format(message, fields))

    @staticmethod
    def _format(message: str, fields: dict[str, object]) -> str:
        if not fields:
            return message
        suffix = " ".join(f"{key}={value!r}" for key, value in fields.items())
        return f"{message} [{suffix}]"
