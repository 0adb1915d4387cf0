"""
Logging setup for the `dexarb` logger tree.

Records are handed to a queue and written by a listener thread, so a
slow terminal or disk never holds up the event loop mid-scan. Output
goes to stderr (stdout stays clean for `scan --json`) and optionally
to a file that always receives DEBUG.
"""

import logging
import sys
import time
from collections.abc import Iterable
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue

from dexarb.config.constants import LOG_FORMAT, MAX_LOG_QUEUE_SIZE


NOISY_LOGGERS = ("aiohttp", "asyncio", "uvicorn.access")

REDACTED = "***"


class UtcFormatter(logging.Formatter):
    """ISO-8601 UTC timestamps with milliseconds, e.g. 2024-01-01T00:00:00.123Z."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"


class SecretRedactor(logging.Filter):
    """
    Masks secrets (RPC api keys) in rendered messages.

    Runs on the producing thread, before the record is queued, so
    neither sink ever sees the raw value.
    """

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        self._secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        for secret in self._secrets:
            message = message.replace(secret, REDACTED)
        record.msg = message
        record.args = None
        return True


class QueuedLogging:
    """
    Owns the queue handler on a logger and the listener draining it.

    Example:
        with QueuedLogging(level=logging.DEBUG, log_file=Path("scan.log")):
            logging.getLogger("dexarb.scanner").info("started")
    """

    def __init__(
        self,
        name: str = "dexarb",
        level: int = logging.INFO,
        log_file: Path | None = None,
        secrets: Iterable[str] = (),
    ) -> None:
        self.logger = logging.getLogger(name)
        self._level = level
        self._log_file = log_file
        self._handler = QueueHandler(Queue(maxsize=MAX_LOG_QUEUE_SIZE))
        self._handler.addFilter(SecretRedactor(secrets))
        self._listener: QueueListener | None = None
        self._sinks: list[logging.Handler] = []

    def _open_sinks(self) -> list[logging.Handler]:
        formatter = UtcFormatter(LOG_FORMAT)

        console = logging.StreamHandler(sys.stderr)
        console.setLevel(self._level)
        sinks: list[logging.Handler] = [console]

        if self._log_file is not None:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            sinks.append(logging.FileHandler(self._log_file, encoding="utf-8"))

        for sink in sinks:
            sink.setFormatter(formatter)
        return sinks

    @property
    def running(self) -> bool:
        return self._listener is not None

    def start(self) -> "QueuedLogging":
        """Attach the queue handler and start draining. Idempotent."""
        if self._listener is not None:
            return self

        self._sinks = self._open_sinks()
        self._listener = QueueListener(self._handler.queue, *self._sinks, respect_handler_level=True)
        self._listener.start()

        # The file sink wants DEBUG even when the console does not
        self.logger.setLevel(logging.DEBUG if self._log_file is not None else self._level)
        self.logger.addHandler(self._handler)
        return self

    def stop(self) -> None:
        """Detach, flush everything queued so far and close the sinks."""
        if self._listener is None:
            return

        self.logger.removeHandler(self._handler)
        self._listener.stop()
        self._listener = None
        for sink in self._sinks:
            sink.close()
        self._sinks = []

    def __enter__(self) -> "QueuedLogging":
        return self.start()

    def __exit__(self, *args: object) -> None:
        self.stop()


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    secrets: Iterable[str] = (),
) -> QueuedLogging:
    """
    Route the `dexarb` tree through a started QueuedLogging.

    Handlers already on the root logger are removed, and chatty
    third-party loggers are capped at WARNING.

    Args:
        level: Console log level name.
        log_file: Optional file that receives every record.
        secrets: Values masked in all output.
    """
    logging.root.handlers.clear()
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    return QueuedLogging(level=numeric_level, log_file=log_file, secrets=secrets).start()
