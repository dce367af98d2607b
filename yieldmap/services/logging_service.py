"""
Logging setup for the yieldmap server.

Join diagnostics (dropped rows, duplicate geometry keys) are logged rather
than returned on every code path, so the app keeps the most recent records
in memory and serves them from ``GET /logs/recent``. A rotating file copy is
optional.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from collections import deque
from typing import Deque, Dict, Any, List, Optional


LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "..", "logs"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "1").lower() not in ("0", "false", "no")
RING_BUFFER_SIZE = int(os.getenv("RING_BUFFER_SIZE", "2000"))
RING_BUFFER_MIN_LEVEL = os.getenv("RING_BUFFER_MIN_LEVEL", "INFO").upper()
LOG_FILE = os.path.join(LOG_DIR, "yieldmap.log")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class RingBufferHandler(logging.Handler):
    """Keeps the last ``maxlen`` records as plain dicts for the logs endpoint."""

    def __init__(self, maxlen: int = 2000):
        super().__init__()
        self.buffer: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.buffer.append({
                "ts": record.created,
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
                "lineno": record.lineno,
            })
        except Exception:
            self.handleError(record)

    def get_recent(self, limit: int = 500) -> List[Dict[str, Any]]:
        records = list(self.buffer)
        if limit <= 0:
            return records
        return records[-limit:]


_ring_handler: Optional[RingBufferHandler] = None
_file_handlers: Dict[str, RotatingFileHandler] = {}


def get_ring_handler() -> RingBufferHandler:
    global _ring_handler
    if _ring_handler is None:
        _ring_handler = RingBufferHandler(maxlen=RING_BUFFER_SIZE)
        _ring_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _ring_handler.setLevel(getattr(logging, RING_BUFFER_MIN_LEVEL, logging.INFO))
    return _ring_handler


def _attach(handler: logging.Handler) -> None:
    root = logging.getLogger()
    if handler not in root.handlers:
        root.addHandler(handler)


def attach_ring_buffer() -> RingBufferHandler:
    """Put the shared ring buffer on the root logger; safe to call repeatedly."""
    ring = get_ring_handler()
    _attach(ring)
    return ring


def attach_file_handler(log_file: str = LOG_FILE) -> RotatingFileHandler:
    path = os.path.abspath(log_file)
    handler = _file_handlers.get(path)
    if handler is None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=5_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        _file_handlers[path] = handler
    _attach(handler)
    return handler


def init_logging(to_file: bool = LOG_TO_FILE, log_file: str = LOG_FILE) -> None:
    """
    Attach the ring buffer (always) and the rotating file handler (when
    ``to_file``) to the root logger. Handlers already present are not added
    twice, so this can run at app creation and again from the server entry
    point after the console handler is reset.
    """
    root = logging.getLogger()
    if root.level in (logging.NOTSET, logging.WARNING):
        root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    attach_ring_buffer()
    if to_file:
        attach_file_handler(log_file)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
