from __future__ import annotations

import logging

from .logging_service import RingBufferHandler, attach_file_handler, get_ring_handler, init_logging


def test_ring_buffer_keeps_most_recent_records() -> None:
    handler = RingBufferHandler(maxlen=3)
    logger = logging.getLogger("yieldmap.test.ring")
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        for i in range(5):
            logger.info(f"message {i}")
    finally:
        logger.removeHandler(handler)

    recent = handler.get_recent()
    assert [r["message"] for r in recent] == ["message 2", "message 3", "message 4"]
    assert handler.get_recent(1)[0]["level"] == "INFO"
    assert len(handler.get_recent(0)) == 3


def test_init_logging_attaches_ring_buffer_once() -> None:
    root = logging.getLogger()
    init_logging(to_file=False)
    init_logging(to_file=False)

    ring = get_ring_handler()
    assert root.handlers.count(ring) == 1

    logging.getLogger("yieldmap.test.init").warning("ring attached")
    assert ring.get_recent(1)[0]["message"] == "ring attached"


def test_init_logging_writes_file(tmp_path) -> None:
    log_file = tmp_path / "logs" / "yieldmap.log"
    init_logging(to_file=True, log_file=str(log_file))
    handler = attach_file_handler(str(log_file))
    try:
        logging.getLogger("yieldmap.test.file").warning("to disk")
        handler.flush()
        assert "to disk" in log_file.read_text(encoding="utf-8")
    finally:
        logging.getLogger().removeHandler(handler)
        handler.close()
