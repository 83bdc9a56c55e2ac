from __future__ import annotations

import logging

from guide_route.logging_utils import LOGGER_NAME, add_file_handler, close_file_handlers, get_logger, setup_logging


def test_setup_is_idempotent() -> None:
    first = setup_logging()
    second = setup_logging(debug=True)

    assert first is second is get_logger()
    assert first.name == LOGGER_NAME
    assert first.level == logging.DEBUG
    assert len([h for h in first.handlers if h.get_name() == "console"]) == 1
    setup_logging()


def test_file_handler_mirrors_log(tmp_path) -> None:
    logger = setup_logging()
    log_path = tmp_path / "run" / "run.log"
    add_file_handler(log_path)
    add_file_handler(log_path)
    try:
        logger.info("route ready")
    finally:
        close_file_handlers()

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len([line for line in lines if line.endswith("route ready")]) == 1
    assert "INFO" in lines[-1]
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
