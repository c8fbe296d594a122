"""Tests for logging configuration."""

import logging

from camera_search.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("camera_search")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_formats_records_for_the_package() -> None:
    logger = logging.getLogger("camera_search")
    logger.handlers.clear()

    configure_logging()

    handler = logger.handlers[0]
    assert logger.level == logging.INFO
    assert logger.propagate is False
    assert handler.formatter is not None
    assert handler.formatter._fmt == "%(levelname)s: %(name)s: %(message)s"

    record = logging.LogRecord(
        "camera_search.services.catalog",
        logging.WARNING,
        __file__,
        1,
        "Catalog search failed: term=%s",
        ("sac",),
        None,
    )
    assert handler.format(record) == (
        "WARNING: camera_search.services.catalog: Catalog search failed: term=sac"
    )
