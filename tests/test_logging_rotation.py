import logging
from logging.handlers import RotatingFileHandler

import pytest

from compliance_cycles import logging_setup
from compliance_cycles.domain import logging as domain_log
from compliance_cycles.domain.logging import DOMAIN_LOGGER_NAME

LOGGER_TAG = "TEST"


@pytest.fixture
def temp_logger(tmp_path):
    log_path = tmp_path / "compliance_cycles.log"
    logging_setup.configure_logging(log_path=log_path, force=True)
    adapter = logging_setup.get_logger(LOGGER_TAG)
    base_logger = logging.getLogger(logging_setup.LOGGER_NAME)
    try:
        yield adapter, base_logger, log_path
    finally:
        logging_setup.reset_logging()


def _flush(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        if hasattr(handler, "flush"):
            handler.flush()


def test_rotating_handler_defaults(temp_logger):
    adapter, base_logger, log_path = temp_logger
    rotating_handlers = [h for h in base_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert rotating_handlers, "Expected at least one rotating handler"
    handler = rotating_handlers[0]
    assert handler.maxBytes == logging_setup.DEFAULT_MAX_BYTES
    assert handler.backupCount == logging_setup.DEFAULT_BACKUP_COUNT
    assert handler.baseFilename == str(log_path)


def test_rotating_handler_rollover(tmp_path):
    log_path = tmp_path / "compliance_cycles.log"
    logging_setup.configure_logging(
        log_path=log_path,
        force=True,
        max_bytes=512,
        backup_count=2,
    )
    adapter = logging_setup.get_logger(LOGGER_TAG)
    base_logger = logging.getLogger(logging_setup.LOGGER_NAME)
    try:
        payload = "x" * 256
        for _ in range(10):
            adapter.info(payload)
        _flush(base_logger)
        rolled = log_path.with_name("compliance_cycles.log.1")
        assert log_path.exists()
        assert rolled.exists(), "Expected first rotated log file to exist"
    finally:
        logging_setup.reset_logging()


def test_tagged_and_domain_records_share_the_file(temp_logger):
    adapter, base_logger, log_path = temp_logger

    adapter.info("service message")
    domain_log.warn("cycle ceiling reached")
    _flush(base_logger)

    contents = log_path.read_text(encoding="utf-8")
    assert "[INFO] [TEST] service message" in contents
    assert "[WARNING] [DOMAIN] cycle ceiling reached" in contents


def test_reset_restores_domain_propagation(temp_logger):
    domain_logger = logging.getLogger(DOMAIN_LOGGER_NAME)
    assert domain_logger.propagate is False

    logging_setup.reset_logging()

    assert domain_logger.propagate is True
    assert not domain_logger.handlers


@pytest.mark.parametrize(
    "module_name, expected",
    [
        ("compliance_cycles.domain.four_week_cycle", "CYCLE"),
        ("compliance_cycles.domain.monthly_cycle", "MONTH"),
        ("compliance_cycles.application.compliance_service", "SVC"),
        ("compliance_cycles.cli.cycles", "CLI"),
        ("somewhere.else", "GEN"),
    ],
)
def test_tag_inference(module_name, expected):
    assert logging_setup.get_tag_for_module(module_name) == expected


def test_unknown_level_defaults_to_info(tmp_path, capsys):
    logger = logging_setup.configure_logging(log_path=tmp_path / "x.log", level="chatty", force=True)

    assert logger.level == logging.INFO
    assert "unknown log level" in capsys.readouterr().err
