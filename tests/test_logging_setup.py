import logging

import pytest

from task_api.logging_setup import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def make_record(name, level):
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_setup_logging_installs_single_handler(restore_root_logger):
    setup_logging("debug")
    setup_logging("debug")
    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1


def test_unknown_level_falls_back_to_info(restore_root_logger):
    setup_logging("chatty")
    assert restore_root_logger.level == logging.INFO


def test_third_party_records_filtered(restore_root_logger):
    setup_logging(logging.DEBUG)
    handler = restore_root_logger.handlers[0]
    assert handler.filter(make_record("task_api.db", logging.DEBUG))
    assert handler.filter(make_record("uvicorn.access", logging.INFO))
    assert not handler.filter(make_record("pymongo.connection", logging.INFO))
    assert handler.filter(make_record("pymongo.connection", logging.WARNING))
