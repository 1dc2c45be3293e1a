"""Test logging helpers."""

import logging

import pytest

from ama_mitigator.utils.logger import ROOT_LOGGER, configure_logging, get_logger


@pytest.fixture
def reset_logging():
    yield
    configure_logging("INFO")


def test_get_logger_adds_single_handler():
    logger = get_logger("ama_mitigator.test_single")
    get_logger("ama_mitigator.test_single")
    assert len(logger.handlers) == 1


def test_configure_logging_writes_file(tmp_path, reset_logging):
    logger = get_logger("ama_mitigator.test_file")
    log_file = tmp_path / "logs" / "run.log"

    configure_logging("DEBUG", log_file)
    logger.debug("node processed")

    assert logger.level == logging.DEBUG
    assert "node processed" in log_file.read_text()


def test_each_record_written_once(tmp_path, capsys, reset_logging):
    logger = get_logger("ama_mitigator.test_once")
    log_file = tmp_path / "run.log"

    configure_logging("INFO", log_file)
    configure_logging("INFO", log_file)
    logger.info("cluster C1 resolved")

    assert capsys.readouterr().err.count("cluster C1 resolved") == 1
    assert log_file.read_text().count("cluster C1 resolved") == 1


def test_file_handler_only_on_package_logger(tmp_path, reset_logging):
    child = get_logger("ama_mitigator.test_child")

    configure_logging("INFO", tmp_path / "run.log")

    package = logging.getLogger(ROOT_LOGGER)
    assert [type(h) for h in package.handlers] == [logging.FileHandler]
    assert not any(isinstance(h, logging.FileHandler) for h in child.handlers)


def test_reconfigure_without_file_detaches_handler(tmp_path):
    configure_logging("INFO", tmp_path / "run.log")
    configure_logging("INFO")

    package = logging.getLogger(ROOT_LOGGER)
    assert not any(isinstance(h, logging.FileHandler) for h in package.handlers)
