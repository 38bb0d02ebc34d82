import json
import logging

import pytest
import structlog

from roster_recon.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


def test_json_output_goes_to_stderr(restore_logging, capsys):
    setup_logging(json_output=True, log_level="INFO")
    get_logger("roster_recon.test").info("roster_rows_parsed", accepted=3)

    captured = capsys.readouterr()
    assert captured.out == ""
    event = json.loads(captured.err.strip().splitlines()[-1])
    assert event["event"] == "roster_rows_parsed"
    assert event["accepted"] == 3
    assert event["level"] == "info"
    assert "timestamp" in event


def test_level_filtering(restore_logging, capsys):
    setup_logging(json_output=True, log_level="warning")
    logger = get_logger("roster_recon.test")
    logger.info("hidden")
    logger.warning("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err
