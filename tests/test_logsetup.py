import logging
import re

import pytest

from runnerfleet.logsetup import (
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_ERROR,
    LOG_LEVEL_INFO,
    LOG_LEVEL_WARN,
    new_logger,
    resolve_level,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        (LOG_LEVEL_DEBUG, logging.DEBUG),
        (LOG_LEVEL_INFO, logging.INFO),
        (LOG_LEVEL_WARN, logging.WARNING),
        (LOG_LEVEL_ERROR, logging.ERROR),
    ],
)
def test_named_levels(name, expected):
    assert resolve_level(name) == expected


def test_numeric_levels_match_named_ones():
    assert resolve_level("-1") == resolve_level(LOG_LEVEL_DEBUG)
    assert resolve_level("0") == resolve_level(LOG_LEVEL_INFO)
    assert resolve_level("1") == resolve_level(LOG_LEVEL_WARN)
    assert resolve_level("+2") == resolve_level(LOG_LEVEL_ERROR)


def test_more_negative_levels_are_more_verbose():
    assert resolve_level("-2") < logging.DEBUG
    assert resolve_level("-3") < resolve_level("-2")
    assert resolve_level("-128") >= 1


@pytest.mark.parametrize("text", ["verbose", "", "1.5", "128", "-129"])
def test_invalid_levels_raise(text):
    with pytest.raises(ValueError, match="--log-level"):
        resolve_level(text)


def test_new_logger_sets_level():
    logger = new_logger(LOG_LEVEL_WARN, "runnerfleet.test.level")
    assert logger.level == logging.WARNING
    assert logger.isEnabledFor(logging.ERROR)
    assert not logger.isEnabledFor(logging.INFO)


def test_new_logger_does_not_stack_handlers():
    name = "runnerfleet.test.handlers"
    new_logger(LOG_LEVEL_INFO, name)
    logger = new_logger(LOG_LEVEL_DEBUG, name)
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG


def test_new_logger_formats_rfc3339_time():
    logger = new_logger(LOG_LEVEL_INFO, "runnerfleet.test.format")
    record = logger.makeRecord(logger.name, logging.INFO, __file__, 1, "hello", (), None)
    text = logger.handlers[0].format(record)
    assert re.match(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d(Z|[+-]\d\d:\d\d)\tINFO\t", text)
    assert text.endswith("hello")


def test_new_logger_rejects_bad_level():
    with pytest.raises(ValueError):
        new_logger("loud", "runnerfleet.test.bad")