import logging
import warnings

import pytest

from neoaura import config
from neoaura.logging.setup import get_log_level_from_config, setup_logging, setup_logging_from_config


@pytest.fixture(autouse=True)
def restore_logging():
    root_handlers = list(logging.root.handlers)
    root_level = logging.root.level
    request_logger = logging.getLogger("neoaura.request")
    request_handlers = list(request_logger.handlers)
    yield
    logging.root.handlers = root_handlers
    logging.root.setLevel(root_level)
    request_logger.handlers = request_handlers
    request_logger.propagate = True
    for name in ("neoaura", "neoaura.request", "neoaura.reconciler.poller", "urllib3"):
        logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.mark.parametrize(
    "aura_log, debug, expected",
    [
        (False, False, logging.INFO),
        (False, True, logging.DEBUG),
        ("warning", False, logging.WARNING),
        ("trace", False, logging.DEBUG),
        ("trace-internal", False, logging.DEBUG),
    ],
)
def test_get_log_level_from_config(monkeypatch, aura_log, debug, expected):
    monkeypatch.setattr(config, "AURA_LOG", aura_log)
    monkeypatch.setattr(config, "DEBUG", debug)
    assert get_log_level_from_config() == expected


def test_setup_logging_from_config(monkeypatch):
    monkeypatch.setattr(config, "AURA_LOG", False)
    monkeypatch.setattr(config, "DEBUG", False)

    setup_logging_from_config()

    assert logging.getLogger("neoaura").level == logging.INFO
    assert logging.getLogger("urllib3").level == logging.WARNING
    assert logging.getLogger("neoaura.reconciler.poller").level == logging.INFO


def test_setup_trace_logging(monkeypatch):
    monkeypatch.setattr(config, "AURA_LOG", "trace")
    monkeypatch.setattr(config, "DEBUG", True)

    setup_logging_from_config()

    assert logging.getLogger("neoaura.reconciler.poller").level == logging.DEBUG
    request_logger = logging.getLogger("neoaura.request")
    assert request_logger.level == logging.DEBUG
    assert not request_logger.propagate
    assert request_logger.handlers[0].filters[0].trace_requests


def test_setup_logging_keeps_warning_filters():
    filters = list(warnings.filters)

    setup_logging(logging.DEBUG)

    assert warnings.filters == filters
    with pytest.warns(UserWarning):
        warnings.warn("still visible", UserWarning)
