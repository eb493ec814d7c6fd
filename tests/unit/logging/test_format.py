import logging

import pytest

from neoaura.logging.format import AddFormattedAttributes, DefaultFormatter, shorten_logger_name


@pytest.mark.parametrize(
    "name, length, expected",
    [
        ("neoaura", 26, "neoaura"),
        ("neoaura.reconciler.poller", 25, "neoaura.reconciler.poller"),
        ("neoaura.reconciler.poller", 20, "n.reconciler.poller"),
        ("neoaura.reconciler.poller", 10, "n.r.poller"),
        ("neoaura.reconciler.poller", 6, "poller"),
        ("neoaura", 3, "ura"),
    ],
)
def test_shorten_logger_name(name, length, expected):
    assert shorten_logger_name(name, length) == expected


def _record(name="neoaura.reconciler.poller", level=logging.WARNING, msg="status changed", **extra):
    record = logging.LogRecord(name, level, __file__, 1, msg, None, None)
    record.threadName = "ThreadPoolExecutor-0_1"
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_add_formatted_attributes():
    record = _record()

    assert AddFormattedAttributes(max_name_len=10, max_thread_len=8).filter(record)

    assert record.aura_level == "WARN"
    assert record.aura_name == "n.r.poller"
    assert record.aura_thread == "utor-0_1"
    assert record.aura_request == ""


def test_default_formatter():
    record = _record(level=logging.INFO)
    AddFormattedAttributes().filter(record)

    line = DefaultFormatter().format(record)

    assert " INFO --- [" in line
    assert "neoaura.reconciler.poller" in line
    assert line.endswith(": status changed")


def test_request_trace():
    trace = AddFormattedAttributes(trace_requests=True)
    formatter = DefaultFormatter()

    record = _record(name="neoaura.request", level=logging.DEBUG, msg="no api call")
    trace.filter(record)
    assert formatter.format(record).endswith(": no api call")

    record = _record(
        name="neoaura.request",
        level=logging.DEBUG,
        msg="GET /v1/instances/1 -> 200",
        http_method="GET",
        http_url="https://api.neo4j.io/v1/instances/1",
        http_status=200,
        http_attempt=1,
    )
    trace.filter(record)
    assert formatter.format(record).endswith(
        "GET /v1/instances/1 -> 200; GET https://api.neo4j.io/v1/instances/1 -> 200 (attempt 1)"
    )

    # only the trace handler renders the request
    AddFormattedAttributes().filter(record)
    assert formatter.format(record).endswith(": GET /v1/instances/1 -> 200")
