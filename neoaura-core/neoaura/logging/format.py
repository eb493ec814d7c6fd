"""
Log formatting for neoaura. A single filter prepares every record: short level name, shortened logger name,
trimmed thread name and, on the request trace handler, the method, URL and status of the API call.
"""

import logging
from functools import lru_cache

MAX_THREAD_NAME_LEN = 12
MAX_NAME_LEN = 26

LOG_FORMAT = (
    f"%(asctime)s.%(msecs)03d %(aura_level)5s --- [%(aura_thread){MAX_THREAD_NAME_LEN}s] "
    f"%(aura_name)-{MAX_NAME_LEN}s : %(message)s%(aura_request)s"
)
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

SHORT_LEVEL_NAMES = {"WARNING": "WARN", "CRITICAL": "FATAL"}


class DefaultFormatter(logging.Formatter):
    def __init__(self, fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT):
        super().__init__(fmt=fmt, datefmt=datefmt)


class AddFormattedAttributes(logging.Filter):
    """
    Adds the ``aura_*`` attributes used by ``LOG_FORMAT`` to each record. With ``trace_requests``, records carrying
    the ``http_*`` extras of the HTTP client get the request appended as ``aura_request``.
    """

    def __init__(
        self,
        max_name_len: int = MAX_NAME_LEN,
        max_thread_len: int = MAX_THREAD_NAME_LEN,
        trace_requests: bool = False,
    ):
        super().__init__()
        self.max_name_len = max_name_len
        self.max_thread_len = max_thread_len
        self.trace_requests = trace_requests

    def filter(self, record):
        record.aura_level = SHORT_LEVEL_NAMES.get(record.levelname, record.levelname)
        record.aura_name = shorten_logger_name(record.name, self.max_name_len)
        record.aura_thread = record.threadName[-self.max_thread_len :]
        record.aura_request = request_trace(record) if self.trace_requests else ""
        return True


def request_trace(record: logging.LogRecord) -> str:
    if not hasattr(record, "http_method"):
        return ""
    return "; %s %s -> %s (attempt %s)" % (
        record.http_method,
        getattr(record, "http_url", "-"),
        getattr(record, "http_status", "-"),
        getattr(record, "http_attempt", "-"),
    )


@lru_cache(maxsize=256)
def shorten_logger_name(name: str, length: int) -> str:
    """
    Abbreviates the package parts of a logger name to their first letter, outermost first, until the name fits.
    ``neoaura.reconciler.poller`` with length 20 turns into ``n.reconciler.poller``. Names which are still too long
    are cut from the left.
    """
    parts = name.split(".")
    for i in range(len(parts) - 1):
        if len(".".join(parts)) <= length:
            break
        parts[i] = parts[i][:1]
    return ".".join(parts)[-length:]
