import logging
import sys

from neoaura import config, constants

from .format import AddFormattedAttributes, DefaultFormatter

LOG = logging.getLogger(__name__)

# The log levels for modules are evaluated incrementally for logging granularity,
# from highest (DEBUG) to lowest (TRACE_INTERNAL). Hence, each module below should have
# higher level which serves as the default.

default_log_levels = {
    "requests": logging.WARNING,
    "urllib3": logging.WARNING,
    "werkzeug": logging.WARNING,
    "neoaura.request": logging.INFO,
    "neoaura.reconciler.poller": logging.INFO,
}

trace_log_levels = {
    "neoaura.request": logging.DEBUG,
    "neoaura.reconciler.poller": logging.DEBUG,
}

trace_internal_log_levels = {
    "urllib3": logging.DEBUG,
}


def get_log_level_from_config():
    # overriding the log level if AURA_LOG has been set
    if config.AURA_LOG:
        log_level = str(config.AURA_LOG).upper()
        if log_level.lower() in constants.TRACE_LOG_LEVELS:
            log_level = "DEBUG"
        log_level = logging._nameToLevel[log_level]
        return log_level

    return logging.DEBUG if config.DEBUG else logging.INFO


def setup_logging_from_config():
    log_level = get_log_level_from_config()
    setup_logging(log_level)

    if config.is_trace_logging_enabled():
        for name, level in trace_log_levels.items():
            logging.getLogger(name).setLevel(level)
        setup_request_trace_logger()
    if config.AURA_LOG == constants.AURA_LOG_TRACE_INTERNAL:
        for name, level in trace_internal_log_levels.items():
            logging.getLogger(name).setLevel(level)

    if config.DEBUG:
        LOG.debug("neoaura configuration: %s", dict(config.collect_config_items()))


def create_default_handler(log_level: int):
    log_handler = logging.StreamHandler(stream=sys.stderr)
    log_handler.setLevel(log_level)
    log_handler.setFormatter(DefaultFormatter())
    log_handler.addFilter(AddFormattedAttributes())
    return log_handler


def setup_logging(log_level=logging.INFO) -> None:
    """
    Configures the python logging environment for neoaura.

    :param log_level: the optional log level.
    """
    # set create a default handler for the root logger (basically logging.basicConfig but explicit)
    log_handler = create_default_handler(log_level)

    # replace any existing handlers
    logging.basicConfig(level=log_level, handlers=[log_handler], force=True)

    # set log levels of loggers
    logging.root.setLevel(log_level)
    logging.getLogger("neoaura").setLevel(log_level)
    for logger, level in default_log_levels.items():
        logging.getLogger(logger).setLevel(level)


def setup_request_trace_logger() -> None:
    """
    Gives the ``neoaura.request`` logger its own handler, so each API call is logged with method, URL and status.
    """
    logger = logging.getLogger("neoaura.request")
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.addFilter(AddFormattedAttributes(trace_requests=True))
    handler.setFormatter(DefaultFormatter())
    logger.handlers = [handler]
    logger.propagate = False
