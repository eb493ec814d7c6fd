import os

from neoaura.version import __version__

# neoaura version
VERSION = __version__

# default endpoint of the Aura administrative API
DEFAULT_API_URL = "https://api.neo4j.io"

# path of the OAuth token exchange
OAUTH_TOKEN_PATH = "/oauth/token"

# HTTP headers sent with every request
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"
APPLICATION_JSON = "application/json"
USER_AGENT = f"neoaura/{VERSION}"

# transport defaults: per-call timeout and retries on connection-level timeouts
DEFAULT_HTTP_TIMEOUT = 30
DEFAULT_HTTP_MAX_ATTEMPTS = 5
DEFAULT_HTTP_RETRY_INTERVAL = 15

# poller defaults
DEFAULT_POLL_INTERVAL = 15
DEFAULT_POLL_TIMEOUT_MINUTES = 30
DEFAULT_POLL_SETTLE_DELAY = 60
# number of initial ticks on which the completion predicate is never evaluated
POLL_WARMUP_TICKS = 2

# value stored instead of the generated password when the default user is not retrieved
PASSWORD_NOT_RETRIEVED = "N/A"

# environment variable truthiness
TRUE_STRINGS = ("1", "true", "True")
FALSE_STRINGS = ("0", "false", "False")

# log levels accepted by AURA_LOG
LOG_LEVELS = ("trace-internal", "trace", "debug", "info", "warn", "error", "warning")
AURA_LOG_TRACE = "trace"
AURA_LOG_TRACE_INTERNAL = "trace-internal"
TRACE_LOG_LEVELS = [AURA_LOG_TRACE, AURA_LOG_TRACE_INTERNAL]

# default directory holding configuration profiles
DEFAULT_CONFIG_DIR = os.path.expanduser("~/.neoaura")

DEFAULT_ENCODING = "utf-8"
