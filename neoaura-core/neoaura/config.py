import logging
import os
from typing import List, Optional, Union

from neoaura.constants import (
    DEFAULT_API_URL,
    DEFAULT_CONFIG_DIR,
    DEFAULT_HTTP_MAX_ATTEMPTS,
    DEFAULT_HTTP_RETRY_INTERVAL,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_SETTLE_DELAY,
    DEFAULT_POLL_TIMEOUT_MINUTES,
    FALSE_STRINGS,
    LOG_LEVELS,
    TRACE_LOG_LEVELS,
    TRUE_STRINGS,
)

LOG = logging.getLogger(__name__)


def eval_log_type(env_var_name: str) -> Union[str, bool]:
    """Get the log type from environment variable"""
    aura_log = os.environ.get(env_var_name, "").lower().strip()
    return aura_log if aura_log in LOG_LEVELS else False


def parse_boolean_env(env_var_name: str) -> Optional[bool]:
    """Parse the value of the given env variable and return True/False, or None if it is not a boolean value."""
    value = os.environ.get(env_var_name, "").lower().strip()
    if value in TRUE_STRINGS:
        return True
    if value in FALSE_STRINGS:
        return False
    return None


def is_env_true(env_var_name: str) -> bool:
    """Whether the given environment variable has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() in TRUE_STRINGS


def is_env_not_false(env_var_name: str) -> bool:
    """Whether the given environment variable is empty or has a truthy value."""
    return os.environ.get(env_var_name, "").lower().strip() not in FALSE_STRINGS


def parse_number_env(env_var_name: str, default: Union[int, float]) -> Union[int, float]:
    """Parse a numeric env variable, falling back to ``default`` if it is unset or not a number."""
    value = os.environ.get(env_var_name, "").strip()
    if not value:
        return default
    try:
        number = float(value)
    except ValueError:
        LOG.warning("Ignoring non-numeric value %r for %s", value, env_var_name)
        return default
    return int(number) if number.is_integer() else number


def load_environment(profiles: str = None, env=os.environ) -> List[str]:
    """Loads the environment variables from ~/.neoaura/{profile}.env, for each profile listed in the profiles.
    :param env: environment to load profile to. Defaults to `os.environ`
    :param profiles: a comma separated list of profiles to load (defaults to "default")
    :returns str: the list of the actually loaded profiles (might be the fallback)
    """
    if not profiles:
        profiles = "default"

    profiles = [profile.strip() for profile in profiles.split(",")]
    environment = {}
    import dotenv

    for profile in profiles:
        path = os.path.join(CONFIG_DIR, f"{profile}.env")
        if not os.path.exists(path):
            continue
        environment.update(dotenv.dotenv_values(path))

    for k, v in environment.items():
        # we do not want to override the environment
        if k not in env and v is not None:
            env[k] = v

    return profiles


# the configuration profile to load
CONFIG_PROFILE = os.environ.get("CONFIG_PROFILE", "").strip()

# host configuration directory
CONFIG_DIR = os.environ.get("CONFIG_DIR", DEFAULT_CONFIG_DIR)

# keep this on top to populate environment
LOADED_PROFILES = load_environment(CONFIG_PROFILE)

# whether to enable verbose debug logging
AURA_LOG = eval_log_type("AURA_LOG")
DEBUG = is_env_true("DEBUG") or AURA_LOG in TRACE_LOG_LEVELS

# base URL of the Aura administrative API
AURA_API_URL = (os.environ.get("AURA_API_URL") or DEFAULT_API_URL).strip().rstrip("/")

# OAuth client credentials used to obtain the bearer token
AURA_CLIENT_ID = os.environ.get("AURA_CLIENT_ID", "").strip()
AURA_CLIENT_SECRET = os.environ.get("AURA_CLIENT_SECRET", "").strip()

# per-call HTTP timeout (in seconds)
AURA_HTTP_TIMEOUT = parse_number_env("AURA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)

# number of attempts made when a request times out at connection level
AURA_HTTP_MAX_ATTEMPTS = int(parse_number_env("AURA_HTTP_MAX_ATTEMPTS", DEFAULT_HTTP_MAX_ATTEMPTS))

# delay (in seconds) between two attempts of a timed out request
AURA_HTTP_RETRY_INTERVAL = parse_number_env("AURA_HTTP_RETRY_INTERVAL", DEFAULT_HTTP_RETRY_INTERVAL)

# interval (in seconds) between two status polls
AURA_POLL_INTERVAL = parse_number_env("AURA_POLL_INTERVAL", DEFAULT_POLL_INTERVAL)

# total budget (in minutes) for waiting on an action to complete
AURA_POLL_TIMEOUT_MINUTES = parse_number_env(
    "AURA_POLL_TIMEOUT_MINUTES", DEFAULT_POLL_TIMEOUT_MINUTES
)

# delay (in seconds) after a terminal status before the resource is returned
AURA_POLL_SETTLE_DELAY = parse_number_env("AURA_POLL_SETTLE_DELAY", DEFAULT_POLL_SETTLE_DELAY)


def is_trace_logging_enabled():
    return bool(AURA_LOG) and AURA_LOG in TRACE_LOG_LEVELS


def collect_config_items() -> List[tuple]:
    """Returns a list of key-value tuples of the neoaura configuration values, with secrets masked."""
    result = []
    for key in sorted(globals().keys()):
        if not key.startswith("AURA_") and key not in ("DEBUG", "CONFIG_PROFILE", "CONFIG_DIR"):
            continue
        value = globals()[key]
        if key == "AURA_CLIENT_SECRET" and value:
            value = "********"
        result.append((key, value))
    return result
