import logging
import time
from typing import Callable, Dict, NamedTuple, Optional, Tuple, Union

import requests

from neoaura import config, constants
from neoaura.exceptions import TransportError
from neoaura.utils.strings import to_str, truncate

LOG = logging.getLogger(__name__)
REQUEST_LOG = logging.getLogger("neoaura.request")


class HttpResponse(NamedTuple):
    """Status code and raw body of a response. Application-level status codes are never interpreted here."""

    status_code: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return to_str(self.body or b"", errors="replace")


class BearerAuth(requests.auth.AuthBase):
    def __init__(self, token: str):
        self.token = token

    def __call__(self, r):
        r.headers["Authorization"] = f"Bearer {self.token}"
        return r


class NetrcBypassAuth(requests.auth.AuthBase):
    """Prevents requests from reading credentials from ~/.netrc for unauthenticated calls"""

    def __call__(self, r):
        return r


class AuraHttpClient:
    """
    Sends single requests to the Aura API. A request that times out at connection level is retried up to
    ``max_attempts`` times, ``retry_interval`` seconds apart. All other transport errors (DNS resolution, refused
    connections, TLS) are raised immediately as ``TransportError``.
    """

    session: requests.Session

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        max_attempts: int = None,
        retry_interval: float = None,
        session: requests.Session = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = (base_url or config.AURA_API_URL).rstrip("/")
        self.timeout = config.AURA_HTTP_TIMEOUT if timeout is None else timeout
        self.max_attempts = config.AURA_HTTP_MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.retry_interval = (
            config.AURA_HTTP_RETRY_INTERVAL if retry_interval is None else retry_interval
        )
        self.session = session or requests.Session()
        self.sleep = sleep

    def url(self, path: str) -> str:
        """Returns the absolute URL for the given API path. Absolute URLs are returned unchanged."""
        if "://" in path:
            return path
        return f"{self.base_url}{path}"

    def send(
        self,
        method: str,
        path: str,
        body: Union[str, bytes, None] = None,
        token: Optional[str] = None,
        basic_auth: Optional[Tuple[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """
        Executes a single request.

        :param method: the HTTP verb
        :param path: the API path (e.g., ``/v1/instances``) or an absolute URL
        :param body: the optional (JSON) request payload
        :param token: bearer token used to authenticate the request
        :param basic_auth: client id and secret, only used for the token exchange
        :param params: optional query parameters
        :return: the status code and raw body of the response
        :raises TransportError: if the request could not be executed
        """
        url = self.url(path)
        headers = {
            constants.HEADER_CONTENT_TYPE: constants.APPLICATION_JSON,
            constants.HEADER_USER_AGENT: constants.USER_AGENT,
        }
        if token:
            auth = BearerAuth(token)
        elif basic_auth:
            auth = requests.auth.HTTPBasicAuth(*basic_auth)
        else:
            auth = NetrcBypassAuth()

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self.session.request(
                    method=method,
                    url=url,
                    params=params,
                    data=body,
                    headers=headers,
                    auth=auth,
                    timeout=self.timeout,
                )
            except requests.exceptions.Timeout as e:
                REQUEST_LOG.debug(
                    "%s %s timed out",
                    method,
                    url,
                    extra=self._trace(method, url, "timeout", attempt),
                )
                if attempt >= self.max_attempts:
                    raise TransportError(
                        f"unable to execute {method} request after {attempt} attempts\n"
                        f"\turl: {url}\n\tpayload: {truncate(to_str(body or ''), 500)}",
                        method=method,
                        url=url,
                        attempts=attempt,
                    ) from e
                LOG.info(
                    "%s %s timed out (attempt %s of %s), retrying in %s seconds",
                    method,
                    url,
                    attempt,
                    self.max_attempts,
                    self.retry_interval,
                )
                self.sleep(self.retry_interval)
                continue
            except requests.exceptions.RequestException as e:
                raise TransportError(
                    f"error executing {method} request to {url}: {e}",
                    method=method,
                    url=url,
                    attempts=attempt,
                ) from e

            REQUEST_LOG.debug(
                "%s %s -> %s",
                method,
                url,
                response.status_code,
                extra=self._trace(method, url, response.status_code, attempt),
            )
            return HttpResponse(response.status_code, response.content)

    @staticmethod
    def _trace(method, url, status, attempt) -> dict:
        return {"http_method": method, "http_url": url, "http_status": status, "http_attempt": attempt}

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
