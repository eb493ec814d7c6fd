from typing import Optional


class AuraError(Exception):
    """
    Base class of all errors raised by neoaura. Every error carries a single human-readable message and, where the
    error originates from an HTTP response, the status code of that response.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(AuraError):
    """Missing or invalid configuration, e.g., no client credentials."""

    pass


class TransportError(AuraError):
    """A request could not be executed: connection errors, or timeouts after all attempts were used up."""

    def __init__(self, message: str, method: str, url: str, attempts: int = 1):
        self.method = method
        self.url = url
        self.attempts = attempts
        super().__init__(message)


class DecodeError(AuraError):
    """The response body is not a JSON object."""

    pass


class AuthenticationError(AuraError):
    pass


class AuraApiError(AuraError):
    """
    The remote API rejected a request or answered with a status code that is not handled. ``reason`` holds the
    machine-readable reason of the first error of the error envelope, if there was one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message, status_code)

    def __str__(self):
        if self.status_code:
            return f"{self.status_code} - {self.message}"
        return self.message


class ResourceNotFound(AuraApiError):
    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message, 404, reason)


class ResourceAlreadyExists(AuraError):
    """Raised by the pre-flight check before a create request is sent, never by the remote API."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} {name} already exists")


class PollTimeoutError(AuraError):
    """
    An action did not reach its terminal status within the poll budget. The remote action may still complete
    afterwards, callers should re-read the resource before deciding what to do.
    """

    def __init__(self, action: str, kind: str, resource_id: str, attempts: int):
        self.action = action
        self.kind = kind
        self.resource_id = resource_id
        self.attempts = attempts
        super().__init__(
            f"exceeded max number of tries ({attempts}) for successfully {action} {kind} {resource_id}"
        )
