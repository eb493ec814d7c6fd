from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, Generic, Optional, Type, TypeVar

from neoaura.exceptions import AuraError
from neoaura.reconciler.operations import ResourceOperations

LOG = logging.getLogger(__name__)

Properties = TypeVar("Properties")

PUBLIC_REGISTRY: Dict[str, Type[ResourceProvider]] = {}


class OperationStatus(Enum):
    PENDING = auto()
    IN_PROGRESS = auto()
    SUCCESS = auto()
    FAILED = auto()


@dataclass
class ProgressEvent(Generic[Properties]):
    status: OperationStatus
    resource_model: Optional[Properties]

    message: str = ""
    # HTTP status code of the failed request, if the failure originated from a response
    error_code: Optional[int] = None


@dataclass
class ResourceRequest(Generic[Properties]):
    token: str
    desired_state: Optional[Properties] = None
    # the last known state, set for read, update and delete
    previous_state: Optional[Properties] = None
    # identifier of an existing resource to adopt, only set for imports
    identifier: Optional[str] = None


class ResourceProvider(Generic[Properties]):
    """
    Base class of the resource providers. A provider maps the declarative model of a resource onto the lifecycle
    operations of the Aura API. Every method blocks until the resource has reached its final state and reports the
    outcome as a ``ProgressEvent``, failures included.
    """

    TYPE: str

    def __init__(self, operations: ResourceOperations):
        self.operations = operations

    @property
    def client(self):
        return self.operations.client

    def create(self, request: ResourceRequest[Properties]) -> ProgressEvent[Properties]:
        raise NotImplementedError

    def read(self, request: ResourceRequest[Properties]) -> ProgressEvent[Properties]:
        raise NotImplementedError

    def update(self, request: ResourceRequest[Properties]) -> ProgressEvent[Properties]:
        raise NotImplementedError

    def delete(self, request: ResourceRequest[Properties]) -> ProgressEvent[Properties]:
        raise NotImplementedError


def register_resource_provider(cls: Type[ResourceProvider]) -> Type[ResourceProvider]:
    PUBLIC_REGISTRY[cls.TYPE] = cls
    return cls


def get_resource_provider(resource_type: str, operations: ResourceOperations) -> ResourceProvider:
    try:
        factory = PUBLIC_REGISTRY[resource_type]
    except KeyError:
        raise ValueError(f"no resource provider registered for type {resource_type}") from None
    return factory(operations)


def reports_failures(fn: Callable) -> Callable:
    """Turns an ``AuraError`` raised by the decorated provider method into a FAILED progress event."""

    @functools.wraps(fn)
    def _wrapper(self, request: ResourceRequest, *args, **kwargs) -> ProgressEvent:
        try:
            return fn(self, request, *args, **kwargs)
        except AuraError as e:
            LOG.debug("%s of %s failed: %s", fn.__name__, self.TYPE, e, exc_info=LOG.isEnabledFor(logging.DEBUG))
            return ProgressEvent(
                status=OperationStatus.FAILED,
                resource_model=request.desired_state or request.previous_state,
                message=e.message,
                error_code=e.status_code,
            )

    return _wrapper
