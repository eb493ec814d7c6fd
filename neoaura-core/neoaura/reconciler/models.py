"""
Resource kinds, actions and the status vocabulary of the Aura API, expressed as lookup tables. Supporting a new
resource kind or action means adding entries here, not adding branches to the dispatcher or the poller.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Pattern, Tuple

from neoaura.api import CustomerManagedKeyStatus, InstanceStatus
from neoaura.utils.strings import gerund


@dataclass(frozen=True)
class ResourceKind:
    name: str
    collection_path: str
    # query parameter used to filter the collection by tenant
    tenant_parameter: str = "tenantId"

    def item_path(self, resource_id: str) -> str:
        return f"{self.collection_path}/{resource_id}"

    def __str__(self):
        return self.name


INSTANCE = ResourceKind("instance", "/v1/instances")
CUSTOMER_MANAGED_KEY = ResourceKind("cmk", "/v1/customer-managed-keys")


class Action(str, Enum):
    CREATE = "create"
    DELETE = "delete"
    PAUSE = "pause"
    RESUME = "resume"
    RENAME = "rename"
    UPDATE = "update"

    @property
    def gerund(self) -> str:
        return gerund(self.value)

    def __str__(self):
        return self.value


class Route(NamedTuple):
    method: str
    # whether the path addresses a single resource (``{collection}/{id}``)
    by_id: bool
    # optional sub-resource appended to the item path, e.g., ``pause``
    suffix: Optional[str] = None

    def path(self, kind: ResourceKind, resource_id: Optional[str] = None) -> str:
        if not self.by_id:
            return kind.collection_path
        if not resource_id:
            raise ValueError(f"{self.method} on a single {kind} requires a resource id")
        path = kind.item_path(resource_id)
        return f"{path}/{self.suffix}" if self.suffix else path


ACTION_ROUTES: Dict[Action, Route] = {
    Action.CREATE: Route("POST", by_id=False),
    Action.DELETE: Route("DELETE", by_id=True),
    Action.PAUSE: Route("POST", by_id=True, suffix="pause"),
    Action.RESUME: Route("POST", by_id=True, suffix="resume"),
    Action.RENAME: Route("PATCH", by_id=True),
    Action.UPDATE: Route("PATCH", by_id=True),
}


class Completion(NamedTuple):
    """
    Terminal condition of an action. The action is complete when the observed status is one of ``statuses``, or,
    with ``negate`` set, when it is none of them.
    """

    statuses: FrozenSet[str]
    negate: bool = False

    def is_complete(self, status: Optional[str]) -> bool:
        if self.negate:
            return status not in self.statuses
        return status in self.statuses


DELETE_IN_PROGRESS = Completion(
    frozenset(
        {
            InstanceStatus.deleting,
            InstanceStatus.destroying,
            InstanceStatus.updating,
            CustomerManagedKeyStatus.pending,
        }
    ),
    negate=True,
)

RUNNING = Completion(frozenset({InstanceStatus.running}))
PAUSED = Completion(frozenset({InstanceStatus.paused}))
# updates end in the state the instance was in before, which may be paused
RUNNING_OR_PAUSED = Completion(frozenset({InstanceStatus.running, InstanceStatus.paused}))
READY = Completion(frozenset({CustomerManagedKeyStatus.ready}))

TERMINAL_STATUSES: Dict[Tuple[Action, ResourceKind], Completion] = {
    (Action.CREATE, INSTANCE): RUNNING,
    (Action.RESUME, INSTANCE): RUNNING,
    (Action.PAUSE, INSTANCE): PAUSED,
    (Action.UPDATE, INSTANCE): RUNNING_OR_PAUSED,
    (Action.DELETE, INSTANCE): DELETE_IN_PROGRESS,
    (Action.CREATE, CUSTOMER_MANAGED_KEY): READY,
    (Action.UPDATE, CUSTOMER_MANAGED_KEY): READY,
    (Action.DELETE, CUSTOMER_MANAGED_KEY): DELETE_IN_PROGRESS,
}


def terminal_condition(action: Action, kind: ResourceKind) -> Completion:
    try:
        return TERMINAL_STATUSES[(action, kind)]
    except KeyError:
        raise ValueError(f"no terminal status defined for action {action} on {kind}") from None


def _benign_patterns(action: Action, *extra: str) -> List[Pattern]:
    patterns = [
        rf"already {action.gerund}",
        rf"already {action.value.rstrip('e')}ed",
        rf"currently undergoing an operation:\s*{action.gerund}",
    ]
    patterns.extend(extra)
    return [re.compile(pattern, re.IGNORECASE) for pattern in patterns]


# messages of 400/409 responses which indicate that the action is already in progress or already satisfied
BENIGN_CONFLICT_PATTERNS: Dict[Action, List[Pattern]] = {
    Action.PAUSE: _benign_patterns(Action.PAUSE, r"is not running"),
    Action.RESUME: _benign_patterns(Action.RESUME, r"is not paused"),
    Action.DELETE: _benign_patterns(Action.DELETE),
    Action.UPDATE: _benign_patterns(Action.UPDATE),
}


def is_benign_conflict(action: Action, message: str) -> bool:
    return any(pattern.search(message or "") for pattern in BENIGN_CONFLICT_PATTERNS.get(action, []))
