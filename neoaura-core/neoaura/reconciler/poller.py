"""
The completion poller blocks until an asynchronously executed action reaches its terminal status. Each call walks
through ``SUBMITTED -> POLLING -> COMPLETED | FAILED | TIMED_OUT``:

* every tick fetches the resource and records its status
* the first ``warmup_ticks`` ticks never complete, since a just-submitted action may not be visible yet
* past the warm-up, a status satisfying the terminal condition completes the poll after a settle delay
* a fetch error fails the poll, except a 404 while waiting for a delete, which means the delete is done
* once the attempt budget ``ceil(timeout_minutes * 60 / interval)`` is used up, the poll times out
"""

import logging
import time
from dataclasses import dataclass as std_dataclass
from math import ceil
from typing import Any, Callable, Dict, Optional

from pydantic import Field
from pydantic.dataclasses import dataclass

from neoaura import config
from neoaura.constants import POLL_WARMUP_TICKS
from neoaura.exceptions import PollTimeoutError, ResourceNotFound
from neoaura.http.client import AuraHttpClient
from neoaura.reconciler.models import Action, ResourceKind, terminal_condition
from neoaura.reconciler.resources import fetch_resource

LOG = logging.getLogger(__name__)


@dataclass
class PollSettings:
    interval: float = Field(
        default_factory=lambda: config.AURA_POLL_INTERVAL,
        title="Seconds between two status polls",
        gt=0,
    )
    timeout_minutes: float = Field(
        default_factory=lambda: config.AURA_POLL_TIMEOUT_MINUTES,
        title="Total poll budget in minutes",
        gt=0,
    )
    settle_delay: float = Field(
        default_factory=lambda: config.AURA_POLL_SETTLE_DELAY,
        title="Seconds to wait after the terminal status was observed",
        ge=0,
    )
    warmup_ticks: int = Field(
        POLL_WARMUP_TICKS, title="Initial ticks on which a poll never completes", ge=0
    )

    @property
    def max_attempts(self) -> int:
        return max(1, ceil(self.timeout_minutes * 60 / self.interval))


@std_dataclass
class PollAttempt:
    """State of a single poll call. Status changes are only tracked for diagnostics."""

    kind: ResourceKind
    resource_id: str
    action: Action
    tick: int = 0
    initial_status: Optional[str] = None
    status: Optional[str] = None

    def observe(self, status: Optional[str]):
        if self.initial_status is None:
            self.initial_status = status
            LOG.debug("initial status of %s %s: %s", self.kind, self.resource_id, status)
        elif status != self.status:
            LOG.debug(
                "status of %s %s changed from %s to %s", self.kind, self.resource_id, self.status, status
            )
        self.status = status


class CompletionPoller:
    def __init__(
        self,
        client: AuraHttpClient,
        settings: PollSettings = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.settings = settings or PollSettings()
        self.sleep = sleep

    def await_completion(
        self, token: str, kind: ResourceKind, resource_id: str, action: Action
    ) -> Optional[Dict[str, Any]]:
        """
        Waits until the given action has completed on the resource.

        :return: the resource as fetched on the completing tick, or None if a delete completed with a 404
        :raises PollTimeoutError: if the action did not complete within the poll budget
        :raises AuraError: if the resource could not be fetched
        """
        condition = terminal_condition(action, kind)
        LOG.info("waiting for %s of %s %s to complete", action.gerund, kind, resource_id)
        return self._poll(
            token,
            PollAttempt(kind, resource_id, action),
            lambda resource: condition.is_complete(resource.get("status")),
            warmup_ticks=self.settings.warmup_ticks,
            settle_delay=self.settings.settle_delay,
        )

    def await_transition(
        self,
        token: str,
        kind: ResourceKind,
        resource_id: str,
        action: Action,
        is_applied: Callable[[Dict[str, Any]], bool] = None,
    ) -> Dict[str, Any]:
        """
        Waits until the resource shows a status outside the terminal statuses of the given action, i.e., until the
        remote side has started working on the action. Used before ``await_completion`` for actions whose terminal
        status equals the status the resource had before the action was submitted.

        :param is_applied: optional check of the fetched resource, the wait also ends once it holds. Catches changes
            whose intermediate status is too short to be observed.
        """
        condition = terminal_condition(action, kind)

        def has_started(resource: Dict[str, Any]) -> bool:
            if not condition.is_complete(resource.get("status")):
                return True
            return bool(is_applied and is_applied(resource))

        LOG.info("waiting for %s of %s %s to start", action.gerund, kind, resource_id)
        return self._poll(
            token,
            PollAttempt(kind, resource_id, action),
            has_started,
            warmup_ticks=0,
            settle_delay=0,
        )

    def _poll(
        self,
        token: str,
        attempt: PollAttempt,
        is_complete: Callable[[Dict[str, Any]], bool],
        warmup_ticks: int,
        settle_delay: float,
    ) -> Optional[Dict[str, Any]]:
        max_attempts = self.settings.max_attempts
        kind, resource_id, action = attempt.kind, attempt.resource_id, attempt.action

        while True:
            try:
                resource = fetch_resource(self.client, token, kind, resource_id)
            except ResourceNotFound:
                if action == Action.DELETE:
                    LOG.info("%s %s no longer exists, delete complete", kind, resource_id)
                    return None
                raise

            status = resource.get("status")
            attempt.observe(status)

            if attempt.tick < warmup_ticks:
                LOG.info(
                    "not completing before check %s, current status of %s %s: %s",
                    attempt.tick + 1,
                    kind,
                    resource_id,
                    status,
                )
            elif is_complete(resource):
                LOG.debug(
                    "%s of %s %s complete with status %s after %s ticks",
                    action.gerund,
                    kind,
                    resource_id,
                    status,
                    attempt.tick + 1,
                )
                if settle_delay:
                    self.sleep(settle_delay)
                return resource
            else:
                LOG.debug("current status of %s %s: %s", kind, resource_id, status)

            attempt.tick += 1
            if attempt.tick >= max_attempts:
                raise PollTimeoutError(action.gerund, str(kind), resource_id, attempt.tick)
            self.sleep(self.settings.interval)
