import logging
from typing import Any, Dict, NamedTuple, Optional

from neoaura.api.codec import encode, first_error_message, has_errors
from neoaura.exceptions import AuraApiError, ResourceAlreadyExists, ResourceNotFound
from neoaura.http.client import AuraHttpClient
from neoaura.reconciler.models import ACTION_ROUTES, Action, ResourceKind, is_benign_conflict
from neoaura.reconciler.resources import (
    decode_response,
    error_from_response,
    fetch_resource,
    list_resources,
)

LOG = logging.getLogger(__name__)


class DispatchResult(NamedTuple):
    # the decoded response body, or the re-fetched resource envelope for a benign conflict
    body: Dict[str, Any]
    # whether the remote API reported that the action is already in progress or already satisfied
    benign_conflict: bool = False

    @property
    def data(self) -> Dict[str, Any]:
        data = self.body.get("data")
        return data if isinstance(data, dict) else {}


class ActionDispatcher:
    """
    Submits actions to the Aura API and classifies the immediate response. Submitting an action only enqueues it
    remotely, the dispatcher never waits for its completion.
    """

    def __init__(self, client: AuraHttpClient):
        self.client = client

    def dispatch(
        self,
        token: str,
        kind: ResourceKind,
        action: Action,
        resource_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> DispatchResult:
        """
        Submits the given action.

        :param token: the bearer token
        :param kind: the kind of the addressed resource
        :param action: the action to submit
        :param resource_id: id of the addressed resource, for all actions but create
        :param payload: optional JSON payload
        :return: the decoded response, flagged as benign conflict if the action was already underway
        :raises ResourceNotFound: if the addressed resource does not exist
        :raises AuraApiError: if the remote API rejected the action or answered with an unexpected status code
        """
        route = ACTION_ROUTES[action]
        path = route.path(kind, resource_id)
        body = encode(payload) if payload is not None else None

        LOG.debug("submitting %s %s: %s %s %s", action, kind, route.method, path, payload or "")
        response = self.client.send(route.method, path, body=body, token=token)
        tree = decode_response(response)

        if response.ok:
            return DispatchResult(tree)

        if response.status_code in (400, 409):
            message = first_error_message(tree) if has_errors(tree) else response.text
            if resource_id and is_benign_conflict(action, message):
                LOG.info(
                    "%s of %s %s is already underway or satisfied (%s)",
                    action.gerund,
                    kind,
                    resource_id,
                    message,
                )
                return DispatchResult(self._current_state(token, kind, resource_id), True)
            raise error_from_response(response, tree)

        error = error_from_response(response, tree)
        if isinstance(error, ResourceNotFound):
            raise error
        # any other status code is remote behavior this client does not know about
        raise AuraApiError(
            f"unexpected response to {action} {kind}: {error.message}",
            response.status_code,
            error.reason,
        )

    def _current_state(self, token: str, kind: ResourceKind, resource_id: str) -> Dict[str, Any]:
        try:
            return {"data": fetch_resource(self.client, token, kind, resource_id)}
        except ResourceNotFound:
            # the only benign conflict on a missing resource is a delete that already finished
            return {"data": {"id": resource_id}}

    def ensure_name_available(self, token: str, kind: ResourceKind, tenant_id: str, name: str):
        """
        Pre-flight check run before creating a resource: fails if a resource with the same name already exists for
        the tenant, so name collisions never depend on the conflict semantics of the remote API.

        :raises ResourceAlreadyExists: if the name is taken
        """
        for resource in list_resources(self.client, token, kind, tenant_id):
            if resource.get("name") == name:
                LOG.debug("found existing %s %s with id %s", kind, name, resource.get("id"))
                raise ResourceAlreadyExists(str(kind), name)
