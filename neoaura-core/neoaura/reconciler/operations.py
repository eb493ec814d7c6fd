import logging
from typing import Any, Dict, Optional

from neoaura.api import CdcEnrichmentMode, CustomerManagedKey, Instance
from neoaura.exceptions import AuraApiError, DecodeError
from neoaura.http.client import AuraHttpClient
from neoaura.reconciler.dispatcher import ActionDispatcher, DispatchResult
from neoaura.reconciler.models import (
    CUSTOMER_MANAGED_KEY,
    INSTANCE,
    Action,
    ResourceKind,
    terminal_condition,
)
from neoaura.reconciler.poller import CompletionPoller
from neoaura.reconciler.resources import fetch_resource

LOG = logging.getLogger(__name__)

# instance attributes which are changed with a plain PATCH of a single field
UPDATABLE_FLAGS = ("vector_optimized", "graph_analytics_plugin", "cdc_enrichment_mode")

CDC_ENRICHMENT_MODES = (CdcEnrichmentMode.OFF, CdcEnrichmentMode.DIFF, CdcEnrichmentMode.FULL)

# submissions of an update rejected because the instance is busy with another operation
UPDATE_ATTEMPTS = 2


def _created_id(result: DispatchResult, kind: ResourceKind) -> str:
    resource_id = result.data.get("id")
    if not resource_id:
        raise DecodeError(f"response to create {kind} does not contain an id: {result.body}")
    return resource_id


class ResourceOperations:
    """
    Blocking lifecycle operations on Aura resources. Every operation submits a single action through the
    dispatcher and, where the action is executed asynchronously, waits for it with the completion poller. An
    operation either returns the final state of the resource or raises a single ``AuraError`` describing the
    failed step. After an error the remote state is unknown, callers have to re-read the resource before retrying.
    """

    def __init__(
        self,
        client: AuraHttpClient,
        dispatcher: ActionDispatcher = None,
        poller: CompletionPoller = None,
    ):
        self.client = client
        self.dispatcher = dispatcher or ActionDispatcher(client)
        self.poller = poller or CompletionPoller(client)

    # instances

    def create_instance(
        self,
        token: str,
        name: str,
        tenant_id: str,
        cloud_provider: str,
        region: str,
        instance_type: str,
        memory: str,
        version: str,
        customer_managed_key_id: Optional[str] = None,
        vector_optimized: bool = False,
        graph_analytics_plugin: bool = False,
        paused: bool = False,
        secondaries_count: int = 0,
    ) -> Instance:
        """
        Creates an instance and waits until it is running. Optionally pauses it afterwards, or scales it to the given
        number of secondaries.

        The generated password of the default user is only part of the create response, it is carried over into the
        returned instance under ``password``.

        :raises ResourceAlreadyExists: if the tenant already has an instance with the given name
        """
        self.dispatcher.ensure_name_available(token, INSTANCE, tenant_id, name)

        payload = {
            "version": version,
            "region": region,
            "memory": memory,
            "name": name,
            "type": instance_type,
            "tenant_id": tenant_id,
            "cloud_provider": cloud_provider,
        }
        if customer_managed_key_id:
            payload["customer_managed_key_id"] = customer_managed_key_id
        if vector_optimized:
            payload["vector_optimized"] = True
        if graph_analytics_plugin:
            payload["graph_analytics_plugin"] = True

        LOG.info("creating %s instance %s", instance_type, name)
        result = self.dispatcher.dispatch(token, INSTANCE, Action.CREATE, payload=payload)
        instance_id = _created_id(result, INSTANCE)
        password = result.data.get("password")

        instance = self.poller.await_completion(token, INSTANCE, instance_id, Action.CREATE)
        LOG.info("created instance %s with id %s", name, instance_id)

        if paused:
            instance = self.pause_instance(token, instance_id)
        if secondaries_count:
            instance = self.update_secondaries_count(token, instance_id, secondaries_count)

        instance = dict(instance)
        instance["password"] = password
        return instance

    def delete_instance(self, token: str, instance_id: str) -> None:
        """Deletes the instance and waits until it is gone."""
        self._delete(token, INSTANCE, instance_id)

    def pause_instance(self, token: str, instance_id: str, wait: bool = True) -> Instance:
        return self._instance_action(token, instance_id, Action.PAUSE, wait)

    def resume_instance(self, token: str, instance_id: str, wait: bool = True) -> Instance:
        return self._instance_action(token, instance_id, Action.RESUME, wait)

    def _instance_action(self, token: str, instance_id: str, action: Action, wait: bool) -> Instance:
        LOG.info("%s instance %s", action.gerund, instance_id)
        result = self.dispatcher.dispatch(token, INSTANCE, action, instance_id)
        if not wait:
            return result.data

        if result.benign_conflict:
            status = result.data.get("status")
            if terminal_condition(action, INSTANCE).is_complete(status):
                LOG.info("instance %s is already %s", instance_id, status)
                return result.data

        return self.poller.await_completion(token, INSTANCE, instance_id, action)

    def rename_instance(self, token: str, instance_id: str, name: str) -> Instance:
        """Renames the instance. Renaming is applied synchronously and works on paused instances as well."""
        LOG.info("renaming instance %s to %s", instance_id, name)
        result = self.dispatcher.dispatch(
            token, INSTANCE, Action.RENAME, instance_id, payload={"name": name}
        )
        return result.data

    def resize_instance_memory(self, token: str, instance_id: str, memory: str) -> Instance:
        return self._update_instance(token, instance_id, "memory", memory)

    def update_instance_flag(self, token: str, instance_id: str, flag: str, value: Any) -> Instance:
        """
        Updates one of the optional features of an instance.

        :param flag: one of ``vector_optimized``, ``graph_analytics_plugin`` or ``cdc_enrichment_mode``
        :param value: a bool for the first two, one of ``OFF``, ``DIFF`` or ``FULL`` for the enrichment mode
        """
        if flag not in UPDATABLE_FLAGS:
            raise ValueError(f"unknown instance flag {flag}, expected one of {', '.join(UPDATABLE_FLAGS)}")
        if flag == "cdc_enrichment_mode":
            if value not in CDC_ENRICHMENT_MODES:
                raise ValueError(
                    f"invalid cdc_enrichment_mode {value}, expected one of {', '.join(CDC_ENRICHMENT_MODES)}"
                )
        else:
            value = bool(value)
        return self._update_instance(token, instance_id, flag, value)

    def update_secondaries_count(self, token: str, instance_id: str, count: int) -> Instance:
        if count < 0:
            raise ValueError(f"secondaries count must not be negative: {count}")
        return self._update_instance(token, instance_id, "secondaries_count", count)

    def _update_instance(self, token: str, instance_id: str, field: str, value: Any) -> Instance:
        """
        Changes a single attribute of an instance. The instance ends the update in the same state it started in
        (running or paused), so the update is tracked with two sequential polls: one until the instance has left
        that state (or already shows the new value), one until it is back.

        An update rejected because the instance is busy with another operation is not applied by that operation.
        It is submitted again once the running operation has completed.

        :raises AuraApiError: if the instance stays busy, or the update completed without the new value
        """
        current = fetch_resource(self.client, token, INSTANCE, instance_id)
        if current.get(field) == value:
            LOG.info("%s of instance %s is already %s", field, instance_id, value)
            return current

        for _ in range(UPDATE_ATTEMPTS):
            LOG.info("updating %s of instance %s to %s", field, instance_id, value)
            result = self.dispatcher.dispatch(
                token, INSTANCE, Action.UPDATE, instance_id, payload={field: value}
            )
            if not result.benign_conflict:
                break
            LOG.info("instance %s is busy, waiting for the running operation to complete", instance_id)
            current = self.poller.await_completion(token, INSTANCE, instance_id, Action.UPDATE)
            if current.get(field) == value:
                return current
        else:
            raise AuraApiError(
                f"unable to update {field} of instance {instance_id}, the instance is busy with another operation",
                409,
            )

        self.poller.await_transition(
            token,
            INSTANCE,
            instance_id,
            Action.UPDATE,
            is_applied=lambda resource: resource.get(field) == value,
        )
        instance = self.poller.await_completion(token, INSTANCE, instance_id, Action.UPDATE)
        if instance.get(field) != value:
            raise AuraApiError(
                f"update of {field} of instance {instance_id} completed, but {field} is {instance.get(field)}"
            )
        return instance

    # customer managed keys

    def create_customer_managed_key(
        self,
        token: str,
        name: str,
        tenant_id: str,
        cloud_provider: str,
        region: str,
        instance_type: str,
        key_id: str,
    ) -> CustomerManagedKey:
        """
        Registers a customer managed key and waits until it is ready.

        :raises ResourceAlreadyExists: if the tenant already has a key with the given name
        """
        self.dispatcher.ensure_name_available(token, CUSTOMER_MANAGED_KEY, tenant_id, name)

        payload = {
            "name": name,
            "region": region,
            "instance_type": instance_type,
            "tenant_id": tenant_id,
            "cloud_provider": cloud_provider,
            "key_id": key_id,
        }
        LOG.info("creating customer managed key %s", name)
        result = self.dispatcher.dispatch(
            token, CUSTOMER_MANAGED_KEY, Action.CREATE, payload=payload
        )
        key_id = _created_id(result, CUSTOMER_MANAGED_KEY)
        return self.poller.await_completion(token, CUSTOMER_MANAGED_KEY, key_id, Action.CREATE)

    def delete_customer_managed_key(self, token: str, key_id: str) -> None:
        self._delete(token, CUSTOMER_MANAGED_KEY, key_id)

    def _delete(self, token: str, kind: ResourceKind, resource_id: str) -> Optional[Dict[str, Any]]:
        LOG.info("deleting %s %s", kind, resource_id)
        self.dispatcher.dispatch(token, kind, Action.DELETE, resource_id)
        return self.poller.await_completion(token, kind, resource_id, Action.DELETE)
