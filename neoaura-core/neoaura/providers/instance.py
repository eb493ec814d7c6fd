import copy
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from neoaura.api import InstanceStatus
from neoaura.constants import PASSWORD_NOT_RETRIEVED
from neoaura.exceptions import ConfigurationError
from neoaura.providers.base import (
    OperationStatus,
    ProgressEvent,
    ResourceProvider,
    ResourceRequest,
    register_resource_provider,
    reports_failures,
)
from neoaura.reconciler.lookups import get_instance

LOG = logging.getLogger(__name__)

IMPORT_USAGE = "<instance_id>,<version>,<include_neo4j_user>[,<neo4j_user_password>][,<memory>]"


@dataclass
class InstanceProperties:
    name: str
    tenant_id: str
    cloud_provider: str
    region: str
    type: str
    memory: str
    version: str

    paused: bool = False
    secondaries_count: int = 0
    customer_managed_key_id: Optional[str] = None
    vector_optimized: bool = False
    graph_analytics_plugin: bool = False
    # whether to retrieve the generated password of the default neo4j user
    n4jusr: bool = True

    # computed
    id: Optional[str] = None
    connection_url: Optional[str] = None
    metrics_integration_url: Optional[str] = None
    storage: Optional[str] = None
    n4jpwd: Optional[str] = None


@register_resource_provider
class InstanceProvider(ResourceProvider[InstanceProperties]):
    TYPE = "neo4j::aura::instance"

    @reports_failures
    def create(self, request: ResourceRequest[InstanceProperties]) -> ProgressEvent[InstanceProperties]:
        model = copy.copy(request.desired_state)

        instance = self.operations.create_instance(
            request.token,
            name=model.name,
            tenant_id=model.tenant_id,
            cloud_provider=model.cloud_provider,
            region=model.region,
            instance_type=model.type,
            memory=model.memory,
            version=model.version,
            customer_managed_key_id=model.customer_managed_key_id,
            vector_optimized=model.vector_optimized,
            graph_analytics_plugin=model.graph_analytics_plugin,
            secondaries_count=model.secondaries_count,
        )
        model.id = instance["id"]
        model.connection_url = instance.get("connection_url")
        model.metrics_integration_url = instance.get("metrics_integration_url")
        model.storage = instance.get("storage")
        model.n4jpwd = instance.get("password") if model.n4jusr else PASSWORD_NOT_RETRIEVED

        if model.paused:
            self.operations.pause_instance(request.token, model.id)

        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)

    @reports_failures
    def read(self, request: ResourceRequest[InstanceProperties]) -> ProgressEvent[InstanceProperties]:
        model = copy.copy(request.previous_state)
        instance = get_instance(self.client, request.token, model.id)

        model.paused = instance.get("status") == InstanceStatus.paused
        model.secondaries_count = instance.get("secondaries_count", model.secondaries_count)
        model.vector_optimized = instance.get("vector_optimized", model.vector_optimized)
        model.graph_analytics_plugin = instance.get(
            "graph_analytics_plugin", model.graph_analytics_plugin
        )
        model.metrics_integration_url = instance.get("metrics_integration_url")
        model.memory = instance.get("memory") or model.memory
        model.name = instance.get("name", model.name)
        # paused instances have neither a connection url nor storage, keep the last known values
        if not model.paused:
            model.connection_url = instance.get("connection_url")
            model.storage = instance.get("storage")

        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)

    @reports_failures
    def update(self, request: ResourceRequest[InstanceProperties]) -> ProgressEvent[InstanceProperties]:
        state = request.previous_state
        plan = copy.copy(request.desired_state)
        token = request.token
        instance_id = state.id
        LOG.info("updating instance %s with id %s", plan.name, instance_id)

        # renaming works on paused and running instances
        if state.name != plan.name:
            self.operations.rename_instance(token, instance_id, plan.name)

        # updates are applied while the instance is running, i.e., before a pause or after a resume
        if plan.paused:
            self._apply_serialized_updates(token, instance_id, state, plan)

        if state.paused != plan.paused:
            if plan.paused:
                self.operations.pause_instance(token, instance_id)
            else:
                self.operations.resume_instance(token, instance_id)

        if not plan.paused:
            self._apply_serialized_updates(token, instance_id, state, plan)

        for attribute in ("id", "connection_url", "metrics_integration_url", "storage", "n4jpwd"):
            setattr(plan, attribute, getattr(state, attribute))

        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=plan)

    def _apply_serialized_updates(
        self, token: str, instance_id: str, state: InstanceProperties, plan: InstanceProperties
    ) -> Dict[str, bool]:
        """
        Applies the changed attributes one at a time. Secondaries are removed first and added last, so that the other
        changes are rolled out to as few instances as possible.
        """
        updates = {
            "memory": False,
            "vector_optimized": False,
            "graph_analytics_plugin": False,
            "secondaries_count": False,
        }

        if state.secondaries_count > plan.secondaries_count:
            self.operations.update_secondaries_count(token, instance_id, plan.secondaries_count)
            updates["secondaries_count"] = True

        if state.memory != plan.memory:
            self.operations.resize_instance_memory(token, instance_id, plan.memory)
            updates["memory"] = True

        for flag in ("vector_optimized", "graph_analytics_plugin"):
            if getattr(state, flag) != getattr(plan, flag):
                self.operations.update_instance_flag(token, instance_id, flag, getattr(plan, flag))
                updates[flag] = True

        if state.secondaries_count < plan.secondaries_count:
            self.operations.update_secondaries_count(token, instance_id, plan.secondaries_count)
            updates["secondaries_count"] = True

        if any(updates.values()):
            LOG.info("updated attributes of instance %s: %s", instance_id, updates)
        else:
            LOG.info("no updates to apply to instance %s", instance_id)
        return updates

    @reports_failures
    def delete(self, request: ResourceRequest[InstanceProperties]) -> ProgressEvent[InstanceProperties]:
        model = request.previous_state or request.desired_state
        self.operations.delete_instance(request.token, model.id)
        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)

    @reports_failures
    def import_resource(
        self, request: ResourceRequest[InstanceProperties]
    ) -> ProgressEvent[InstanceProperties]:
        """
        Adopts an existing instance. The instance representation lacks the version, and paused instances lack their
        memory, so both have to be passed in the identifier:
        ``<instance_id>,<version>,<include_neo4j_user>[,<neo4j_user_password>][,<memory>]``.
        """
        parts = (request.identifier or "").split(",")
        if not 3 <= len(parts) <= 5:
            raise ConfigurationError(f"invalid import identifier, expected {IMPORT_USAGE}")

        instance_id, version, include_user = parts[0], parts[1], parts[2] == "true"
        password = PASSWORD_NOT_RETRIEVED
        if include_user:
            if len(parts) < 4:
                raise ConfigurationError(
                    f"the password of the neo4j user is required to import it, expected {IMPORT_USAGE}"
                )
            password = parts[3]

        instance = get_instance(self.client, request.token, instance_id)
        paused = instance.get("status") == InstanceStatus.paused
        if paused:
            if len(parts) != 5:
                raise ConfigurationError(
                    f"instance {instance_id} is paused, its memory has to be given: {IMPORT_USAGE}"
                )
            memory, storage, connection_url = parts[4], "paused", ""
        else:
            memory = instance.get("memory")
            storage = instance.get("storage")
            connection_url = instance.get("connection_url")

        model = InstanceProperties(
            id=instance_id,
            name=instance.get("name"),
            tenant_id=instance.get("tenant_id"),
            cloud_provider=instance.get("cloud_provider"),
            region=instance.get("region"),
            type=instance.get("type"),
            memory=memory,
            version=version,
            paused=paused,
            secondaries_count=instance.get("secondaries_count", 0),
            customer_managed_key_id=instance.get("customer_managed_key_id"),
            vector_optimized=instance.get("vector_optimized", False),
            graph_analytics_plugin=instance.get("graph_analytics_plugin", False),
            n4jusr=include_user,
            n4jpwd=password,
            connection_url=connection_url,
            metrics_integration_url=instance.get("metrics_integration_url"),
            storage=storage,
        )
        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)
