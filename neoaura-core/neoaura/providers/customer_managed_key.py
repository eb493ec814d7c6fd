import copy
import logging
from dataclasses import dataclass
from typing import Optional

from neoaura.exceptions import ConfigurationError
from neoaura.providers.base import (
    OperationStatus,
    ProgressEvent,
    ResourceProvider,
    ResourceRequest,
    register_resource_provider,
    reports_failures,
)
from neoaura.reconciler.lookups import find_customer_managed_key, get_customer_managed_key

LOG = logging.getLogger(__name__)


@dataclass
class CustomerManagedKeyProperties:
    name: str
    tenant_id: str
    cloud_provider: str
    region: str
    instance_type: str
    key_id: str

    # computed
    id: Optional[str] = None
    created: Optional[str] = None
    status: Optional[str] = None


@register_resource_provider
class CustomerManagedKeyProvider(ResourceProvider[CustomerManagedKeyProperties]):
    TYPE = "neo4j::aura::cmk"

    @reports_failures
    def create(
        self, request: ResourceRequest[CustomerManagedKeyProperties]
    ) -> ProgressEvent[CustomerManagedKeyProperties]:
        model = copy.copy(request.desired_state)
        key = self.operations.create_customer_managed_key(
            request.token,
            name=model.name,
            tenant_id=model.tenant_id,
            cloud_provider=model.cloud_provider,
            region=model.region,
            instance_type=model.instance_type,
            key_id=model.key_id,
        )
        model.id = key["id"]
        model.created = key.get("created")
        model.status = key.get("status")
        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)

    @reports_failures
    def read(
        self, request: ResourceRequest[CustomerManagedKeyProperties]
    ) -> ProgressEvent[CustomerManagedKeyProperties]:
        model = copy.copy(request.previous_state)
        key = get_customer_managed_key(self.client, request.token, model.id)
        model.created = key.get("created")
        model.status = key.get("status")
        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)

    def update(
        self, request: ResourceRequest[CustomerManagedKeyProperties]
    ) -> ProgressEvent[CustomerManagedKeyProperties]:
        # keys are immutable, every change requires a replacement
        LOG.info("customer managed keys cannot be updated, keeping %s", request.previous_state.id)
        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=request.previous_state)

    @reports_failures
    def delete(
        self, request: ResourceRequest[CustomerManagedKeyProperties]
    ) -> ProgressEvent[CustomerManagedKeyProperties]:
        model = request.previous_state or request.desired_state
        self.operations.delete_customer_managed_key(request.token, model.id)
        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)

    @reports_failures
    def import_by_name(
        self, request: ResourceRequest[CustomerManagedKeyProperties]
    ) -> ProgressEvent[CustomerManagedKeyProperties]:
        """Adopts an existing key, identified by its name."""
        name = (request.identifier or "").strip()
        if not name or "," in name:
            raise ConfigurationError("invalid import identifier, expected the name of the key")

        key = find_customer_managed_key(self.client, request.token, name)
        model = CustomerManagedKeyProperties(
            id=key["id"],
            name=name,
            tenant_id=key.get("tenant_id"),
            cloud_provider=key.get("cloud_provider"),
            region=key.get("region"),
            instance_type=key.get("instance_type"),
            key_id=key.get("key_id"),
            created=key.get("created"),
            status=key.get("status"),
        )
        return ProgressEvent(status=OperationStatus.SUCCESS, resource_model=model)
