"""Read-only queries against the Aura API. None of them submit actions or wait for anything."""

import logging
from typing import List, Optional

from neoaura.api import (
    CustomerManagedKey,
    CustomerManagedKeyList,
    Instance,
    InstanceList,
    SizingEstimate,
    TenantConfiguration,
)
from neoaura.api.codec import encode
from neoaura.exceptions import DecodeError, ResourceNotFound
from neoaura.http.client import AuraHttpClient
from neoaura.reconciler.models import CUSTOMER_MANAGED_KEY, INSTANCE
from neoaura.reconciler.resources import (
    check_response,
    fetch_resource,
    list_resources,
    unwrap_data,
)
from neoaura.utils.strings import truncate

LOG = logging.getLogger(__name__)

SIZING_PATH = "/v1/instances/sizing"
TENANTS_PATH = "/v1/tenants"


def get_instance(client: AuraHttpClient, token: str, instance_id: str) -> Instance:
    return fetch_resource(client, token, INSTANCE, instance_id)


def list_instances(client: AuraHttpClient, token: str, tenant_id: str) -> InstanceList:
    return list_resources(client, token, INSTANCE, tenant_id)


def get_customer_managed_key(client: AuraHttpClient, token: str, key_id: str) -> CustomerManagedKey:
    return fetch_resource(client, token, CUSTOMER_MANAGED_KEY, key_id)


def list_customer_managed_keys(
    client: AuraHttpClient, token: str, tenant_id: Optional[str] = None
) -> CustomerManagedKeyList:
    return list_resources(client, token, CUSTOMER_MANAGED_KEY, tenant_id)


def find_customer_managed_key(
    client: AuraHttpClient, token: str, name: str, tenant_id: Optional[str] = None
) -> CustomerManagedKey:
    """
    Resolves a customer managed key by its name. The list representation of a key is incomplete, the key is read
    again by its id once found.

    :raises ResourceNotFound: if there is no key with the given name
    """
    for key in list_customer_managed_keys(client, token, tenant_id):
        if key.get("name") == name and key.get("id"):
            return get_customer_managed_key(client, token, key["id"])
    raise ResourceNotFound(f"customer managed key {name} not found")


def estimate_sizing(
    client: AuraHttpClient,
    token: str,
    node_count: int,
    relationship_count: int,
    instance_type: str,
    algorithm_categories: List[str],
) -> SizingEstimate:
    """Asks the API for the instance size required for a graph of the given dimensions."""
    payload = {
        "node_count": node_count,
        "relationship_count": relationship_count,
        "instance_type": instance_type,
        "algorithm_categories": list(algorithm_categories),
    }
    LOG.debug("requesting sizing estimate: %s", payload)
    response = client.send("POST", SIZING_PATH, body=encode(payload), token=token)
    data = unwrap_data(check_response(response))
    if not isinstance(data, dict):
        raise DecodeError(f"unexpected sizing estimate: {truncate(str(data))}")
    return data


def get_tenant(client: AuraHttpClient, token: str, tenant_id: str) -> TenantConfiguration:
    """Returns a tenant with the instance configurations (cloud provider, region, memory, ...) available to it."""
    response = client.send("GET", f"{TENANTS_PATH}/{tenant_id}", token=token)
    data = unwrap_data(check_response(response))
    if not isinstance(data, dict):
        raise DecodeError(f"unexpected representation of tenant {tenant_id}: {truncate(str(data))}")
    data.setdefault("instance_configurations", [])
    return data
