from neoaura.providers.base import (
    PUBLIC_REGISTRY,
    OperationStatus,
    ProgressEvent,
    ResourceProvider,
    ResourceRequest,
    get_resource_provider,
)
from neoaura.providers.customer_managed_key import (
    CustomerManagedKeyProperties,
    CustomerManagedKeyProvider,
)
from neoaura.providers.instance import InstanceProperties, InstanceProvider

__all__ = [
    "PUBLIC_REGISTRY",
    "CustomerManagedKeyProperties",
    "CustomerManagedKeyProvider",
    "InstanceProperties",
    "InstanceProvider",
    "OperationStatus",
    "ProgressEvent",
    "ResourceProvider",
    "ResourceRequest",
    "get_resource_provider",
]
