from typing import List, Optional, TypedDict

Boolean = bool
Integer = int
String = str
InstanceId = str
KeyId = str
TenantId = str
Memory = str


class InstanceStatus(str):
    creating = "creating"
    running = "running"
    pausing = "pausing"
    paused = "paused"
    resuming = "resuming"
    restoring = "restoring"
    updating = "updating"
    resizing = "resizing"
    deleting = "deleting"
    destroying = "destroying"


class CustomerManagedKeyStatus(str):
    pending = "pending"
    ready = "ready"
    deleting = "deleting"


class CloudProvider(str):
    gcp = "gcp"
    aws = "aws"
    azure = "azure"


class InstanceType(str):
    enterprise_db = "enterprise-db"
    enterprise_ds = "enterprise-ds"
    professional_db = "professional-db"
    professional_ds = "professional-ds"
    free_db = "free-db"


class CdcEnrichmentMode(str):
    OFF = "OFF"
    DIFF = "DIFF"
    FULL = "FULL"


class ErrorDetail(TypedDict, total=False):
    message: String
    reason: Optional[String]
    field: Optional[String]


ErrorDetailList = List[ErrorDetail]


class ErrorEnvelope(TypedDict, total=False):
    errors: ErrorDetailList


class AccessToken(TypedDict, total=False):
    access_token: String
    expires_in: Integer
    token_type: String


class Instance(TypedDict, total=False):
    id: InstanceId
    name: String
    status: String
    tenant_id: TenantId
    cloud_provider: String
    region: String
    type: String
    memory: Optional[Memory]
    storage: Optional[String]
    connection_url: Optional[String]
    metrics_integration_url: Optional[String]
    secondaries_count: Optional[Integer]
    cdc_enrichment_mode: Optional[String]
    vector_optimized: Optional[Boolean]
    graph_analytics_plugin: Optional[Boolean]
    customer_managed_key_id: Optional[KeyId]
    username: Optional[String]
    password: Optional[String]


InstanceList = List[Instance]


class CreateInstanceRequest(TypedDict, total=False):
    version: String
    region: String
    memory: Memory
    name: String
    type: String
    tenant_id: TenantId
    cloud_provider: String
    customer_managed_key_id: Optional[KeyId]
    vector_optimized: Optional[Boolean]
    graph_analytics_plugin: Optional[Boolean]


class CustomerManagedKey(TypedDict, total=False):
    id: KeyId
    name: String
    status: String
    created: String
    tenant_id: TenantId
    cloud_provider: String
    region: String
    instance_type: String
    key_id: String


CustomerManagedKeyList = List[CustomerManagedKey]


class CreateCustomerManagedKeyRequest(TypedDict, total=False):
    name: String
    region: String
    instance_type: String
    tenant_id: TenantId
    cloud_provider: String
    key_id: String


class SizingEstimate(TypedDict, total=False):
    did_exceed_maximum: Boolean
    min_required_memory: Memory
    recommended_size: Memory


class InstanceConfiguration(TypedDict, total=False):
    cloud_provider: String
    memory: Memory
    region: String
    region_name: String
    storage: String
    type: String
    version: String


InstanceConfigurationList = List[InstanceConfiguration]


class TenantConfiguration(TypedDict, total=False):
    id: TenantId
    name: String
    instance_configurations: InstanceConfigurationList
