"""Read access to single resources and resource collections, shared by the dispatcher, the poller and the lookups."""

import logging
from typing import Any, Dict, List, Optional

from neoaura.api.codec import (
    AttributeTree,
    decode,
    first_error_message,
    first_error_reason,
    has_errors,
)
from neoaura.exceptions import AuraApiError, DecodeError, ResourceNotFound
from neoaura.http.client import AuraHttpClient, HttpResponse
from neoaura.reconciler.models import ResourceKind
from neoaura.utils.strings import truncate

LOG = logging.getLogger(__name__)


def decode_response(response: HttpResponse) -> AttributeTree:
    """
    Decodes the body of the given response. Malformed bodies of successful responses raise a ``DecodeError``,
    malformed bodies of error responses (e.g., an HTML page of a proxy) are turned into an ``AuraApiError``.
    """
    try:
        return decode(response.body)
    except DecodeError:
        if response.ok:
            raise
        raise AuraApiError(truncate(response.text, 200), response.status_code) from None


def error_from_response(response: HttpResponse, tree: AttributeTree) -> AuraApiError:
    message = first_error_message(tree) if has_errors(tree) else truncate(response.text, 200)
    reason = first_error_reason(tree) if has_errors(tree) else None
    if response.status_code == 404:
        return ResourceNotFound(message, reason)
    return AuraApiError(message, response.status_code, reason)


def unwrap_data(tree: AttributeTree) -> Any:
    """Returns the payload of a success envelope (``{"data": ...}``)."""
    if "data" not in tree:
        raise DecodeError(f"response does not contain a 'data' element: {truncate(str(tree), 200)}")
    return tree["data"]


def check_response(response: HttpResponse) -> AttributeTree:
    """Decodes a response that is expected to be successful, raising the error of the envelope otherwise."""
    tree = decode_response(response)
    if not response.ok or has_errors(tree):
        raise error_from_response(response, tree)
    return tree


def fetch_resource(
    client: AuraHttpClient, token: str, kind: ResourceKind, resource_id: str
) -> Dict[str, Any]:
    """
    Retrieves the current representation of a single resource.

    :raises ResourceNotFound: if the resource does not exist (any more)
    :raises AuraApiError: for any other error response
    """
    response = client.send("GET", kind.item_path(resource_id), token=token)
    data = unwrap_data(check_response(response))
    if not isinstance(data, dict):
        raise DecodeError(f"unexpected representation of {kind} {resource_id}: {truncate(str(data))}")
    return data


def list_resources(
    client: AuraHttpClient, token: str, kind: ResourceKind, tenant_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    params = {kind.tenant_parameter: tenant_id} if tenant_id else None
    response = client.send("GET", kind.collection_path, token=token, params=params)
    data = unwrap_data(check_response(response))
    if not isinstance(data, list):
        raise DecodeError(
            f"unexpected type for 'data' when listing {kind} resources. "
            f"are you using the correct tenant_id? {tenant_id}"
        )
    return [item for item in data if isinstance(item, dict)]
