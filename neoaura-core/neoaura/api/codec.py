"""
Decoding of Aura API response bodies. Bodies are parsed into plain attribute trees (dicts and lists), with every
JSON number normalized to an ``int`` if that is lossless and fits into 64 bits, and to its literal string otherwise,
so that large counters never pass through a float.
"""

import decimal
import json
import logging
from typing import Any, Dict, Union

from neoaura.api import ErrorEnvelope
from neoaura.exceptions import DecodeError
from neoaura.utils.strings import to_str

LOG = logging.getLogger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
INT64_MAX_DIGITS = 19

AttributeTree = Dict[str, Any]


def normalize_number(literal: str) -> Union[int, str]:
    """
    Normalizes a JSON number literal.

    :param literal: the number exactly as it appeared in the document, e.g., ``"42"``, ``"4.0"`` or ``"1.5e3"``
    :return: the number as int if it has an integral value within the int64 range, otherwise the literal itself
    """
    try:
        value = decimal.Decimal(literal)
    except decimal.InvalidOperation:
        return literal
    if not value.is_finite() or value != value.to_integral_value():
        return literal
    # more than 19 integral digits never fit, checked before int() materializes huge exponents
    if value.adjusted() > INT64_MAX_DIGITS - 1:
        return literal
    number = int(value)
    if number < INT64_MIN or number > INT64_MAX:
        return literal
    return number


def decode(raw_body: Union[str, bytes, None]) -> AttributeTree:
    """
    Parses a response body into an attribute tree.

    :param raw_body: the raw response body
    :return: the decoded JSON object, or an empty dict for an empty body
    :raises DecodeError: if the body is not valid JSON or not a JSON object
    """
    if raw_body is None:
        return {}
    text = to_str(raw_body)
    if not text.strip():
        return {}
    try:
        tree = json.loads(text, parse_int=normalize_number, parse_float=normalize_number)
    except ValueError as e:
        raise DecodeError(f"unable to decode response body as JSON: {e}") from e
    if not isinstance(tree, dict):
        raise DecodeError(f"expected a JSON object in response body, got {type(tree).__name__}")
    return tree


def has_errors(tree: AttributeTree) -> bool:
    """Whether the given attribute tree is an error envelope."""
    return bool(tree) and "errors" in tree


def first_error_message(tree: ErrorEnvelope) -> str:
    """
    Returns the message of the first error of an error envelope. Falls back to the reason of the error if it has no
    message, and to a dump of the whole tree if it is not a well-formed envelope.
    """
    error = first_error(tree)
    if error is None:
        return json.dumps(tree, default=str)
    return str(error.get("message") or error.get("reason") or "unknown error")


def first_error_reason(tree: ErrorEnvelope) -> str:
    error = first_error(tree)
    return (error or {}).get("reason")


def first_error(tree: ErrorEnvelope):
    errors = (tree or {}).get("errors")
    if not isinstance(errors, list) or not errors or not isinstance(errors[0], dict):
        return None
    return errors[0]


def encode(payload: Dict[str, Any]) -> str:
    return json.dumps(payload)
