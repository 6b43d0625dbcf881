"""
Sensitive data masking.

Redacts PII (tax IDs, phone numbers, application IDs) from payloads
before they are returned to an agent or written to a log. The transform
is pure: it always builds new containers and never touches its input.

Convention: keep the last 4 characters and replace every preceding
character with ``*``. Values of 4 characters or fewer are left alone.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import singledispatch
from types import MappingProxyType
from typing import Any

VISIBLE_SUFFIX = 4
MASK_CHAR = "*"


def mask_value(value: str) -> str:
    """Mask all but the last VISIBLE_SUFFIX characters."""
    if len(value) <= VISIBLE_SUFFIX:
        return value
    return MASK_CHAR * (len(value) - VISIBLE_SUFFIX) + value[-VISIBLE_SUFFIX:]


def mask_tax_id(value: str) -> str:
    return mask_value(value)


def mask_phone(value: str) -> str:
    return mask_value(value)


def mask_app_id(value: str) -> str:
    return mask_value(value)


# Keys whose value may be a structured {taxID, type} object
TAX_ID_KEYS = frozenset({"taxID", "taxId", "tax_id"})
# Identifier sub-field inside a structured tax ID
TAX_ID_SUBFIELD = "taxID"

MASKING_RULES: MappingProxyType[str, Callable[[str], str]] = MappingProxyType(
    {
        # Tax identifiers
        "taxID": mask_tax_id,
        "taxId": mask_tax_id,
        "tax_id": mask_tax_id,
        "cpf": mask_tax_id,
        "cnpj": mask_tax_id,
        # Phone numbers
        "phone": mask_phone,
        "phoneNumber": mask_phone,
        "phone_number": mask_phone,
        "cellphone": mask_phone,
        "telephone": mask_phone,
        # Application credentials
        "appID": mask_app_id,
        "appId": mask_app_id,
        "app_id": mask_app_id,
    }
)


@singledispatch
def mask_sensitive_data(value: Any) -> Any:
    """
    Return a copy of ``value`` with sensitive fields masked.

    Scalars (None, bool, numbers, strings) come back unchanged; lists and
    dicts are rebuilt recursively.

    Example:
        >>> mask_sensitive_data({"name": "John", "taxID": "12345678900"})
        {'name': 'John', 'taxID': '*******8900'}
    """
    return value


@mask_sensitive_data.register(list)
@mask_sensitive_data.register(tuple)
def _mask_sequence(value: list[Any] | tuple[Any, ...]) -> list[Any]:
    return [mask_sensitive_data(item) for item in value]


@mask_sensitive_data.register(dict)
def _mask_mapping(value: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, item in value.items():
        rule = MASKING_RULES.get(key)
        if rule is not None and isinstance(item, str):
            result[key] = rule(item)
        elif key in TAX_ID_KEYS and isinstance(item, dict) and TAX_ID_SUBFIELD in item:
            result[key] = _mask_structured_tax_id(item)
        elif isinstance(item, (dict, list, tuple)):
            result[key] = mask_sensitive_data(item)
        else:
            result[key] = item
    return result


def _mask_structured_tax_id(value: dict[str, Any]) -> dict[str, Any]:
    # Siblings such as "type": "BR:CPF" are kept verbatim
    masked = dict(value)
    identifier = value[TAX_ID_SUBFIELD]
    if isinstance(identifier, str):
        masked[TAX_ID_SUBFIELD] = mask_tax_id(identifier)
    return masked
