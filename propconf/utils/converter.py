"""Conversion of arbitrary values into flat string property maps."""

from collections.abc import Mapping
from typing import Any


def to_property_value(value: Any) -> str:
    """Convert a single value to its property string form.

    Args:
        value: Value to convert

    Returns:
        String representation used in property sets
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(to_property_value(item) for item in value)
    return str(value)


def to_property_map(values: Mapping[Any, Any]) -> dict[str, str]:
    """Convert a mapping to a string-to-string property map.

    Nested mappings are flattened into dot-notation keys.
    """
    return {str(key): to_property_value(value) for key, value in flatten(values).items()}


def flatten(
    values: Mapping[Any, Any], parent_key: str = "", sep: str = "."
) -> dict[str, Any]:
    """Flatten nested mappings into dot-notation keys.

    Args:
        values: Possibly nested mapping
        parent_key: Prefix for every produced key
        sep: Separator between key segments

    Returns:
        Flat dictionary
    """
    items: dict[str, Any] = {}
    for key, value in values.items():
        new_key = f"{parent_key}{sep}{key}" if parent_key else str(key)
        if isinstance(value, Mapping):
            items.update(flatten(value, new_key, sep=sep))
        else:
            items[new_key] = value
    return items
