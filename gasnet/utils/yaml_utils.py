"""Helpers for YAML parsing quirks."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Return ``data`` with every key converted to a string.

    YAML 1.1 turns keys such as ``yes``/``no``/``on``/``off`` into booleans;
    those become ``"True"``/``"False"`` here so that unknown-key checks report
    them instead of failing on a non-string key.

    Examples:
        >>> normalize_yaml_dict_keys({True: 1, "flow_tolerance": 2})
        {'True': 1, 'flow_tolerance': 2}
    """
    return {str(key): value for key, value in data.items()}
