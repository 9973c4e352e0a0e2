"""Environment variable expansion for configuration values.

Supports ``$VAR`` and ``${VAR}`` anywhere in a string; unset variables are
left in place so that ``validate_env_expanded`` can report them.
"""

import os
import re
from typing import Any

from loguru import logger


_UNEXPANDED = re.compile(r"\$\{?([A-Za-z_][A-Za-z0-9_]*)")


def expand_env_value(value: Any) -> Any:
    """Expand environment references in a single value.

    Args:
        value: Value to expand. Non-strings are returned unchanged.

    Returns:
        The expanded string, or ``value`` itself for non-strings.
    """
    if not isinstance(value, str):
        return value
    return os.path.expandvars(value)


def expand_env_recursive(data: Any) -> Any:
    """Recursively expand environment references in nested data structures."""
    if isinstance(data, dict):
        return {k: expand_env_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_value(data)
    return data


def validate_env_expanded(value: str, field: str) -> str:
    """Ensure ``value`` holds no unexpanded variable reference.

    Raises:
        ValueError: If a ``$VAR`` reference is still present.
    """
    match = _UNEXPANDED.search(value)
    if match:
        msg = f"Environment variable '{match.group(1)}' in '{field}' not set"
        logger.error(msg)
        raise ValueError(msg)
    return value
