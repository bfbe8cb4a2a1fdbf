"""Data validation helpers.

ID conventions:
- Entity ids are UUID4 strings
- Slugs: lowercase letters, digits and hyphens, 2-80 characters

Functions:
- is_valid_slug(slug) -> bool
- is_uuid(value) -> bool
- parse_json_field(value, allow_object) -> list | dict
"""

import json
import re
import uuid
from typing import Any

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")
SLUG_MIN_LENGTH = 2
SLUG_MAX_LENGTH = 80


def is_valid_slug(slug: str) -> bool:
    """Check slug charset and length."""
    return (
        SLUG_MIN_LENGTH <= len(slug) <= SLUG_MAX_LENGTH
        and SLUG_PATTERN.match(slug) is not None
    )


def is_uuid(value: str) -> bool:
    """Check that value is a canonical UUID string."""
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False


def parse_json_field(value: Any, allow_object: bool = False) -> Any:
    """Decode a JSON array (or object) given as text or as already-parsed data.

    Blank text counts as an empty array.

    Args:
        value: JSON text, list, or dict
        allow_object: Accept a JSON object as well as an array

    Returns:
        Parsed list (or dict)

    Raises:
        ValueError: If the value is not a JSON array (or object when allowed)
    """
    message = "Must be a JSON array or object" if allow_object else "Must be a JSON array"

    if isinstance(value, str):
        text = value.strip() or "[]"
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            raise ValueError(message)

    if isinstance(value, list):
        return value
    if allow_object and isinstance(value, dict):
        return value
    raise ValueError(message)
