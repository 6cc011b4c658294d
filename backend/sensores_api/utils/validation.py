"""
Input Validation Utilities
===========================

Small checks shared by the HTTP and WebSocket paths.

Author: Sensor Data Collector Team
"""

import re
from typing import Optional

from bson import ObjectId

from sensores_api.models import SEARCH_KINDS


def validate_record_id(record_id: str) -> bool:
    """
    Validate a record ID (MongoDB ObjectId, 24 hex characters).

    Args:
        record_id: Record ID string

    Returns:
        True if it could be an ObjectId, False otherwise
    """
    return ObjectId.is_valid(record_id)


def normalize_search_kind(kind: str) -> Optional[str]:
    """
    Map the "tipo" search parameter to the stored kind.

    Args:
        kind: "sensores" or "actuadores" (any case)

    Returns:
        "sensor" / "actuador", or None if the value is not accepted
    """
    return SEARCH_KINDS.get(kind.lower())


def substring_pattern(text: str) -> str:
    """
    Build a regex that matches ``text`` literally anywhere in a field.

    Args:
        text: Raw user text (may contain regex metacharacters)

    Returns:
        Escaped pattern for a MongoDB $regex filter
    """
    return re.escape(text)


def exact_pattern(text: str) -> str:
    """Anchored, escaped pattern that matches the whole field."""
    return f"^{re.escape(text)}$"
