"""
Utility modules for the sensores/actuadores backend.
"""

from sensores_api.utils.validation import (
    validate_record_id,
    normalize_search_kind,
    substring_pattern,
    exact_pattern,
)

__all__ = [
    "validate_record_id",
    "normalize_search_kind",
    "substring_pattern",
    "exact_pattern",
]
