"""
Firestore query helpers.

NOTE: For firebase_admin SDK, we use positional arguments which still work.
The deprecation warning is just a warning - the functionality is still supported.
"""

from typing import Any, Dict, Optional


def where_filter(query, field_path: str, op_string: str, value):
    """
    Helper function for Firestore queries.

    Usage:
        query = where_filter(collection, "owner_id", "==", "uid-123")
        query = where_filter(query, "read", "==", False)
    """
    return query.where(field_path, op_string, value)


def apply_predicate(query, predicate: Optional[Dict[str, Any]]):
    """
    Chain one equality filter per predicate entry.

    An empty or missing predicate leaves the query unfiltered (whole collection).
    """
    for field_path, value in (predicate or {}).items():
        query = where_filter(query, field_path, "==", value)
    return query
