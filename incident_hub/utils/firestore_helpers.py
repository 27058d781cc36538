"""
Firestore query helpers.

NOTE: firebase_admin still accepts positional where() arguments; the
deprecation warning does not affect functionality.
"""

from typing import Any, Dict, Iterable, Tuple


def where_filter(query, field_path: str, op_string: str, value):
    """
    Usage:
        query = where_filter(collection, "name", "==", "City of Cape Town")
    """
    return query.where(field_path, op_string, value)


def documents_by_id(docs: Iterable) -> Dict[str, Dict[str, Any]]:
    """Map streamed snapshots to {doc.id: data}, skipping empty documents."""
    result: Dict[str, Dict[str, Any]] = {}
    for doc in docs:
        data = doc.to_dict()
        if data is not None:
            result[doc.id] = data
    return result


def split_server_fields(data: Dict[str, Any], keys: Tuple[str, ...]) -> Dict[str, Any]:
    """Copy of data without the given keys (e.g. a client-supplied id)."""
    return {k: v for k, v in data.items() if k not in keys}
