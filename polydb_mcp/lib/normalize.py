"""Result normalization helpers.

Turn backend-native responses into the caller-facing envelopes: capped
lists with pre-cap counts, flattened SPARQL bindings, bulk result tallies
and JSON-safe driver values.
"""

import datetime
import decimal
import ipaddress
import uuid
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

# Result caps
QUERY_CAP = 100
SEARCH_CAP = 50
FIND_CAP = 25
TOP_N_CAP = 20


def truncate(items: Optional[Iterable[Any]], cap: int) -> List[Any]:
    """Return at most ``cap`` items; a missing list becomes empty."""
    if items is None:
        return []
    return list(items)[:cap]


def count_envelope(items: Optional[Iterable[Any]], key: str = "results",
                   cap: Optional[int] = QUERY_CAP) -> Dict[str, Any]:
    """Build a ``{count, <key>}`` envelope.

    ``count`` is the number of items the backend returned, before the cap.
    """
    items = list(items or [])
    return {
        "count": len(items),
        key: items if cap is None else items[:cap],
    }


def binding_value(row: Mapping, var: str) -> Optional[str]:
    """Value of one variable in a SPARQL binding row, or None if unbound."""
    cell = row.get(var)
    if not cell:
        return None
    return cell.get("value")


def has_bindings(result: Any) -> bool:
    return (
        isinstance(result, Mapping)
        and isinstance(result.get("results"), Mapping)
        and "bindings" in result["results"]
    )


def bindings(result: Any) -> List[Dict[str, Any]]:
    """The raw binding rows of a SPARQL JSON result (empty if absent)."""
    if not has_bindings(result):
        return []
    return list(result["results"]["bindings"] or [])


def flatten_bindings(result: Any) -> List[Dict[str, Any]]:
    """Flatten ``{var: {type, value}}`` rows into ``{var: value}`` rows."""
    return [
        {var: cell.get("value") for var, cell in row.items()}
        for row in bindings(result)
    ]


def partition_bulk(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Tally per-item results of a bulk write."""
    results = list(results or [])
    succeeded = sum(1 for r in results if r.get("ok"))
    failed = sum(1 for r in results if r.get("error"))
    return {
        "total": len(results),
        "succeeded": succeeded,
        "failed": failed,
        "results": results,
    }


def acknowledged(result: Any) -> Optional[bool]:
    """The backend's own ``ok`` acknowledgement, if the response carries one."""
    if isinstance(result, Mapping):
        return result.get("ok")
    return None


def to_jsonable(value: Any) -> Any:
    """Convert driver values (UUIDs, timestamps, sets, ...) to JSON-safe values."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (uuid.UUID, ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return str(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, decimal.Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, Mapping):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)) or hasattr(value, '__iter__'):
        # Includes driver collections such as SortedSet
        return [to_jsonable(v) for v in value]
    # Driver-specific scalars (Duration, Date, Time) fall back to their text form
    return str(value)
