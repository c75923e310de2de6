"""AQL builders for ArangoDB.

Traversal queries interpolate only validated integers and a direction
keyword; the start vertex and edge collection always travel as bind
variables.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from polydb_mcp.models.error_types import TranslationError

DIRECTIONS = ("OUTBOUND", "INBOUND", "ANY")
DEFAULT_DIRECTION = "OUTBOUND"

TRAVERSAL_TEMPLATE = """
FOR v, e, p IN {min_depth}..{max_depth} {direction} @start @@edges
  RETURN {{ vertex: v, edge: e }}
"""


def normalize_direction(direction: Optional[str]) -> str:
    """Upper-case a traversal direction, defaulting to OUTBOUND."""
    value = (direction or DEFAULT_DIRECTION).strip().upper()
    if value not in DIRECTIONS:
        raise TranslationError(f"Unknown traversal direction: {direction}")
    return value


def build_traversal(start_vertex: str, edge_collection: str, direction: Optional[str] = None,
                    min_depth: Optional[int] = None, max_depth: Optional[int] = None) -> Tuple[str, Dict[str, Any]]:
    """Build a graph traversal query.

    Args:
        start_vertex: Start vertex id (collection/key)
        edge_collection: Edge collection to traverse
        direction: outbound, inbound or any (case-insensitive)
        min_depth: Minimum depth (default 1)
        max_depth: Maximum depth (default 1)

    Returns:
        Tuple of (query, bind_vars)
    """
    min_depth = 1 if min_depth is None else int(min_depth)
    max_depth = 1 if max_depth is None else int(max_depth)
    query = TRAVERSAL_TEMPLATE.format(
        min_depth=min_depth,
        max_depth=max_depth,
        direction=normalize_direction(direction),
    )
    bind_vars = {
        "start": start_vertex,
        "@edges": edge_collection,
    }
    return query, bind_vars


def split_fields(fields: str) -> List[str]:
    """Split a comma-separated field list, trimming whitespace."""
    return [f.strip() for f in fields.split(",")]


def _sorted_index(kind: str) -> Callable[[List[str], bool], Dict[str, Any]]:
    def build(fields: List[str], unique: bool) -> Dict[str, Any]:
        return {"type": kind, "fields": fields, "unique": unique}
    return build


def _plain_index(kind: str) -> Callable[[List[str], bool], Dict[str, Any]]:
    # No uniqueness for these kinds
    def build(fields: List[str], unique: bool) -> Dict[str, Any]:
        return {"type": kind, "fields": fields}
    return build


INDEX_BUILDERS: Dict[str, Callable[[List[str], bool], Dict[str, Any]]] = {
    "persistent": _sorted_index("persistent"),
    "hash": _sorted_index("hash"),
    "skiplist": _sorted_index("skiplist"),
    "fulltext": _plain_index("fulltext"),
    "geo": _plain_index("geo"),
}


def build_index_definition(kind: str, fields: List[str], unique: bool = False) -> Dict[str, Any]:
    """Build the index definition passed to the driver.

    Raises:
        TranslationError: If the index type is not supported
    """
    builder = INDEX_BUILDERS.get(kind)
    if builder is None:
        raise TranslationError(f"Unknown index type: {kind}")
    return builder(fields, unique)
