"""Request builders for the CouchDB REST API.

Each builder returns the HTTP method, the path (with query string) and the
JSON body of one request. Path segments are percent-encoded the way
``encodeURIComponent`` does, so ids containing '/' stay one segment.
"""

from typing import Any, List, NamedTuple, Optional, Tuple
from urllib.parse import quote, urlencode

ALL_DOCS_LIMIT = 100
CHANGES_LIMIT = 100
FIND_LIMIT = 25


class CouchRequest(NamedTuple):
    method: str
    path: str
    body: Any = None


def segment(value: str) -> str:
    """Percent-encode one path segment."""
    return quote(str(value), safe="!'()*-._~")


def with_query(path: str, params: List[Tuple[str, Any]]) -> str:
    query_string = urlencode(params)
    return f"{path}?{query_string}" if query_string else path


def database(db: str, method: str = "GET") -> CouchRequest:
    """Database-level request: info (GET), create (PUT) or delete (DELETE)."""
    return CouchRequest(method, f"/{segment(db)}")


def all_docs(db: str, include_docs: bool = False, limit: Optional[str] = None,
             skip: Optional[str] = None) -> CouchRequest:
    params = []
    if include_docs:
        params.append(("include_docs", "true"))
    params.append(("limit", limit if limit else str(ALL_DOCS_LIMIT)))
    if skip:
        params.append(("skip", skip))
    return CouchRequest("GET", with_query(f"/{segment(db)}/_all_docs", params))


def get_document(db: str, doc_id: str, rev: Optional[str] = None) -> CouchRequest:
    path = f"/{segment(db)}/{segment(doc_id)}"
    if rev:
        path += f"?rev={segment(rev)}"
    return CouchRequest("GET", path)


def insert(db: str, document: Any, doc_id: Optional[str] = None) -> CouchRequest:
    """PUT to /db/id when an id is given, otherwise POST to /db."""
    if doc_id:
        return CouchRequest("PUT", f"/{segment(db)}/{segment(doc_id)}", document)
    return CouchRequest("POST", f"/{segment(db)}", document)


def delete_document(db: str, doc_id: str, rev: str) -> CouchRequest:
    return CouchRequest("DELETE", f"/{segment(db)}/{segment(doc_id)}?rev={segment(rev)}")


def find(db: str, selector: Any, fields: Any = None, limit: Optional[int] = None,
         skip: Optional[int] = None, sort: Any = None) -> CouchRequest:
    """Mango query; the limit defaults to 25."""
    body = {
        "selector": selector,
        "limit": limit if limit is not None else FIND_LIMIT,
    }
    if fields is not None:
        body["fields"] = fields
    if skip is not None:
        body["skip"] = skip
    if sort is not None:
        body["sort"] = sort
    return CouchRequest("POST", f"/{segment(db)}/_find", body)


def create_index(db: str, fields: Any, name: Optional[str] = None,
                 ddoc: Optional[str] = None) -> CouchRequest:
    body = {"index": {"fields": fields}}
    if name:
        body["name"] = name
    if ddoc:
        body["ddoc"] = ddoc
    return CouchRequest("POST", f"/{segment(db)}/_index", body)


def view(db: str, design: str, view_name: str, key: Optional[str] = None,
         startkey: Optional[str] = None, endkey: Optional[str] = None,
         limit: Optional[str] = None, include_docs: bool = False,
         reduce: Optional[str] = None, group: Optional[str] = None) -> CouchRequest:
    """Query a view. Keys are JSON values and are passed through as given.

    ``reduce=false`` is only sent when asked for explicitly, and likewise
    ``group=true``.
    """
    params = []
    if key:
        params.append(("key", key))
    if startkey:
        params.append(("startkey", startkey))
    if endkey:
        params.append(("endkey", endkey))
    if limit:
        params.append(("limit", limit))
    if include_docs:
        params.append(("include_docs", "true"))
    if reduce == "false":
        params.append(("reduce", "false"))
    if group == "true":
        params.append(("group", "true"))
    path = f"/{segment(db)}/_design/{segment(design)}/_view/{segment(view_name)}"
    return CouchRequest("GET", with_query(path, params))


def bulk_docs(db: str, docs: Any) -> CouchRequest:
    return CouchRequest("POST", f"/{segment(db)}/_bulk_docs", {"docs": docs})


def changes(db: str, since: Optional[str] = None, limit: Optional[str] = None,
            include_docs: bool = False) -> CouchRequest:
    params = []
    if since:
        params.append(("since", since))
    params.append(("limit", limit if limit else str(CHANGES_LIMIT)))
    if include_docs:
        params.append(("include_docs", "true"))
    return CouchRequest("GET", with_query(f"/{segment(db)}/_changes", params))
