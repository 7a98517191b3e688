"""Immutable HTTP request.

A snapshot of one inbound request, assembled once from four raw sources
(server metadata, query parameters, body parameters, uploaded files) and
never mutated afterwards. Session or "current user" state lives outside
the request and is consulted by middleware separately.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from perch._internal.multimap import to_multi
from perch.http.forms import FormData, UploadFile
from perch.http.headers import Headers
from perch.http.query import QueryParams

# Body field that overrides the method of a POST (HTML forms can't PUT/DELETE)
METHOD_OVERRIDE_FIELD = "_method"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``method`` is the effective method: uppercased, with the ``_method``
    override already applied. ``path`` never includes the query string.
    """

    method: str
    path: str
    query: QueryParams = field(default_factory=QueryParams)
    body: FormData = field(default_factory=FormData)
    headers: Headers = field(default_factory=Headers)
    files: Mapping[str, UploadFile] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Applied once here; the effective method never changes afterwards
        method = self.method.upper()
        override = self.body.get(METHOD_OVERRIDE_FIELD)
        if method == "POST" and override:
            method = override.upper()
        object.__setattr__(self, "method", method)

    # -- Input access --

    def all(self) -> dict[str, str]:
        """Query and body parameters merged; body wins on collisions."""
        merged = {key: self.query[key] for key in self.query}
        merged.update({key: self.body[key] for key in self.body})
        return merged

    def input(self, key: str, default: Any = None) -> Any:
        """Return a body parameter, else a query parameter, else *default*."""
        if key in self.body:
            return self.body[key]
        if key in self.query:
            return self.query[key]
        return default

    def header(self, key: str, default: str | None = None) -> str | None:
        """Return a header value (case-insensitive), or *default*."""
        return self.headers.get(key, default)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def is_ajax(self) -> bool:
        """True if the request was sent with ``X-Requested-With: XMLHttpRequest``."""
        return self.headers.get("x-requested-with", "").lower() == "xmlhttprequest"

    # -- Factory --

    @classmethod
    def from_sources(
        cls,
        server: Mapping[str, Any],
        query: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        files: Mapping[str, UploadFile] | None = None,
        *,
        path: str | None = None,
    ) -> Request:
        """Build a request from CGI/WSGI-style server metadata plus parsed input.

        Unless *path* is given, it comes from ``PATH_INFO`` or, for CGI
        servers that don't set it, ``REQUEST_URI`` with the query string
        stripped. When *query* is not given it is parsed
        from ``QUERY_STRING``. Headers are collected best-effort from
        ``HTTP_*`` keys; none at all is fine.
        """
        method = str(server.get("REQUEST_METHOD") or "GET")

        if path is None:
            path = _server_path(server)

        if query is None:
            query_params = QueryParams.parse(str(server.get("QUERY_STRING", "")))
        elif isinstance(query, QueryParams):
            query_params = query
        else:
            query_params = QueryParams.from_mapping(query)

        if isinstance(body, FormData):
            form = body
            upload_files = {**body.files, **(files or {})}
        else:
            form = FormData(to_multi(body))
            upload_files = dict(files or {})

        return cls(
            method=method,
            path=path,
            query=query_params,
            body=form,
            headers=Headers.from_server(server),
            files=upload_files,
        )


def _server_path(server: Mapping[str, Any]) -> str:
    path_info = server.get("PATH_INFO")
    if path_info is not None:
        return str(path_info) or "/"
    raw_uri = server.get("REQUEST_URI")
    if raw_uri:
        return str(raw_uri).partition("?")[0] or "/"
    return "/"
