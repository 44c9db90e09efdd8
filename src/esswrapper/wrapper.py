"""Connection wrapper — Index lifecycle and document CRUD for a search server.

Talks to an Elasticsearch-compatible HTTP API using ``httpx`` (sync). Every
call is a single round-trip; nothing is retried or cached.

Usage::

    with EssWrapper.connect("localhost", 9200, "jobs", "mapping.json") as ess:
        doc_id = ess.add("widget", {"name": "test"})
        ess.get("widget", doc_id)["found"]
        ess.search("widget", must_filter({"name": "test"}))
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast
from urllib.parse import quote

import httpx

from esswrapper.config.settings import EssSettings
from esswrapper.exceptions import (
    ConnectionError,
    EssWrapperError,
    IndexNotFoundError,
    ResponseError,
    WriteNotAcknowledgedError,
)
from esswrapper.models.info import ServerInfo
from esswrapper.models.mapping import MappingDocument, MappingResult, MappingStatus

logger = logging.getLogger(__name__)

Hit = dict[str, Any]
"""A single search hit (``_index``, ``_type``, ``_id``, ``_source``, ...)."""

_TYPELESS_MAPPING_KEYS = frozenset({"properties", "dynamic", "dynamic_templates", "date_detection", "numeric_detection"})


class EssWrapper:
    """Handle on one index of a remote search server.

    Open it with :meth:`connect` (or :meth:`from_settings`), which makes sure
    the index exists and seeds its mapping. The handle owns its HTTP client
    and must be released with :meth:`close`.

    Not synchronized: concurrent use is as safe as ``httpx.Client`` is.
    """

    def __init__(self, client: httpx.Client, index: str) -> None:
        self._client = client
        self._index = index
        self._closed = False
        self._mapping_result = MappingResult(status=MappingStatus.NOT_REQUESTED)

    # ── Construction ─────────────────────────────────────────────────────

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        index: str,
        mapping_file: str | Path | None = None,
        *,
        scheme: str = "http",
        timeout: float = 30.0,
        **httpx_kwargs: Any,
    ) -> EssWrapper:
        """Open a wrapper on ``index``, creating the index if needed.

        When the index is created and ``mapping_file`` is given, the mapping
        is pushed if the server is 1.4 or newer. An old server or a missing
        file skips the mapping with a warning; see :attr:`mapping_result`.

        Args:
            host: Server host name.
            port: Server port.
            index: Target index name.
            mapping_file: Optional JSON mapping file with a single top-level key.
            scheme: ``"http"`` or ``"https"``.
            timeout: Request timeout in seconds.
            **httpx_kwargs: Extra keyword arguments for ``httpx.Client``.

        Raises:
            ConnectionError: If the server cannot be reached.
            ResponseError: If the server rejects the existence probe, index
                creation or mapping push.
            InvalidMappingError: If the mapping file is not a single-key object.
        """
        client = httpx.Client(
            base_url=f"{scheme}://{host}:{port}",
            timeout=httpx.Timeout(timeout),
            **httpx_kwargs,
        )
        wrapper = cls(client, index)
        try:
            wrapper._mapping_result = wrapper._ensure_index(mapping_file)
        except Exception:
            wrapper.close()
            raise
        return wrapper

    @classmethod
    def from_settings(cls, settings: EssSettings, **httpx_kwargs: Any) -> EssWrapper:
        """Open a wrapper from :class:`EssSettings`."""
        if settings.username and settings.password:
            httpx_kwargs.setdefault("auth", httpx.BasicAuth(settings.username, settings.password))
        if settings.scheme == "https":
            httpx_kwargs.setdefault("verify", settings.verify_certs)
        return cls.connect(
            settings.host,
            settings.port,
            settings.index,
            settings.mapping_file,
            scheme=settings.scheme,
            timeout=settings.timeout,
            **httpx_kwargs,
        )

    def _ensure_index(self, mapping_file: str | Path | None) -> MappingResult:
        if self.index_exists():
            logger.debug("Index exists: %s", self._index)
            return MappingResult(status=MappingStatus.INDEX_EXISTS)

        # A rejected mapping file must not leave a new index behind
        prepared: MappingDocument | MappingResult = MappingResult(status=MappingStatus.NOT_REQUESTED)
        if mapping_file:
            prepared = self._prepare_mapping(mapping_file)

        resp = self._request("PUT", self._path())
        logger.info("Index created: %s %s", self._index, resp)

        if isinstance(prepared, MappingResult):
            return prepared
        try:
            return self.put_mapping(prepared)
        except EssWrapperError:
            self._drop_created_index()
            raise

    def _prepare_mapping(self, mapping_file: str | Path) -> MappingDocument | MappingResult:
        """Load ``mapping_file``, or return a ``skipped`` result explaining why not.

        Raises:
            InvalidMappingError: If the file is not a single-key JSON object.
        """
        if not self.is_version_supported():
            logger.warning("Not creating mapping. Server version not supported. Must be >= 1.4.")
            return MappingResult(status=MappingStatus.SKIPPED, reason="server version not supported")

        try:
            return MappingDocument.from_file(mapping_file)
        except OSError as e:
            logger.warning("Not creating mapping. Mapping file unreadable %s: %s", mapping_file, e)
            return MappingResult(status=MappingStatus.SKIPPED, reason=f"mapping file unreadable: {e}")

    def _drop_created_index(self) -> None:
        try:
            self.delete_index()
        except EssWrapperError as e:
            logger.warning("Could not remove index %s after failed mapping: %s", self._index, e)

    def apply_mapping_file(self, mapping_file: str | Path) -> MappingResult:
        """Push the mapping in ``mapping_file`` to the index.

        Returns a ``skipped`` result, without raising, when the server is
        older than 1.4 or the file cannot be read.
        """
        prepared = self._prepare_mapping(mapping_file)
        if isinstance(prepared, MappingResult):
            return prepared
        return self.put_mapping(prepared)

    def put_mapping(self, mapping: MappingDocument) -> MappingResult:
        """Register ``mapping`` under its document type."""
        body = mapping.to_request_body()
        logger.debug("Mapping (%s): %s", mapping.doc_type, json.dumps(body))
        resp = self._request("PUT", self._path("_mapping", mapping.doc_type), json=body)
        logger.info("Updated '%s' mapping for %s: %s", mapping.doc_type, self._index, resp)
        return MappingResult(status=MappingStatus.APPLIED, doc_type=mapping.doc_type)

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def index(self) -> str:
        return self._index

    @property
    def mapping_result(self) -> MappingResult:
        """Outcome of the mapping step performed by :meth:`connect`."""
        return self._mapping_result

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Server ───────────────────────────────────────────────────────────

    def info(self) -> ServerInfo:
        """Fetch server name, cluster and version metadata.

        Raises:
            ConnectionError: If the server cannot be reached.
            ResponseError: If the response is an error or does not look like
                a server info document.
        """
        data = self._request("GET", "/")
        try:
            return ServerInfo.model_validate(data)
        except ValueError as e:
            raise ResponseError(f"Unexpected server info response: {e}", body=data) from e

    get_server_info = info

    def is_version_supported(self) -> bool:
        """Whether the server reports version 1.4 or newer.

        Never raises: failure to fetch or parse the version yields ``False``.
        """
        try:
            info = self.info()
        except (ConnectionError, ResponseError) as e:
            logger.info("Could not get version: %s", e)
            return False
        return info.supported

    # ── Index ────────────────────────────────────────────────────────────

    def index_exists(self) -> bool:
        """Probe the index with ``HEAD``. A 404 means it does not exist."""
        try:
            self._request("HEAD", self._path())
        except IndexNotFoundError:
            return False
        return True

    def get_types(self) -> list[str]:
        """Document type names registered in the index mapping, sorted."""
        data = self._request("GET", self._path("_mapping"))
        index_mapping = data.get(self._index) or {}
        mappings = index_mapping.get("mappings") or {}
        # Typeless servers report the mapping body itself under "mappings"
        return sorted(
            k
            for k, v in mappings.items()
            if isinstance(v, dict) and not k.startswith("_") and k not in _TYPELESS_MAPPING_KEYS
        )

    def refresh(self) -> None:
        """Make recent writes visible to search."""
        self._request("POST", self._path("_refresh"))

    def delete_index(self) -> bool:
        """Delete the whole index. Returns the server's acknowledgement."""
        data = self._request("DELETE", self._path())
        return bool(data.get("acknowledged", False))

    # ── Documents ────────────────────────────────────────────────────────

    def add(self, doc_type: str, data: Any, doc_id: str | None = None) -> str:
        """Index a new document and return its id.

        Without ``doc_id`` the server generates one.

        Raises:
            WriteNotAcknowledgedError: If the server does not report the
                document as created (e.g. ``doc_id`` already existed).
        """
        if doc_id:
            resp = self._request("PUT", self._path(doc_type, doc_id), json=data)
        else:
            resp = self._request("POST", self._path(doc_type), json=data)

        if not _is_created(resp):
            raise WriteNotAcknowledgedError(f"Failed to record document: {resp}")
        return str(resp["_id"])

    def update(self, doc_type: str, doc_id: str, data: Any) -> None:
        """Re-index (overwrite) the document at ``doc_id``."""
        resp = self._request("PUT", self._path(doc_type, doc_id), json=data)
        logger.debug("Updated %s/%s: %s", doc_type, doc_id, resp)

    def get(self, doc_type: str, doc_id: str) -> dict[str, Any]:
        """Fetch a document. The response carries a ``found`` flag."""
        try:
            return self._request("GET", self._path(doc_type, doc_id))
        except ResponseError as e:
            # A missing document is a 404 with a regular document body
            if e.status_code == 404 and isinstance(e.body, dict) and "found" in e.body:
                return cast(dict[str, Any], e.body)
            raise

    def get_by_field(self, doc_type: str, field: str, value: Any) -> list[Hit]:
        """Exact-term search on one field. Empty list when nothing matches."""
        return self._search(doc_type, {"query": {"term": {field: value}}})

    def search(self, doc_type: str | None, filter_expr: Mapping[str, Any], size: int | None = None) -> list[Hit]:
        """Run a filter built by :func:`esswrapper.query.must_filter`.

        Args:
            doc_type: Type to search, or ``None`` for the whole index.
            filter_expr: A ``{"filter": ...}`` expression.
            size: Maximum number of hits; server default when ``None``.
        """
        body: dict[str, Any] = {"query": {"constant_score": dict(filter_expr)}}
        if size is not None:
            body["size"] = size
        return self._search(doc_type, body)

    def delete(self, doc_type: str, doc_id: str) -> bool:
        """Delete a document.

        Returns ``True`` if it existed and was removed, ``False`` otherwise,
        including when the call itself failed.
        """
        try:
            resp = self._request("DELETE", self._path(doc_type, doc_id))
        except ResponseError as e:
            # Only a missing document is expected; a missing index is not
            if e.status_code != 404 or isinstance(e, IndexNotFoundError):
                logger.warning("Failed to delete %s/%s: %s", doc_type, doc_id, e)
            return False
        except ConnectionError as e:
            logger.warning("Failed to delete %s/%s: %s", doc_type, doc_id, e)
            return False
        return bool(resp.get("found")) or resp.get("result") == "deleted"

    # ── Lifecycle ────────────────────────────────────────────────────────

    def close(self) -> None:
        """Close the underlying HTTP client. Further calls are no-ops."""
        if self._closed:
            return
        self._client.close()
        self._closed = True

    def __enter__(self) -> EssWrapper:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"EssWrapper(base_url={str(self._client.base_url)!r}, index={self._index!r})"

    # ── Helpers ──────────────────────────────────────────────────────────

    def _path(self, *segments: str) -> str:
        """Index-relative URL path with every segment percent-encoded."""
        return "/" + "/".join(quote(str(s), safe="") for s in (self._index, *segments))

    def _search(self, doc_type: str | None, body: dict[str, Any]) -> list[Hit]:
        path = self._path(doc_type, "_search") if doc_type else self._path("_search")
        logger.debug("Search %s: %s", path, json.dumps(body))
        resp = self._request("POST", path, json=body)
        return list(resp.get("hits", {}).get("hits", []))

    def _request(self, method: str, path: str, *, json: Any = None) -> dict[str, Any]:
        """Send one request and decode the JSON body.

        Raises:
            ConnectionError: On transport failure or use after close.
            IndexNotFoundError: On a 404 for an index-level path.
            ResponseError: On any other non-2xx status or a non-object body.
        """
        if self._closed:
            raise ConnectionError("Wrapper is closed.")

        try:
            resp = self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise ConnectionError(f"{method} {path} failed: {e}") from e

        body = _decode(resp)
        if resp.is_error:
            error_cls = IndexNotFoundError if self._is_index_missing(resp.status_code, path, body) else ResponseError
            raise error_cls(
                f"{method} {path} returned {resp.status_code}: {body if body is not None else resp.text}",
                status_code=resp.status_code,
                body=body,
            )
        if body is None:
            return {}
        if not isinstance(body, dict):
            raise ResponseError(f"{method} {path} returned a non-object body", status_code=resp.status_code, body=body)
        return body

    def _is_index_missing(self, status_code: int, path: str, body: Any) -> bool:
        if status_code != 404:
            return False
        if path == self._path():
            return True
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return error.get("type") == "index_not_found_exception"
        return isinstance(error, str) and error.startswith("IndexMissingException")


def _decode(resp: httpx.Response) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


def _is_created(resp: Mapping[str, Any]) -> bool:
    # 1.x-5.x report "created", 6.x and later report "result"
    return bool(resp.get("created")) or resp.get("result") == "created"
