"""esswrapper — Thin synchronous client for Elasticsearch-style search servers.

Quick start::

    from esswrapper import EssWrapper, must_filter

    with EssWrapper.connect("localhost", 9200, "jobs") as ess:
        doc_id = ess.add("widget", {"name": "test"})
        hits = ess.search("widget", must_filter({"name": "test"}))
"""

from esswrapper.exceptions import (
    ConnectionError,
    EssWrapperError,
    IndexNotFoundError,
    InvalidFilterError,
    InvalidMappingError,
    ResponseError,
    WriteNotAcknowledgedError,
)
from esswrapper.models import MappingDocument, MappingResult, MappingStatus, ServerInfo, VersionInfo
from esswrapper.query import ExactMatch, InSet, must_filter
from esswrapper.wrapper import EssWrapper

__version__ = "0.1.0"

__all__ = [
    "ConnectionError",
    "EssWrapper",
    "EssWrapperError",
    "ExactMatch",
    "InSet",
    "IndexNotFoundError",
    "InvalidFilterError",
    "InvalidMappingError",
    "MappingDocument",
    "MappingResult",
    "MappingStatus",
    "ResponseError",
    "ServerInfo",
    "VersionInfo",
    "WriteNotAcknowledgedError",
    "__version__",
    "must_filter",
]
