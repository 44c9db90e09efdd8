"""Response and document models."""

from esswrapper.models.info import ServerInfo, VersionInfo, is_supported_version
from esswrapper.models.mapping import MappingDocument, MappingResult, MappingStatus

__all__ = [
    "MappingDocument",
    "MappingResult",
    "MappingStatus",
    "ServerInfo",
    "VersionInfo",
    "is_supported_version",
]
