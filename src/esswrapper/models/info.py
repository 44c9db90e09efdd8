"""Server metadata models — the body of ``GET /`` on the search server."""

from __future__ import annotations

import logging
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

MIN_SUPPORTED_VERSION = Decimal("1.4")


class VersionInfo(BaseModel):
    """Version block of the server info response."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    number: str = Field(description="Dotted server version, e.g. '1.4.2'")
    build_hash: str = Field(default="", description="Build commit hash")
    build_timestamp: str = Field(default="", description="Build timestamp (build_date on newer servers)")
    build_snapshot: bool = Field(default=False, description="Whether this is a snapshot build")
    lucene_version: str = Field(default="", description="Underlying Lucene version")


class ServerInfo(BaseModel):
    """Snapshot of server metadata. Fetched per call and never cached."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: int = Field(default=200, description="Status reported in the body (1.x servers only)")
    name: str = Field(default="", description="Node name")
    cluster_name: str = Field(default="", description="Cluster name")
    version: VersionInfo = Field(description="Version details")
    tagline: str = Field(default="", description="Server tagline")

    @property
    def supported(self) -> bool:
        return is_supported_version(self.version.number)


def is_supported_version(number: str) -> bool:
    """Return whether a dotted version string is at least 1.4.

    The first two components are read together as one decimal number
    (``"1.7.5"`` is 1.7). Anything that does not parse (too few components,
    parts that are not plain digits) yields ``False``.
    """
    parts = str(number).split(".")
    if len(parts) < 2 or not all(p.isascii() and p.isdigit() for p in parts[:2]):
        logger.info("Could not parse server version: %r", number)
        return False
    return Decimal(f"{parts[0]}.{parts[1]}") >= MIN_SUPPORTED_VERSION
