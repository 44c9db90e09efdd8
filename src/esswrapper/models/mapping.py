"""Mapping document model — Loading type mappings from JSON files.

A mapping file holds exactly one top-level key, the document type name,
whose value is the mapping pushed to the server unmodified::

    {
        "widget": {
            "_meta": {"version": 1},
            "dynamic_templates": [...]
        }
    }
"""

from __future__ import annotations

import json
import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from esswrapper.exceptions import InvalidMappingError

logger = logging.getLogger(__name__)


class MappingDocument(BaseModel):
    """A single document type mapping."""

    model_config = ConfigDict(frozen=True)

    doc_type: str = Field(min_length=1, description="Document type name (the file's only top-level key)")
    body: dict[str, Any] = Field(default_factory=dict, description="Mapping object sent to the server")

    @property
    def meta(self) -> dict[str, Any]:
        return dict(self.body.get("_meta") or {})

    @property
    def dynamic_templates(self) -> list[Any]:
        return list(self.body.get("dynamic_templates") or [])

    def to_request_body(self) -> dict[str, Any]:
        """Body for ``PUT /{index}/_mapping/{doc_type}``."""
        return {self.doc_type: self.body}

    @classmethod
    def from_dict(cls, data: Any) -> MappingDocument:
        """Build from decoded JSON.

        Raises:
            InvalidMappingError: If ``data`` is not an object with exactly one key
                whose value is an object.
        """
        if not isinstance(data, dict):
            raise InvalidMappingError(f"Mapping must be a JSON object, got {type(data).__name__}")
        if len(data) != 1:
            raise InvalidMappingError(
                f"Mapping must have exactly one top-level key (the document type), got {sorted(data)}"
            )
        doc_type, body = next(iter(data.items()))
        if not isinstance(body, dict):
            raise InvalidMappingError(f"Mapping for '{doc_type}' must be a JSON object")
        return cls(doc_type=doc_type, body=body)

    @classmethod
    def from_file(cls, path: str | Path) -> MappingDocument:
        """Read and parse a mapping file.

        Raises:
            OSError: If the file is missing or unreadable.
            InvalidMappingError: If the content is not valid JSON or not a
                single-key object.
        """
        text = Path(path).read_text(encoding="utf-8")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidMappingError(f"Mapping file {path} is not valid JSON: {e}") from e
        return cls.from_dict(data)


class MappingStatus(StrEnum):
    """Outcome of the mapping step while opening a wrapper."""

    APPLIED = "applied"
    SKIPPED = "skipped"
    NOT_REQUESTED = "not_requested"
    INDEX_EXISTS = "index_exists"


class MappingResult(BaseModel):
    """What happened to the mapping file while the wrapper was opened."""

    model_config = ConfigDict(frozen=True)

    status: MappingStatus
    doc_type: str | None = Field(default=None, description="Type the mapping was registered under")
    reason: str | None = Field(default=None, description="Why the mapping was skipped")

    @property
    def applied(self) -> bool:
        return self.status is MappingStatus.APPLIED

    @property
    def skipped(self) -> bool:
        return self.status is MappingStatus.SKIPPED
