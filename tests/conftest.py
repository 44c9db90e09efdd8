"""Shared test fixtures."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest
from fakes import TEST_INDEX, FakeSearchServer

from esswrapper.wrapper import EssWrapper


@pytest.fixture
def server() -> FakeSearchServer:
    return FakeSearchServer()


@pytest.fixture
def transport(server: FakeSearchServer) -> httpx.MockTransport:
    return httpx.MockTransport(server.handle)


@pytest.fixture
def wrapper(transport: httpx.MockTransport) -> Iterator[EssWrapper]:
    ess = EssWrapper.connect("localhost", 9200, TEST_INDEX, transport=transport)
    yield ess
    ess.close()


@pytest.fixture
def mapping_data() -> dict[str, Any]:
    return {
        "widget": {
            "_meta": {"owner": "tests"},
            "dynamic_templates": [
                {
                    "strings": {
                        "match_mapping_type": "string",
                        "mapping": {"type": "string", "index": "not_analyzed"},
                    }
                }
            ],
        }
    }


@pytest.fixture
def mapping_file(tmp_path: Path, mapping_data: dict[str, Any]) -> Path:
    path = tmp_path / "test-mapping-file.json"
    path.write_text(json.dumps(mapping_data))
    return path


@pytest.fixture
def test_data() -> dict[str, str]:
    return {"name": "test", "host": "test.foo.bar"}


@pytest.fixture
def test_data2() -> dict[str, str]:
    return {"name": "test2", "host": "test.foo.bar"}
