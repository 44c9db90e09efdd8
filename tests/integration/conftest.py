"""Integration test fixtures — a real search server on localhost:9200.

The typed document API used here needs a server that still supports
document types (1.x through 6.x).
"""

from __future__ import annotations

import json
import time
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest

from esswrapper.wrapper import EssWrapper

ESS_HOST = "localhost"
ESS_PORT = 9200
INTEGRATION_INDEX = "esswrapper_integration"


def _wait_for_service(url: str, timeout: float = 10.0) -> bool:
    """Block until *url* returns HTTP 200, or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


@pytest.fixture(scope="session")
def ess_ready() -> str:
    """Ensure a search server is running."""
    url = f"http://{ESS_HOST}:{ESS_PORT}"
    if not _wait_for_service(url):
        pytest.skip(f"Search server not available at {ESS_HOST}:{ESS_PORT}")
    return url


@pytest.fixture
def live_mapping_file(tmp_path: Path) -> Path:
    path = tmp_path / "test-mapping-file.json"
    path.write_text(
        json.dumps(
            {
                "job": {
                    "_meta": {"owner": "integration"},
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
        )
    )
    return path


@pytest.fixture
def live_wrapper(ess_ready: str) -> Iterator[EssWrapper]:
    ess = EssWrapper.connect(ESS_HOST, ESS_PORT, INTEGRATION_INDEX)
    yield ess
    ess.delete_index()
    ess.close()
