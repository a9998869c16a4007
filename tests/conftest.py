import json
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from jsontools.main import app


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], str]:
    """Write value as a pretty JSON document; returns the path as str."""

    def _write(name: str, value: Any) -> str:
        p = tmp_path / name
        p.write_text(json.dumps(value, indent=2), encoding="utf-8")
        return str(p)

    return _write


@pytest.fixture
def write_ndjson(tmp_path: Path) -> Callable[[str, list[Any]], str]:
    """Write values one per line; returns the path as str."""

    def _write(name: str, values: list[Any]) -> str:
        p = tmp_path / name
        p.write_text("\n".join(json.dumps(v) for v in values) + "\n", encoding="utf-8")
        return str(p)

    return _write
