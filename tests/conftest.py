"""
Shared fixtures for the contract tooling test suite.

OpenAPI fixtures come from tests/fixtures/openapi; tracker workbooks are
written per test into tmp_path.
"""

from pathlib import Path
from typing import Callable, Dict, Any, Iterable

import pandas as pd
import pytest
import yaml
from fastapi.testclient import TestClient

from erp_contracts.config import settings
from erp_contracts.logging_config import configure_logging
from erp_contracts.smoke_app import app

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_OPENAPI = FIXTURES_DIR / "openapi" / "school_erp_sample.yaml"

configure_logging(settings.log_level, settings.log_format)


@pytest.fixture(scope="session")
def sample_openapi_path() -> Path:
    return SAMPLE_OPENAPI


@pytest.fixture(scope="function")
def sample_openapi() -> Dict[str, Any]:
    """Fresh parsed copy of the sample OpenAPI document"""
    return yaml.safe_load(SAMPLE_OPENAPI.read_text(encoding="utf-8"))


@pytest.fixture(scope="function")
def write_openapi(tmp_path: Path) -> Callable[[Dict[str, Any]], Path]:
    def _write(document: Dict[str, Any], name: str = "openapi.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture(scope="function")
def write_tracker(tmp_path: Path) -> Callable[..., Path]:
    """Write a first-sheet tracker workbook with a 'Unique Code' column"""

    def _write(codes: Iterable[str], name: str = "tracker.xlsx", extra_sheet: bool = False) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        codes = list(codes)
        df = pd.DataFrame({
            "Unique Code": codes,
            "Activity": [f"Activity {code}" for code in codes],
        })
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Tracker", index=False)
            if extra_sheet:
                pd.DataFrame({"Unique Code": ["IGNORED-99-999"]}).to_excel(
                    writer, sheet_name="Archive", index=False
                )
        return path

    return _write


@pytest.fixture(scope="function")
def smoke_client() -> TestClient:
    """TestClient bound to the smoke API; usable wherever an httpx.Client is"""
    with TestClient(app) as client:
        yield client
