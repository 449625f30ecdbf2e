# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

HEADERS = [
    "Tenor", "Indicative Rate", "Minimum Spread", "Ethica Ratio", "Customer Ratio",
    "AT Ethica Ratio", "AT Customer Ratio", "Minimum Amount", "Maximum Amount",
]
VALID_ROW = ["90", "12.00%", "6.00%", "33.33%", "66.67%", "75.00%", "25.00%", '"50,000,000"', '"99,999,999.99"']


@pytest.fixture(autouse=True)
def _no_api_env(monkeypatch):
    # a developer's shell must not leak into tests
    monkeypatch.delenv("ERP_API_BASE_URL", raising=False)
    monkeypatch.delenv("ERP_API_TOKEN", raising=False)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: https://erp.test/api
  timeout_seconds: 5
pdf:
  scale: 1.5
  max_pages: 4
  background: "#ffffff"
import:
  allow_unknown_columns: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "erp.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write CSV lines (already joined cells) under tmp_path."""
    def _make(lines: list[str], name: str = "rates.csv") -> Path:
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p
    return _make


@pytest.fixture()
def make_xlsx(tmp_path: Path) -> Callable[..., Path]:
    """Write rows (header first) to the first sheet of an XLSX under tmp_path."""
    def _make(rows: list[list[object]], name: str = "rates.xlsx", sheet: str = "Rate Guide") -> Path:
        p = tmp_path / name
        with pd.ExcelWriter(p, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
        return p
    return _make


@pytest.fixture()
def valid_csv(make_csv) -> Path:
    return make_csv([",".join(HEADERS), ",".join(VALID_ROW)])


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    # main() installs a stdout handler and stops propagation; undo it so caplog keeps working
    yield
    from erp_toolkit.logging.init import reset_logging
    reset_logging()
