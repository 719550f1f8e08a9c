"""Fixtures for end-to-end scenario runs."""

import json
from pathlib import Path

import pytest
import yaml

REPO_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def scenarios_dir() -> Path:
    return REPO_ROOT / "scenarios"


@pytest.fixture
def equities_root(tmp_path: Path) -> Path:
    """CSV tree with NYSE:KO bars and its dividend calendar."""
    exchange_dir = tmp_path / "equities" / "NYSE"
    exchange_dir.mkdir(parents=True)
    (exchange_dir / "KO.csv").write_text(
        "Date,Open,High,Low,Close,Adj Close,Volume\n"
        "2020-01-02,54.32,54.85,54.01,54.69,49.90,11867700\n"
        "2020-03-13,46.00,48.50,45.20,48.10,44.27,31267300\n"
        "2020-06-01,46.60,46.90,46.10,46.40,43.07,12036900\n"
    )
    (exchange_dir / "dividends_calendar.json").write_text(
        json.dumps({"KO": [{"date": "2020-03-13", "amount": 0.41}]})
    )
    return tmp_path / "equities"


@pytest.fixture
def write_scenario(tmp_path: Path):
    """Write a scenario dict to YAML and return its path."""

    def _write(raw: dict, name: str = "scenario.yaml") -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(raw, sort_keys=False))
        return path

    return _write
