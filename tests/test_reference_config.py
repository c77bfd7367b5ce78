from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sounding_archive.core.reference_config import (
    bootstrap_reference_data,
    load_reference_config,
)

REPO_REFERENCE = Path(__file__).resolve().parents[1] / "config" / "reference.yml"


def test_load_missing_file_is_empty(tmp_path):
    config = load_reference_config(tmp_path / "absent.yml")
    assert config.types == []
    assert config.sites == []


def test_load_rejects_bad_interval(tmp_path):
    path = tmp_path / "reference.yml"
    path.write_text("types:\n  - type: GFS\n    file_type: BUFKIT\n    interval: 0\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_reference_config(path)


def test_bootstrap_registers_types_and_sites(index):
    ids = bootstrap_reference_data(index, REPO_REFERENCE)

    assert set(ids["types"]) == {"GFS", "NAM", "NAM4KM", "RAWINSONDE", "MOBIL"}
    assert set(ids["sites"]) == {"KOUN", "KMSO", "KOTX"}
    assert index.sounding_type("RAWINSONDE").is_observed
    assert index.sounding_type("MOBIL").interval is None
    assert index.site_info("KMSO").long_name == "Missoula"


def test_bootstrap_is_idempotent(index, scenario):
    first = bootstrap_reference_data(index, REPO_REFERENCE)
    second = bootstrap_reference_data(index, REPO_REFERENCE)
    assert first == second
    # GFS was registered before the bootstrap and keeps its id.
    assert first["types"]["GFS"] == scenario.gfs_id
    assert len(index.sounding_types()) == 5
