"""Tests for data-path helpers."""

import pytest

from nci60_tlbx.utils import get_data_dir, get_dataset_path


def test_data_dir_exists() -> None:
    data_dir = get_data_dir()
    assert data_dir.is_dir()
    assert data_dir.name == "_data"


def test_unknown_dataset_file_raises() -> None:
    with pytest.raises(FileNotFoundError, match=r"not found"):
        get_dataset_path("definitely_missing.csv")


def test_known_key_maps_to_file_name() -> None:
    try:
        path = get_dataset_path("nci60")
    except FileNotFoundError as exc:
        assert "nci60_data.csv" in str(exc)
    else:
        assert path.name == "nci60_data.csv"
