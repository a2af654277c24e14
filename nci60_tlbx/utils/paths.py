from pathlib import Path
from typing import Literal


__all__ = ["get_data_dir", "get_dataset_path"]


_DATASET_MAP: dict[str, str] = {
    "nci60": "nci60_data.csv",
    "nci60_labels": "nci60_labs.csv",
}


def get_data_dir() -> Path:
    """Get the path to the data directory.

    Returns:
        Path to the ``_data`` directory at the repository root

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    data_dir = (Path(__file__).parents[2] / "_data").resolve()
    if not data_dir.exists():
        raise FileNotFoundError(f"Data directory not found at {data_dir}")
    return data_dir


def get_dataset_path(filename: Literal["nci60", "nci60_labels"] | str) -> Path:  # noqa: PYI051
    """Get the full path to a dataset file in the data directory.

    Args:
        filename: Key to known dataset or custom filename

    Returns:
        Full path to the dataset file relative to the data directory of the project

    Raises:
        FileNotFoundError: If the file is not present in the data directory

    Supported: nci60_data.csv  nci60_labs.csv
    """
    data_dir = get_data_dir()
    ds_path = data_dir / _DATASET_MAP.get(filename, filename)
    if not ds_path.exists():
        raise FileNotFoundError(f"Dataset file '{filename}' not found at {ds_path}")

    return ds_path
