"""Base column definitions and metadata structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True)
class ColumnMetadata:
    """Metadata for a named dataset column.

    Attributes:
        cleaned_name: Standardized column name used in DataFrames.
        dtype: Expected Python/pandas data type as a string.
        pretty_name: Human-readable name for use in plots and visualizations.
    """

    original_name: str
    """Column name as it appears in the raw CSV file."""
    cleaned_name: str
    dtype: str
    pretty_name: str


class BaseColumn(StrEnum):
    """Base class for dataset column enums.

    Only the non-descriptor columns are enumerated; descriptor columns are
    discovered from the data. All derived enums must define a ``LABEL`` member
    naming the categorical class column.

    Subclasses must implement:
    - metadata(): Return ColumnMetadata for each enum member
    - identifier_columns(): Return list of identifier column names
    """

    LABEL: str

    def metadata(self) -> ColumnMetadata:
        """Get metadata for this column.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement metadata() method")

    @classmethod
    def identifier_columns(cls) -> list[str]:
        """Get identifier column names.

        Raises:
            NotImplementedError: If not implemented by subclass.
        """
        raise NotImplementedError(f"{cls.__name__} must implement identifier_columns() method")

    @classmethod
    def categorical_columns(cls) -> list[str]:
        """Get categorical (non-descriptor) column names; the label by default."""
        return [cls.LABEL]

    @classmethod
    def non_descriptor_columns(cls) -> list[str]:
        """Columns that are never treated as numeric descriptors."""
        return [*cls.identifier_columns(), *cls.categorical_columns()]

    @property
    def pretty_name(self) -> str:
        """Get the human-readable name for plots and visualizations."""
        return self.metadata().pretty_name

    @property
    def original_name(self) -> str:
        """Get the original column name from the CSV file."""
        return self.metadata().original_name

    @property
    def dtype_name(self) -> str:
        """Get the expected data type as a string."""
        return self.metadata().dtype
