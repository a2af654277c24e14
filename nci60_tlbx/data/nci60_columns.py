"""Column and class-label definitions for the NCI60 gene-expression dataset."""

from enum import StrEnum

from .base_columns import BaseColumn, ColumnMetadata


class CancerType(StrEnum):
    """Cancer types (cell-line origins) recorded in the NCI60 labels.

    Member order of the first five entries is the fixed category order used by
    the analysis; the remaining members only occur in the unfiltered data.
    """

    BREAST = "BREAST"
    RENAL = "RENAL"
    MELANOMA = "MELANOMA"
    NSCLC = "NSCLC"
    COLON = "COLON"
    CNS = "CNS"
    LEUKEMIA = "LEUKEMIA"
    OVARIAN = "OVARIAN"
    PROSTATE = "PROSTATE"
    UNKNOWN = "UNKNOWN"
    K562A_REPRO = "K562A-repro"
    K562B_REPRO = "K562B-repro"
    MCF7A_REPRO = "MCF7A-repro"
    MCF7D_REPRO = "MCF7D-repro"


DEFAULT_CANCER_TYPES: tuple[str, ...] = (
    CancerType.BREAST,
    CancerType.RENAL,
    CancerType.MELANOMA,
    CancerType.NSCLC,
    CancerType.COLON,
)
"""The five classes compared in the report, in category order."""


class NCI60Column(BaseColumn):
    """Non-descriptor columns of the NCI60 dataset as per the [ISLR `NCI60` data](https://rdrr.io/cran/ISLR/man/NCI60.html).

    Columns:
    - ``sample``: str - Cell-line identifier (row index)
    - ``label``: category - Cancer type of the cell line

    Every other column is a numeric gene-expression descriptor (6830 in the full data).
    """

    LABEL = "label"
    """Cancer type of the cell line (ordered categorical after loading)."""

    SAMPLE = "sample"
    """Cell-line identifier, used as the row index."""

    def metadata(self) -> ColumnMetadata:
        return {
            NCI60Column.LABEL: ColumnMetadata(
                original_name="labs",
                cleaned_name="label",
                dtype="category",
                pretty_name="Cancer Type",
            ),
            NCI60Column.SAMPLE: ColumnMetadata(
                original_name="",
                cleaned_name="sample",
                dtype="str",
                pretty_name="Cell Line",
            ),
        }[self]

    @classmethod
    def identifier_columns(cls) -> list[str]:
        return [cls.SAMPLE]
