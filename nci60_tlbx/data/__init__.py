"""Data module for dataset classes."""

from .nci60_columns import DEFAULT_CANCER_TYPES, CancerType
from .nci60_columns import NCI60Column as NCICol
from .nci60_dataset import NCI60Dataset
from .views import DatasetView


__all__ = ["DEFAULT_CANCER_TYPES", "CancerType", "DatasetView", "NCI60Dataset", "NCICol"]
