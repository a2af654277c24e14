from .data import NCI60Dataset
from .report import ReportConfig, run_report


__all__ = ["NCI60Dataset", "ReportConfig", "run_report"]

__version__ = "0.1.0"
