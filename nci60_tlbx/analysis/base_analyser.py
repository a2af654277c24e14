"""Common interface of the analysis components."""

from abc import ABC, abstractmethod
from typing import Any


class BaseAnalyser(ABC):
    """Contract shared by :class:`QualityProfiler`, :class:`PCAAnalyzer` and :class:`ReductionSuite`.

    An analyzer is built from one or more :class:`~nci60_tlbx.data.views.DatasetView`
    objects (usually through a ``make_*`` factory on the dataset), does its work in
    :meth:`fit` and hands out a frozen dataclass from :meth:`result`. Analyzers neither
    plot nor write files: helpers in ``nci60_tlbx.plotting`` take the result objects,
    and ``nci60_tlbx.report`` writes them to disk.

    A new analyzer typically looks like::

        @dataclass(frozen=True)
        class GeneVarianceResult:
            variance: pd.Series

        class GeneVarianceAnalyzer(BaseAnalyser):
            def __init__(self, view: DatasetView):
                self._view = view
                self._variance: pd.Series | None = None

            def fit(self) -> "GeneVarianceAnalyzer":
                self._variance = self._view.features.var(ddof=0)
                return self

            def result(self) -> GeneVarianceResult:
                if self._variance is None:
                    raise ValueError("Must call fit() before result()")
                return GeneVarianceResult(self._variance)

    plus a ``make_gene_variance_analyzer`` factory on ``BaseDataset`` that picks the
    right scaling for the view.
    """

    @abstractmethod
    def fit(self) -> "BaseAnalyser":
        """Run the analysis and return ``self`` for chaining."""
        ...

    @abstractmethod
    def result(self) -> Any:
        """Return the results as a frozen dataclass.

        Raises:
            ValueError: If fit() has not been called yet.
        """
        ...
