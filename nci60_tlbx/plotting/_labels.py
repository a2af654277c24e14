"""Label ordering and colouring shared by the plotting modules."""

import pandas as pd

from nci60_tlbx.utils.plotting_config import DEFAULT_PLOT_CFG, PlottingConfig


def label_order(labels: pd.Series) -> list[str]:
    """Category order for ordered categoricals, sorted unique values otherwise."""
    if isinstance(labels.dtype, pd.CategoricalDtype):
        return [str(c) for c in labels.cat.categories]
    return sorted(labels.astype(str).unique())


def label_palette(labels: pd.Series, cfg: PlottingConfig | None = None) -> dict[str, tuple[float, float, float]]:
    return (cfg or DEFAULT_PLOT_CFG).label_colors(label_order(labels))
