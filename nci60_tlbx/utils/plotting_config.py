"""Shared plotting configuration (style, palette, font sizes)."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import matplotlib as mpl
import matplotlib.pyplot as plt
import plotly.io as pio
import seaborn as sns
from matplotlib.figure import Figure


_RC_KEYS = (
    "axes.titlesize",
    "axes.labelsize",
    "xtick.labelsize",
    "ytick.labelsize",
    "figure.dpi",
    "axes.prop_cycle",
    "font.family",
)


@dataclass
class PlottingConfig:
    """Reusable plotting style that can be applied across figures.

    ``label_palette`` colours the cancer classes in every embedding and box plot so
    that a class keeps its colour from one technique to the next.
    """

    style: str = "whitegrid"
    palette: str | list[str] = "tab10"
    label_palette: str | list[str] = "Set1"
    font_family: str = "DejaVu Sans"
    font_scale: float = 1.0
    title_size: int = 14
    label_size: int = 12
    tick_size: int = 10
    figure_dpi: int = 100
    save_dpi: int = 150
    context: str = "notebook"
    plotly_template: str = "plotly_white"
    plotly_colorway: list[str] | None = None
    seaborn_kwargs: dict[str, Any] = field(default_factory=dict)

    def _rc_params(self) -> dict[str, Any]:
        palette_colors = sns.color_palette(self.palette)
        return {
            "axes.titlesize": self.title_size,
            "axes.labelsize": self.label_size,
            "xtick.labelsize": self.tick_size,
            "ytick.labelsize": self.tick_size,
            "figure.dpi": self.figure_dpi,
            "axes.prop_cycle": mpl.cycler(color=palette_colors),
            "font.family": [self.font_family],
        }

    def _set_theme(self) -> None:
        sns.set_theme(
            style=self.style,
            palette=sns.color_palette(self.palette),
            context=self.context,
            font_scale=self.font_scale,
            **self.seaborn_kwargs,
        )
        mpl.rcParams.update(self._rc_params())
        pio.templates.default = self.plotly_template
        if self.plotly_colorway is not None:
            pio.templates[self.plotly_template].layout.colorway = self.plotly_colorway

    @contextmanager
    def apply(self) -> Generator[None]:
        """Apply style within a context, restoring previous rcParams afterwards."""
        prev = {k: mpl.rcParams.get(k) for k in _RC_KEYS}
        prev_plotly_template = pio.templates.default
        # Colorway may be None on some templates
        prev_plotly_colorway = getattr(pio.templates[prev_plotly_template].layout, "colorway", None)

        self._set_theme()
        try:
            yield
        finally:
            pio.templates.default = prev_plotly_template
            pio.templates[prev_plotly_template].layout.colorway = prev_plotly_colorway
            mpl.rcParams.update(prev)

    def label_colors(self, labels: list[str]) -> dict[str, tuple[float, float, float]]:
        """Map each label to a fixed colour of ``label_palette``."""
        colors = sns.color_palette(self.label_palette, n_colors=max(len(labels), 1))
        return dict(zip(labels, colors, strict=False))

    def save(self, fig: Figure, path: str | Path, *, close: bool = True) -> Path:
        """Write a figure to disk with the configured resolution.

        Args:
            fig: Matplotlib figure to write.
            path: Target file; the suffix selects the image format.
            close: Close the figure afterwards to release memory during long sweeps.

        Returns:
            The written path.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=self.save_dpi, bbox_inches="tight")
        if close:
            plt.close(fig)
        return path


# Default configuration used across plotting functions
DEFAULT_PLOT_CFG = PlottingConfig()


__all__ = ["DEFAULT_PLOT_CFG", "PlottingConfig"]
