"""End-to-end exploratory report: quality tables, six embeddings and their plots.

Run from the command line::

    nci60-report --output-dir report/ --batch-size 28

or from Python::

    >>> from nci60_tlbx.data import NCI60Dataset
    >>> from nci60_tlbx.report import run_report
    >>> report = run_report(NCI60Dataset.from_csv(), "report/")
    >>> report.reductions.separation_scores()
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from itertools import islice
from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from nci60_tlbx.analysis.quality_profiler import QualityProfileResult, QualityThresholds
from nci60_tlbx.analysis.reduction_suite import ReductionConfig, ReductionSuiteResult
from nci60_tlbx.data.base_dataset import BaseDataset
from nci60_tlbx.data.nci60_dataset import NCI60Dataset
from nci60_tlbx.plotting.dataset_plots import (
    DEFAULT_BATCH_SIZE,
    descriptor_pages,
    n_descriptor_batches,
    plot_scaling_comparison,
)
from nci60_tlbx.plotting.embedding_plots import (
    plot_embedding_grid,
    plot_embedding_plotly,
    plot_embedding_scatter,
    plot_separation_scores,
)
from nci60_tlbx.plotting.pca_plots import plot_explained_variance, plot_loadings_heatmap, plot_pca_scatter_matrix
from nci60_tlbx.plotting.quality_plots import plot_moment_scatter, plot_quality_flags
from nci60_tlbx.utils.plotting_config import PlottingConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportConfig:
    """What the report renders and how.

    Attributes:
        batch_size: Descriptors per box-plot page (28 fits one page of 4 x 7 facets).
        boxplots: Render the per-descriptor box-plot sweep.
        max_boxplot_batches: Stop the sweep after this many pages (``None`` = all).
        interactive: Also write an interactive HTML scatter per technique.
        image_format: File suffix for static figures.
        decimals: Rounding of the exported quality tables.
        reduction: Technique parameters.
        thresholds: Quality-flag thresholds.
        plotting: Figure style.
    """

    batch_size: int = DEFAULT_BATCH_SIZE
    boxplots: bool = True
    max_boxplot_batches: int | None = None
    interactive: bool = True
    image_format: str = "png"
    decimals: int = 3
    reduction: ReductionConfig = field(default_factory=ReductionConfig)
    thresholds: QualityThresholds = field(default_factory=QualityThresholds)
    plotting: PlottingConfig = field(default_factory=PlottingConfig)

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_boxplot_batches is not None and self.max_boxplot_batches < 0:
            raise ValueError(f"max_boxplot_batches must be non-negative, got {self.max_boxplot_batches}")


@dataclass(frozen=True)
class ReportResult:
    """Everything a report run produced.

    Attributes:
        profile: Quality profile of the raw data.
        reductions: Embeddings (and failures) of the six techniques.
        written: Files written, in order.
        plot_failures: Plot name to error message for figures that could not be rendered.
    """

    profile: QualityProfileResult
    reductions: ReductionSuiteResult
    written: list[Path]
    plot_failures: dict[str, str]


class _FigureWriter:
    """Render figures one at a time; a failing figure is logged and skipped."""

    def __init__(self, out_dir: Path, cfg: ReportConfig) -> None:
        self._out_dir = out_dir
        self._cfg = cfg
        self.written: list[Path] = []
        self.failures: dict[str, str] = {}

    def render(self, name: str, draw: Callable[[], Figure], subdir: str | None = None) -> None:
        target = self._out_dir / subdir if subdir else self._out_dir
        try:
            fig = draw()
            self.written.append(self._cfg.plotting.save(fig, target / f"{name}.{self._cfg.image_format}"))
        except Exception as exc:
            logger.exception("Could not render plot '%s'", name)
            self.failures[name] = f"{type(exc).__name__}: {exc}"
            plt.close("all")

    def render_html(self, name: str, draw: Callable[[], object], subdir: str | None = None) -> None:
        target = (self._out_dir / subdir if subdir else self._out_dir) / f"{name}.html"
        try:
            fig = draw()
            target.parent.mkdir(parents=True, exist_ok=True)
            fig.write_html(target, include_plotlyjs="cdn")
            self.written.append(target)
        except Exception as exc:
            logger.exception("Could not render interactive plot '%s'", name)
            self.failures[name] = f"{type(exc).__name__}: {exc}"


def run_report(
    dataset: BaseDataset,
    output_dir: str | Path,
    config: ReportConfig | None = None,
) -> ReportResult:
    """Profile, reduce and plot ``dataset``, writing every artefact below ``output_dir``.

    Output layout::

        quality_numeric.csv  quality_categorical.csv  quality_flags_summary.csv
        label_counts.csv     separation_scores.csv    embeddings/<technique>.csv
        figures/*.png        figures/boxplots/*.png   interactive/*.html

    A failing technique or figure does not stop the run; see
    ``ReportResult.reductions.failures`` and ``ReportResult.plot_failures``.
    An invalid reduction configuration raises ``ValueError`` before any file is written.
    """
    cfg = config or ReportConfig()
    # Configuration errors surface here, before anything is written
    suite = dataset.make_reduction_suite(config=cfg.reduction)
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    logger.info("Profiling data quality")
    profile = dataset.make_quality_profiler(thresholds=cfg.thresholds).fit().result()
    written.append(profile.to_csv(out_dir / "quality_numeric.csv", kind="numeric", decimals=cfg.decimals))
    written.append(profile.to_csv(out_dir / "quality_categorical.csv", kind="categorical", decimals=cfg.decimals))
    profile.flag_summary().to_csv(out_dir / "quality_flags_summary.csv", index_label="flag")
    written.append(out_dir / "quality_flags_summary.csv")

    label_col = dataset.Col.LABEL
    dataset.df[label_col].value_counts(sort=False).to_csv(out_dir / "label_counts.csv", index_label=label_col)
    written.append(out_dir / "label_counts.csv")

    logger.info("Running dimensionality reductions")
    reductions = suite.fit().result()
    for technique, emb in reductions.embeddings.items():
        path = out_dir / "embeddings" / f"{technique}.csv"
        path.parent.mkdir(parents=True, exist_ok=True)
        emb.with_labels().to_csv(path)
        written.append(path)
    reductions.separation_scores().round(cfg.decimals).to_csv(out_dir / "separation_scores.csv")
    written.append(out_dir / "separation_scores.csv")
    if reductions.failures:
        logger.warning("Techniques unavailable in this report: %s", ", ".join(reductions.failures))

    writer = _FigureWriter(out_dir, cfg)
    with cfg.plotting.apply():
        _render_figures(writer, dataset, profile, reductions, cfg)

    written.extend(writer.written)
    logger.info("Report written to %s (%d files, %d plot failures)", out_dir, len(written), len(writer.failures))
    return ReportResult(profile=profile, reductions=reductions, written=written, plot_failures=writer.failures)


def _render_figures(
    writer: _FigureWriter,
    dataset: BaseDataset,
    profile: QualityProfileResult,
    reductions: ReductionSuiteResult,
    cfg: ReportConfig,
) -> None:
    pcfg = cfg.plotting
    writer.render("quality_flags", lambda: plot_quality_flags(profile), "figures")
    writer.render("quality_moments", lambda: plot_moment_scatter(profile), "figures")
    writer.render("scaling_comparison", lambda: plot_scaling_comparison(dataset), "figures")

    if reductions.pca is not None:
        pca = reductions.pca
        n_pcs = min(cfg.reduction.pca_components, pca.scores.shape[1])
        writer.render("pca_scatter_matrix", lambda: plot_pca_scatter_matrix(pca, n_components=n_pcs, cfg=pcfg), "figures")
        writer.render("pca_explained_variance", lambda: plot_explained_variance(pca), "figures")
        writer.render("pca_loadings", lambda: plot_loadings_heatmap(pca, n_components=min(3, n_pcs)), "figures")

    for technique, emb in reductions.embeddings.items():
        writer.render(f"embedding_{technique}", lambda emb=emb: plot_embedding_scatter(emb, cfg=pcfg), "figures")
        if cfg.interactive:
            writer.render_html(f"embedding_{technique}", lambda emb=emb: plot_embedding_plotly(emb, cfg=pcfg), "interactive")

    writer.render("embedding_grid", lambda: plot_embedding_grid(reductions, cfg=pcfg), "figures")
    writer.render("separation_scores", lambda: plot_separation_scores(reductions), "figures")

    if cfg.boxplots:
        view = dataset.view(scaling="none")
        pages = descriptor_pages(view, cfg.batch_size, cfg=pcfg)
        for i, _cols, draw in islice(pages, cfg.max_boxplot_batches):
            writer.render(f"boxplots_{i + 1:04d}", draw, "figures/boxplots")
        if cfg.max_boxplot_batches is not None and cfg.max_boxplot_batches < n_descriptor_batches(view, cfg.batch_size):
            logger.info("Stopping box-plot sweep after %d pages", cfg.max_boxplot_batches)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nci60-report",
        description="Quality profile and dimensionality-reduction comparison of the NCI60 data.",
    )
    parser.add_argument("--data", type=Path, default=None, help="Expression CSV (default: _data/nci60_data.csv)")
    parser.add_argument("--labels", type=Path, default=None, help="Single-column labels CSV")
    parser.add_argument("--output-dir", type=Path, default=Path("report"), help="Directory for tables and figures")
    parser.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help="Descriptors per box-plot page")
    parser.add_argument("--max-boxplot-batches", type=int, default=None, help="Limit the box-plot sweep")
    parser.add_argument("--skip-boxplots", action="store_true", help="Do not render the box-plot sweep")
    parser.add_argument("--no-interactive", action="store_true", help="Do not write interactive HTML plots")
    parser.add_argument("--perplexity", type=float, default=5.0, help="t-SNE perplexity")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for every stochastic technique (default: t-SNE/UMAP 12345678, ICA/NMF unseeded)",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s: %(message)s")

    reduction = replace(ReductionConfig(), perplexity=args.perplexity)
    if args.seed is not None:
        reduction = reduction.with_seed(args.seed)

    try:
        config = ReportConfig(
            batch_size=args.batch_size,
            boxplots=not args.skip_boxplots,
            max_boxplot_batches=args.max_boxplot_batches,
            interactive=not args.no_interactive,
            reduction=reduction,
        )
        dataset = NCI60Dataset.from_csv(args.data, labels_path=args.labels)
        report = run_report(dataset, args.output_dir, config)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Report aborted: %s", exc)
        return 1

    print(report.profile.flag_summary().to_string())
    print(report.reductions.separation_scores().round(3).to_string())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
