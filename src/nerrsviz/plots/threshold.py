# plots/threshold.py
from __future__ import annotations
from typing import Optional, Tuple
import os
import matplotlib.pyplot as plt
import pandas as pd
from matplotlib import colormaps

from ..io import ObservationTable
from ..plot import grouped_count_bars
from ..seasons import SeasonConfig
from ..summary import (
    threshold_summary,
    year_tick_labels,
    year_tick_positions,
)
from ..utils import (
    out_dir,
    file_prefix,
    build_time_window_label,
    y_count_labeler,
    title_labeler,
)


def _vprint(verbose: bool, *args, **kwargs):
    if verbose:
        print(*args, **kwargs)


def _palette(pal: str, n: int) -> list:
    """n colours from a qualitative matplotlib colormap (e.g. 'Set3')."""
    cmap = colormaps[pal]
    size = getattr(cmap, "N", 256)
    if size <= 20:
        return [cmap(i % size) for i in range(n)]
    return [cmap(i / max(1, n - 1)) for i in range(n)]


def threshold_summary_plot(
    obs: ObservationTable,
    param: str,
    summary_type: str,
    parameter_threshold: float,
    threshold_type: str,
    time_threshold: Optional[float] = None,
    *,
    seasons: Optional[SeasonConfig] = None,
    converted: bool = False,
    pal: str = "Set3",
    plot_title: bool = False,
    label_y_axis: bool = True,
    sampling_stations: Optional[pd.DataFrame] = None,
    figsize: tuple = (10, 4),
    dpi: int = 150,
    base_dir: Optional[str] = None,
    figures_root: Optional[str] = None,
    verbose: bool = True,
) -> Tuple[plt.Figure, plt.Axes, pd.DataFrame]:
    """
    Bar chart of threshold exceedance counts per month, season or year.

    Workflow
    --------
    1. `threshold_summary(...)` builds the complete (year × bucket) grid,
       zero-filled for buckets without events.
    2. Bars are drawn dodged at `x_lab` and coloured by bucket (`pal`), or
       plain grey for summary_type='year'.
    3. Ticks sit on the first bar of each year; year labels thin out as the
       span grows (every 2nd year over 10 years, every 4th over 20).
    4. If `base_dir` and `figures_root` are both given, a PNG is written to
       `out_dir(base_dir, figures_root)`.

    Parameters
    ----------
    obs : ObservationTable
        Station data.
    param : str
        Single parameter to evaluate.
    summary_type : {'month', 'season', 'year'}
        Aggregation granularity.
    parameter_threshold, threshold_type, time_threshold
        Passed to `threshold_identification`. `time_threshold` is in hours.
    seasons : SeasonConfig, optional
        Season policy for summary_type='season'.
    converted : bool, default False
        Use converted units in the y-axis label.
    pal : str, default 'Set3'
        Matplotlib colormap for month/season bars.
    plot_title : bool, default False
        Title the chart with the station name.
    label_y_axis : bool, default True
        Include the count label on the y axis.
    sampling_stations : pd.DataFrame, optional
        Station metadata used to resolve the title.

    Returns
    -------
    (Figure, Axes, DataFrame)
        The figure, its axes and the summary grid that was drawn.
    """
    grid = threshold_summary(
        obs,
        param,
        summary_type,
        parameter_threshold,
        threshold_type,
        time_threshold,
        seasons=seasons,
        verbose=verbose,
    )
    first, last = obs.years

    fig, ax = plt.subplots(figsize=figsize)
    if summary_type == "year":
        ax.bar(grid["x_lab"], grid["count"], width=0.9, color="0.3")
    else:
        labels = list(grid["grp_join"].cat.categories)
        grouped_count_bars(
            ax,
            grid["x_lab"],
            grid["count"],
            grid["grp_join"].astype(str),
            colors=_palette(pal, len(labels)),
            legend_ncol=max(1, (len(labels) + 1) // 2),
        )

    ax.set_xticks(year_tick_positions(grid, summary_type))
    ax.set_xticklabels(year_tick_labels(first, last))
    ax.set_xlabel("")
    if label_y_axis:
        ax.set_ylabel(
            y_count_labeler(
                param,
                parameter_threshold=parameter_threshold,
                threshold_type=threshold_type,
                time_threshold=time_threshold,
                converted=converted,
            )
        )
    ax.yaxis.grid(True, linestyle="--", alpha=0.6)
    ax.set_axisbelow(True)
    ax.set_ylim(bottom=0)

    if plot_title:
        ax.set_title(title_labeler(obs.station, sampling_stations), pad=28 if summary_type != "year" else 6)

    if base_dir is not None and figures_root is not None:
        outdir = out_dir(base_dir, figures_root)
        window = build_time_window_label(None, (first, last), None, None)
        fname = (
            f"{file_prefix(base_dir)}__{obs.station}__{param}__{summary_type}__"
            f"{window}__ThresholdSummary.png"
        )
        path = os.path.join(outdir, fname)
        fig.savefig(path, dpi=dpi, bbox_inches="tight")
        _vprint(verbose, f"[threshold] Saved: {path}")

    return fig, ax, grid
