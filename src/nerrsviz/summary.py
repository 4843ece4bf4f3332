"""
Monthly / seasonal / annual summaries of threshold exceedance events.

The summary grid holds one row per (year, bucket) for every year between the
first and last observation, including buckets with no events (count 0), so an
absent bar always means "no exceedance" rather than "no data".
"""

from __future__ import annotations
from collections import Counter
from typing import List, Optional, Tuple
import warnings
import numpy as np
import pandas as pd

from .errors import GranularityMismatchWarning, InvalidParameter
from .io import ObservationTable
from .seasons import SeasonConfig, assign_season
from .thresholds import threshold_identification

SUMMARY_TYPES = ("month", "season", "year")
GRID_COLUMNS = ["year", "grp_join", "count", "x_lab"]


def _vprint(verbose: bool, *args, **kwargs):
    if verbose:
        print(*args, **kwargs)


def _check_summary_type(summary_type: str) -> str:
    if summary_type not in SUMMARY_TYPES:
        raise ValueError(f"summary_type must be one of {SUMMARY_TYPES}; got {summary_type!r}.")
    return summary_type


def bucket_labels(summary_type: str, seasons: Optional[SeasonConfig] = None) -> List[str]:
    """Bucket labels within a year, in plotting order ('year' has none)."""
    _check_summary_type(summary_type)
    if summary_type == "month":
        return SeasonConfig.monthly().ordered_names(abb=True)
    if summary_type == "season":
        return (seasons or SeasonConfig()).ordered_names(abb=True)
    return []


def aggregate_events(
    events: pd.DataFrame,
    summary_type: str,
    years: Tuple[int, int],
    *,
    seasons: Optional[SeasonConfig] = None,
) -> pd.DataFrame:
    """
    Count events per bucket over the full year span.

    Parameters
    ----------
    events : pd.DataFrame
        Event table from `threshold_identification` (needs 'starttime').
    summary_type : {'month', 'season', 'year'}
    years : (int, int)
        First and last observed year (inclusive).
    seasons : SeasonConfig, optional
        Season policy for summary_type='season'. Defaults to SeasonConfig().

    Returns
    -------
    pd.DataFrame
        Columns year, grp_join, count, x_lab. For 'year' there is one row per
        year and grp_join is the year; otherwise len(labels) rows per year with
        grp_join an ordered Categorical.
    """
    _check_summary_type(summary_type)
    first, last = int(years[0]), int(years[1])
    if last < first:
        raise ValueError(f"years must be (first, last) with first <= last; got {years}.")
    span = list(range(first, last + 1))

    start = pd.DatetimeIndex(pd.to_datetime(events["starttime"])) if len(events) else pd.DatetimeIndex([])
    ev_years = start.year.to_numpy()

    if summary_type == "year":
        counts = Counter(int(y) for y in ev_years)
        grid = pd.DataFrame(
            {"year": span, "grp_join": span, "count": [counts.get(y, 0) for y in span]}
        )
    else:
        labels = bucket_labels(summary_type, seasons)
        if summary_type == "month":
            ev_labels = assign_season(start, SeasonConfig.monthly(), abb=True)
        else:
            ev_labels = assign_season(start, seasons or SeasonConfig(), abb=True)
        counts = Counter(zip((int(y) for y in ev_years), (str(s) for s in ev_labels)))
        rows = [(y, lab, counts.get((y, lab), 0)) for y in span for lab in labels]
        grid = pd.DataFrame(rows, columns=["year", "grp_join", "count"])
        grid["grp_join"] = pd.Categorical(grid["grp_join"], categories=labels, ordered=True)

    grid["count"] = grid["count"].astype(int)
    grid["x_lab"] = np.arange(1, len(grid) + 1)
    return grid[GRID_COLUMNS]


def threshold_summary(
    obs: ObservationTable,
    param: str,
    summary_type: str,
    parameter_threshold: float,
    threshold_type: str,
    time_threshold: Optional[float] = None,
    *,
    seasons: Optional[SeasonConfig] = None,
    verbose: bool = False,
) -> pd.DataFrame:
    """
    Tabular monthly, seasonal or annual summary of threshold exceedances.

    Runs `threshold_identification` for a single parameter and aggregates the
    events with `aggregate_events` over the observed year span of `obs`.

    Raises
    ------
    ValueError
        If more than one parameter is given or summary_type is unknown.
    InvalidParameter
        If `param` is not a column of `obs`.

    Warns
    -----
    GranularityMismatchWarning
        For summary_type='month' on nutrient data (processing continues).
    DataQualityWarning
        Via `threshold_identification` when QA/QC columns remain.
    """
    _check_summary_type(summary_type)
    if not isinstance(param, str):
        raise ValueError("threshold_summary takes a single parameter name.")
    if param not in obs.parameters:
        raise InvalidParameter(f"Param argument must name input column; got '{param}'.")

    if obs.data_type == "nut" and summary_type == "month":
        warnings.warn(
            "Analyzing nutrient data on a monthly basis is not recommended. "
            "Use summary_type='season' with a SeasonConfig instead.",
            GranularityMismatchWarning,
            stacklevel=2,
        )

    events = threshold_identification(
        obs, param, parameter_threshold, threshold_type, time_threshold, verbose=verbose
    )
    years = obs.years
    grid = aggregate_events(events, summary_type, years, seasons=seasons)
    _vprint(
        verbose,
        f"[summary] {obs.station} {param}: {len(events)} event(s) in "
        f"{len(grid)} {summary_type} bucket(s) over {years[0]}-{years[1]}",
    )
    return grid


# ---- year axis labelling ----
def year_label_spacing(first_year: int, last_year: int) -> int:
    """Label every 4th year over spans > 20 years, every 2nd over > 10, else every year."""
    rng = int(last_year) - int(first_year)
    if rng > 20:
        return 4
    if rng > 10:
        return 2
    return 1


def year_tick_labels(first_year: int, last_year: int) -> List[str]:
    years = list(range(int(first_year), int(last_year) + 1))
    step = year_label_spacing(first_year, last_year)
    return [str(y) if i % step == 0 else "" for i, y in enumerate(years)]


def year_tick_positions(grid: pd.DataFrame, summary_type: str) -> np.ndarray:
    """x positions of the first bar of each year."""
    by = 1 if summary_type == "year" else max(1, len(grid["grp_join"].cat.categories))
    if grid.empty:
        return np.array([], dtype=int)
    return np.arange(1, int(grid["x_lab"].max()) + 1, by)
