"""
Threshold exceedance events.

A ThresholdRule flags every observation whose parameter value violates a
threshold. For continuous sonde data (wq, met) contiguous flagged samples are
merged into one event and events shorter than a minimum duration are dropped.
For nutrient grab samples each flagged sample is its own event and the
duration filter does not apply.

Event table columns
-------------------
parameter, threshold, operator, starttime, endtime, duration

``starttime`` is the first flagged timestamp of a run and ``endtime`` the last
flagged timestamp, so ``duration`` (hours) of a single flagged sample is 0.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union
import operator
import warnings
import numpy as np
import pandas as pd

from .errors import DataQualityWarning, InvalidArity, InvalidParameter
from .io import ObservationTable

EVENT_COLUMNS = ["parameter", "threshold", "operator", "starttime", "endtime", "duration"]


def _vprint(verbose: bool, *args, **kwargs):
    if verbose:
        print(*args, **kwargs)


class Comparison(Enum):
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="
    EQ = "=="
    NE = "!="

    @classmethod
    def parse(cls, code: Union[str, "Comparison"]) -> "Comparison":
        if isinstance(code, Comparison):
            return code
        try:
            return cls(str(code).strip())
        except ValueError:
            valid = ", ".join(repr(c.value) for c in cls)
            raise ValueError(f"Unknown threshold_type {code!r}; use one of {valid}.") from None

    def evaluate(self, values: np.ndarray, threshold: float) -> np.ndarray:
        """Elementwise comparison; missing (NaN) values never flag."""
        v = np.asarray(values, dtype=float)
        valid = ~np.isnan(v)
        out = np.zeros(v.shape, dtype=bool)
        out[valid] = _OPS[self](v[valid], float(threshold))
        return out


_OPS = {
    Comparison.LT: operator.lt,
    Comparison.GT: operator.gt,
    Comparison.LE: operator.le,
    Comparison.GE: operator.ge,
    Comparison.EQ: operator.eq,
    Comparison.NE: operator.ne,
}


@dataclass(frozen=True)
class ThresholdRule:
    parameter: str
    threshold: float
    comparison: Comparison

    def flags(self, obs: ObservationTable) -> np.ndarray:
        return self.comparison.evaluate(obs.column(self.parameter), self.threshold)

    def describe(self) -> str:
        return f"{self.parameter} {self.comparison.value} {self.threshold:g}"


def _as_list(x) -> list:
    if x is None:
        return []
    if isinstance(x, (str, Comparison)) or np.isscalar(x):
        return [x]
    return list(x)


def build_rules(
    param: Union[str, Sequence[str]],
    parameter_threshold: Union[float, Sequence[float]],
    threshold_type: Union[str, Sequence[str]],
) -> List[ThresholdRule]:
    """Zip parameter, threshold and operator vectors into rules."""
    params = _as_list(param)
    thresholds = _as_list(parameter_threshold)
    ops = _as_list(threshold_type)
    if not params:
        raise InvalidArity("At least one parameter is required.")
    if len(thresholds) != len(params):
        raise InvalidArity(
            f"parameter_threshold has {len(thresholds)} value(s) for {len(params)} parameter(s)."
        )
    if len(ops) != len(params):
        raise InvalidArity(
            f"threshold_type has {len(ops)} value(s) for {len(params)} parameter(s)."
        )
    return [
        ThresholdRule(str(p), float(t), Comparison.parse(o))
        for p, t, o in zip(params, thresholds, ops)
    ]


def find_runs(flags: np.ndarray) -> List[Tuple[int, int]]:
    """
    Maximal runs of True as inclusive (start_idx, end_idx) pairs.

    >>> find_runs(np.array([False, True, True, False, True]))
    [(1, 2), (4, 4)]
    """
    f = np.asarray(flags, dtype=bool)
    if f.size == 0:
        return []
    # pad with False so runs touching either end are detected
    padded = np.concatenate(([False], f, [False]))
    diff = np.diff(padded.astype(np.int8))
    starts = np.where(diff == 1)[0]
    ends = np.where(diff == -1)[0] - 1
    return [(int(s), int(e)) for s, e in zip(starts, ends)]


def _events_for_rule(
    rule: ThresholdRule,
    obs: ObservationTable,
    time_threshold: Optional[float],
    verbose: bool,
) -> pd.DataFrame:
    flags = rule.flags(obs)
    times = obs.times

    if obs.is_continuous:
        runs = find_runs(flags)
    else:
        # grab samples: every exceedance is reportable on its own
        runs = [(int(i), int(i)) for i in np.flatnonzero(flags)]

    starts = times[[s for s, _ in runs]] if runs else pd.DatetimeIndex([])
    ends = times[[e for _, e in runs]] if runs else pd.DatetimeIndex([])
    hours = (ends - starts) / pd.Timedelta(hours=1)

    ev = pd.DataFrame(
        {
            "parameter": rule.parameter,
            "threshold": rule.threshold,
            "operator": rule.comparison.value,
            "starttime": starts,
            "endtime": ends,
            "duration": np.asarray(hours, dtype=float),
        },
        columns=EVENT_COLUMNS,
    )

    if obs.is_continuous and time_threshold is not None:
        n0 = len(ev)
        ev = ev[ev["duration"] >= float(time_threshold)]
        _vprint(
            verbose,
            f"[thresholds] {rule.describe()}: {n0} run(s), {len(ev)} lasting >= {time_threshold:g} h",
        )
    else:
        _vprint(verbose, f"[thresholds] {rule.describe()}: {len(ev)} event(s)")
    return ev


def threshold_identification(
    obs: ObservationTable,
    param: Union[str, Sequence[str]],
    parameter_threshold: Union[float, Sequence[float]],
    threshold_type: Union[str, Sequence[str]],
    time_threshold: Optional[float] = None,
    *,
    verbose: bool = False,
) -> pd.DataFrame:
    """
    Identify threshold exceedance events for one or more parameters.

    Parameters
    ----------
    obs : ObservationTable
        Evenly stepped station data (QA/QC and resampling done upstream).
    param : str or sequence of str
        Parameter(s) to evaluate.
    parameter_threshold : float or sequence of float
        One threshold per parameter.
    threshold_type : str or sequence of str
        One operator per parameter: '<', '>', '<=', '>=', '==', '!='.
    time_threshold : float, optional
        Minimum event duration in hours. Only applied to wq/met data;
        nutrient events are never filtered.
    verbose : bool, default False
        Print per-rule event counts.

    Returns
    -------
    pd.DataFrame
        Event table (see module docstring), sorted by parameter then start.

    Raises
    ------
    InvalidArity
        If the threshold/operator vectors do not match the parameter vector.
    InvalidParameter
        If a parameter is not a column of `obs`.

    Warns
    -----
    DataQualityWarning
        If QA/QC flag columns are still present.
    """
    rules = build_rules(param, parameter_threshold, threshold_type)

    missing = [r.parameter for r in rules if r.parameter not in obs.parameters]
    if missing:
        raise InvalidParameter(f"Param argument must name input column; not found: {missing}")

    if obs.qaqc_cols:
        warnings.warn(
            "QAQC columns present. QAQC not performed before analysis.",
            DataQualityWarning,
            stacklevel=2,
        )

    if not obs.is_continuous and time_threshold is not None:
        _vprint(verbose, f"[thresholds] '{obs.data_type}' data: time_threshold ignored.")

    frames = [_events_for_rule(r, obs, time_threshold, verbose) for r in rules]
    frames = [f for f in frames if not f.empty]
    if not frames:
        return _empty_events(obs.times.dtype)

    events = pd.concat(frames, ignore_index=True)
    return events.sort_values(["parameter", "starttime"], kind="mergesort").reset_index(drop=True)


def _empty_events(time_dtype="datetime64[ns]") -> pd.DataFrame:
    return pd.DataFrame(
        {
            "parameter": pd.Series(dtype=object),
            "threshold": pd.Series(dtype=float),
            "operator": pd.Series(dtype=object),
            "starttime": pd.Series(dtype=time_dtype),
            "endtime": pd.Series(dtype=time_dtype),
            "duration": pd.Series(dtype=float),
        }
    )
