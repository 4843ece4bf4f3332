"""I/O helpers.

Implement:
 - ObservationTable                     # station data + metadata, validated once
 - as_observation_table(df, station)    -> ObservationTable
 - load_station_csv(path, station=None) -> ObservationTable
 - discover_paths(base_dir, file_pattern) -> list[str]
 - filter_time(obs, months=None, years=None, start_date=None, end_date=None)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple
import warnings
import numpy as np
import pandas as pd

from .errors import InvalidParameter


TIME_COL = "datetimestamp"
FLAG_PREFIX = "f_"
DATA_TYPES = ("wq", "met", "nut")
CONTINUOUS_TYPES = ("wq", "met")


# --------------------------
# Observation table
# --------------------------
@dataclass
class ObservationTable:
    """
    A station time series with the metadata the analysis functions rely on.

    Parameters
    ----------
    data : pd.DataFrame
        One row per timestamp. Must contain a datetime64 ``datetimestamp``
        column sorted ascending, one numeric column per parameter and,
        optionally, QA flag columns named ``f_<param>``.
    station : str
        SWMP station code, e.g. ``'apacpwq'``. Characters 6+ give the data
        category: ``'wq'``, ``'met'`` or ``'nut'``.
    parameters : list of str
        Monitored parameter columns.
    qaqc_cols : bool
        True when QA flag columns have not been resolved yet.
    """

    data: pd.DataFrame
    station: str
    parameters: List[str] = field(default_factory=list)
    qaqc_cols: bool = False

    def __post_init__(self) -> None:
        if TIME_COL not in self.data.columns:
            raise ValueError(f"Observation table needs a '{TIME_COL}' column.")
        if self.data_type not in DATA_TYPES:
            raise ValueError(
                f"Station '{self.station}' does not end in one of {DATA_TYPES}."
            )
        missing = [p for p in self.parameters if p not in self.data.columns]
        if missing:
            raise InvalidParameter(f"Parameters not present in data: {missing}")

    @property
    def data_type(self) -> str:
        return self.station[5:].lower()

    @property
    def is_continuous(self) -> bool:
        """wq and met sondes log at a fixed short step; nut are grab samples."""
        return self.data_type in CONTINUOUS_TYPES

    @property
    def times(self) -> pd.DatetimeIndex:
        return pd.DatetimeIndex(self.data[TIME_COL])

    @property
    def years(self) -> Tuple[int, int]:
        t = self.times
        if t.size == 0:
            raise ValueError("Observation table is empty.")
        return int(t.year.min()), int(t.year.max())

    def column(self, param: str) -> np.ndarray:
        """Float values of a monitored parameter; NaN where missing."""
        if param not in self.parameters:
            raise InvalidParameter(f"Param '{param}' must name an input column.")
        return pd.to_numeric(self.data[param], errors="coerce").to_numpy(dtype=float)

    def time_step(self) -> Optional[pd.Timedelta]:
        t = self.times
        if t.size < 2:
            return None
        return t.to_series().diff().median()


def _infer_parameters(df: pd.DataFrame, time_col: str) -> List[str]:
    out = []
    for c in df.columns:
        if not isinstance(c, str) or c == time_col or c.startswith(FLAG_PREFIX):
            continue
        if pd.api.types.is_numeric_dtype(df[c]):
            out.append(c)
    return out


def as_observation_table(
    df: pd.DataFrame,
    station: str,
    *,
    time_col: str = TIME_COL,
    parameters: Optional[Sequence[str]] = None,
    qaqc_cols: Optional[bool] = None,
) -> ObservationTable:
    """Build an ObservationTable from a plain DataFrame.

    The time column is parsed, renamed to ``datetimestamp``, sorted and
    de-duplicated. Parameters default to every numeric, non-flag column;
    ``qaqc_cols`` defaults to whether any ``f_`` column is present.
    """
    if time_col not in df.columns:
        raise ValueError(f"Time column '{time_col}' not found; columns={list(df.columns)}")

    data = df.copy()
    if time_col != TIME_COL:
        data = data.rename(columns={time_col: TIME_COL})
    data[TIME_COL] = pd.to_datetime(data[TIME_COL])
    data = (
        data.dropna(subset=[TIME_COL])
        .sort_values(TIME_COL, kind="mergesort")
        .drop_duplicates(subset=[TIME_COL], keep="first")
        .reset_index(drop=True)
    )

    params = list(parameters) if parameters is not None else _infer_parameters(data, TIME_COL)
    if qaqc_cols is None:
        qaqc_cols = any(str(c).startswith(FLAG_PREFIX) for c in data.columns)

    data.attrs.update({"station": station, "parameters": params, "qaqc_cols": bool(qaqc_cols)})
    return ObservationTable(data=data, station=station, parameters=params, qaqc_cols=bool(qaqc_cols))


def load_station_csv(
    path: str,
    station: Optional[str] = None,
    *,
    time_col: str = TIME_COL,
    parameters: Optional[Sequence[str]] = None,
    qaqc_cols: Optional[bool] = None,
) -> ObservationTable:
    """Read a station CSV. The station code defaults to the file stem."""
    p = Path(path)
    df = pd.read_csv(p)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if station is None:
        station = p.stem.lower()
    return as_observation_table(
        df, station, time_col=time_col.lower(), parameters=parameters, qaqc_cols=qaqc_cols
    )


# --------------------------
# Path discovery
# --------------------------
def discover_paths(base_dir: str, file_pattern: str) -> List[str]:
    files = sorted(str(p) for p in Path(base_dir).glob(file_pattern))
    if not files:
        warnings.warn(f"No files matched {file_pattern!r} in {base_dir!r}")
    return files


# --------------------------
# Time filtering
# --------------------------
def filter_time(
    obs: ObservationTable,
    months: Optional[Iterable[int]] = None,
    years: Optional[Iterable[int]] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> ObservationTable:
    """Return a time-filtered copy of `obs` using any combination of filters."""
    tindex = obs.times
    mask = np.ones(tindex.shape, dtype=bool)

    if months is not None:
        months = np.asarray(list(months), dtype=int)
        mask &= np.isin(tindex.month, months)

    if years is not None:
        years = np.asarray(list(years), dtype=int)
        mask &= np.isin(tindex.year, years)

    if start_date is not None:
        mask &= tindex >= pd.to_datetime(start_date)

    if end_date is not None:
        mask &= tindex <= pd.to_datetime(end_date)

    data = obs.data.loc[mask].reset_index(drop=True)
    data.attrs = dict(obs.data.attrs)
    return ObservationTable(
        data=data, station=obs.station, parameters=list(obs.parameters), qaqc_cols=obs.qaqc_cols
    )
