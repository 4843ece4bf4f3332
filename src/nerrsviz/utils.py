"""
Utilities.
"""

from __future__ import annotations
from pathlib import Path
import inspect
from typing import Iterable, Optional, Sequence, Union
import os
import numpy as np
import pandas as pd


# Display names and units (as distributed by the CDMO) for common SWMP parameters
PARAM_LABELS = {
    "temp": ("Water Temperature", "°C"),
    "spcond": ("Specific Conductivity", "mS/cm"),
    "sal": ("Salinity", "psu"),
    "do_pct": ("Dissolved Oxygen Saturation", "%"),
    "do_mgl": ("Dissolved Oxygen", "mg/L"),
    "depth": ("Depth", "m"),
    "level": ("Level", "m"),
    "ph": ("pH", ""),
    "turb": ("Turbidity", "NTU"),
    "chlfluor": ("Chlorophyll Fluorescence", "µg/L"),
    "atemp": ("Air Temperature", "°C"),
    "rh": ("Relative Humidity", "%"),
    "bp": ("Barometric Pressure", "mb"),
    "wspd": ("Wind Speed", "m/s"),
    "maxwspd": ("Max Wind Speed", "m/s"),
    "wdir": ("Wind Direction", "degrees"),
    "totpar": ("Total PAR", "mmol/m²"),
    "totprcp": ("Total Precipitation", "mm"),
    "po4f": ("Orthophosphate", "mg/L"),
    "nh4f": ("Ammonium", "mg/L"),
    "no2f": ("Nitrite", "mg/L"),
    "no3f": ("Nitrate", "mg/L"),
    "no23f": ("Nitrite + Nitrate", "mg/L"),
    "din": ("Dissolved Inorganic Nitrogen", "mg/L"),
    "dip": ("Dissolved Inorganic Phosphorus", "mg/L"),
    "chla_n": ("Chlorophyll-a", "µg/L"),
}

# Units after the usual conversions (e.g. nutrients mg/L -> uM)
CONVERTED_UNITS = {
    "temp": "°F",
    "atemp": "°F",
    "po4f": "µM",
    "nh4f": "µM",
    "no2f": "µM",
    "no3f": "µM",
    "no23f": "µM",
    "din": "µM",
    "dip": "µM",
}


def file_prefix(base_dir: str) -> str:
    return os.path.basename(os.path.normpath(base_dir))


def _caller_plot_module_stem(default: str | None = None) -> str | None:
    """
    Walk the call stack and return the module filename stem if the caller is inside
    nerrsviz.plots.* (e.g., 'threshold', 'maps'). Otherwise return default.
    """
    for frame_info in inspect.stack():
        mod = inspect.getmodule(frame_info.frame)
        if not mod:
            continue
        name = getattr(mod, "__name__", "")
        file = getattr(mod, "__file__", None)
        if name.startswith("nerrsviz.plots.") and file:
            return Path(file).stem
    return default


def out_dir(base_dir: str, figures_root: str) -> str:
    """
    Return an output directory and ensure it exists.

    Base path:
        FIG_DIR/<basename(BASE_DIR)>/

    If called from a plotting module under nerrsviz.plots.*, a subfolder named
    after that module file is appended (e.g., 'threshold', 'maps'):
        FIG_DIR/<basename(BASE_DIR)>/<module-stem>/

    Override the subfolder with the environment variable NERRSVIZ_PLOT_SUBDIR.
      - non-empty -> use that subfolder name
      - empty     -> disable subfoldering (use base)
    """
    folder = file_prefix(base_dir)
    base = os.path.join(figures_root, folder)
    os.makedirs(base, exist_ok=True)

    env = os.environ.get("NERRSVIZ_PLOT_SUBDIR", None)
    if env is not None:
        sub = env.strip()
        if sub:
            d = os.path.join(base, sub)
            os.makedirs(d, exist_ok=True)
            return d
        return base

    sub = _caller_plot_module_stem(default=None)
    if sub:
        d = os.path.join(base, sub)
        os.makedirs(d, exist_ok=True)
        return d

    return base


# ---- time label builders for titles / filenames ----
def build_time_window_label(
    months: Optional[Iterable[int]],
    years: Optional[Iterable[int]],
    start_date: Optional[str],
    end_date: Optional[str],
) -> str:
    """e.g., 'Jan-Mar__2020-2021' or '2022-01-01 to 2022-02-01' or 'AllTime'."""
    names = ["Jan","Feb","Mar","Apr","May","Jun","Jul","Aug","Sep","Oct","Nov","Dec"]
    parts: list[str] = []
    if months:
        m = sorted({int(x) for x in months})
        if len(m) > 1 and m == list(range(m[0], m[-1] + 1)):
            parts.append(f"{names[m[0]-1]}-{names[m[-1]-1]}")
        else:
            parts.append("-".join(names[i-1] for i in m))
    if years:
        y = sorted({int(x) for x in years})
        parts.append(f"{y[0]}-{y[-1]}" if len(y) > 1 else f"{y[0]}")
    if start_date or end_date:
        parts.append(f"{start_date or '...'} to {end_date or '...'}")
    return "__".join(parts) if parts else "AllTime"


# ---- date axis breaks ----
def _year_range(rng: Sequence[Union[int, str, pd.Timestamp]]) -> tuple[int, list]:
    """Return (number of unique values, unique values) with dates reduced to years."""
    vals = []
    for v in rng:
        if isinstance(v, (int, np.integer)):
            vals.append(int(v))
        else:
            vals.append(pd.Timestamp(v).year)
    uniq = sorted(set(vals))
    return len(uniq), uniq


def set_date_breaks(rng: Sequence) -> str:
    """
    Major date break spacing for a range of years (or dates).

    Two distinct years: '4 years' over > 20, '2 years' over > 10, '1 year'
    over > 3, else '4 months'. A single value gives '1 month'.
    """
    n, uniq = _year_range(rng)
    if n == 2:
        span = uniq[1] - uniq[0]
        if span > 20:
            return "4 years"
        if span > 10:
            return "2 years"
        if span > 3:
            return "1 year"
        return "4 months"
    return "2 months" if n > 1 else "1 month"


def set_date_breaks_minor(rng: Sequence) -> str:
    n, _ = _year_range(rng)
    return "1 year" if n == 2 else "1 month"


def set_date_break_labs(rng: Sequence) -> str:
    """strftime format for major date labels."""
    n, uniq = _year_range(rng)
    if n == 2:
        return "%Y" if uniq[1] - uniq[0] > 3 else "%b-%y"
    return "%b-%y" if n > 1 else "%b"


def date_locator(spec: str):
    """Turn a break spec such as '2 years' or '4 months' into a matplotlib locator."""
    import matplotlib.dates as mdates

    num, unit = spec.split()
    num = int(num)
    if unit.startswith("year"):
        return mdates.YearLocator(base=num)
    if unit.startswith("month"):
        return mdates.MonthLocator(interval=num)
    raise ValueError(f"Unsupported date break spec: {spec!r}")


# ---- axis / title labels ----
def y_labeler(param: str, converted: bool = False) -> str:
    """Axis label with units, e.g. 'Dissolved Oxygen (mg/L)'."""
    name, unit = PARAM_LABELS.get(param, (param, ""))
    if converted:
        unit = CONVERTED_UNITS.get(param, unit)
    return f"{name} ({unit})" if unit else name


def y_count_labeler(
    param: str,
    parameter_threshold: Optional[float] = None,
    threshold_type: Optional[str] = None,
    time_threshold: Optional[float] = None,
    converted: bool = False,
) -> str:
    """Label for event-count axes, e.g. 'Count (Dissolved Oxygen < 2 mg/L, >= 2 hrs)'."""
    name, unit = PARAM_LABELS.get(param, (param, ""))
    if converted:
        unit = CONVERTED_UNITS.get(param, unit)
    parts = [name]
    if parameter_threshold is not None and threshold_type is not None:
        parts = [f"{name} {threshold_type} {parameter_threshold:g}" + (f" {unit}" if unit else "")]
    if time_threshold is not None:
        parts.append(f">= {time_threshold:g} hrs")
    return f"Count ({', '.join(parts)})"


def title_labeler(station: str, sampling_stations: Optional[pd.DataFrame] = None) -> str:
    """Station name from the sampling-stations table, else the upper-cased code."""
    if sampling_stations is not None:
        from .stations import station_name

        name = station_name(sampling_stations, station)
        if name:
            return name
    return station.upper()
