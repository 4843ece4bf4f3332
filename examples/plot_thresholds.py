#!/usr/bin/env python3
"""
plot_thresholds.py
==================

A narrated demo of nerrsviz that:
  - Loads station CSVs via BASE_DIR + FILE_PATTERN (or builds a synthetic
    hypoxia record when none are found)
  - Detects threshold exceedance events (e.g. DO < 2 mg/L for >= 2 hours)
  - Summarises events by month, season and year
  - Saves bar charts under FIG_DIR/<basename(BASE_DIR)>/threshold/

Run:
  pip install -e .
  python examples/plot_thresholds.py
"""
from __future__ import annotations
import os
import sys
import time

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg", force=True)  # must be before any pyplot import

from nerrsviz.io import as_observation_table, load_station_csv
from nerrsviz.seasons import SeasonConfig
from nerrsviz.thresholds import threshold_identification
from nerrsviz.summary import threshold_summary
from nerrsviz.plots.threshold import threshold_summary_plot
from nerrsviz.plot import (
    hr, info, bullet, kv,
    list_files, summarize_files,
    plot_call,
    print_observation_summary,
    print_event_summary,
)

# -----------------------------------------------------------------------------
# User inputs (EDIT FOR YOUR PROJECT)
# -----------------------------------------------------------------------------
BASE_DIR     = "./data/apa"
FILE_PATTERN = "apa*wq.csv"
FIG_DIR      = "./figures"

# Plots are saved to FIG_DIR/<basename(BASE_DIR)>/threshold/ by default.
# Override the subfolder with NERRSVIZ_PLOT_SUBDIR:
#os.environ["NERRSVIZ_PLOT_SUBDIR"] = "project"
# Empty string disables subfoldering:
#os.environ["NERRSVIZ_PLOT_SUBDIR"] = ""

# -----------------------------
# Threshold criteria
# -----------------------------
# parameter_threshold / threshold_type are applied sample by sample; time_threshold
# (hours) is the minimum event duration. Nutrient (grab sample) stations ignore it.
PARAM          = "do_mgl"
THRESHOLD      = 2.0
THRESHOLD_TYPE = "<"
MIN_HOURS      = 2

# Multi-parameter detection: one threshold and operator per parameter
MULTI = dict(
    param=["do_mgl", "temp"],
    parameter_threshold=[2.0, 30.0],
    threshold_type=["<", ">"],
    time_threshold=MIN_HOURS,
)

# -----------------------------
# Seasons
# -----------------------------
# Groups must cover months 1-12 exactly once; SEASON_START rotates the order
# used on the x axis and in the legend.
SEASONS = SeasonConfig.from_lists(
    [[12, 1, 2], [3, 4, 5], [6, 7, 8], [9, 10, 11]],
    ["Winter", "Spring", "Summer", "Fall"],
    season_start="Spring",
)


def synthetic_station(seed: int = 3) -> pd.DataFrame:
    """Three years of 15-min DO/temperature with summer hypoxia."""
    rng = np.random.default_rng(seed)
    t = pd.date_range("2015-01-01", "2017-12-31 23:45", freq="15min")
    doy = t.dayofyear.to_numpy()
    hour = t.hour.to_numpy()
    seasonal = 7.0 - 3.0 * np.sin((doy - 100) / 365.0 * 2 * np.pi)
    diel = 1.5 * np.cos((hour - 15) / 24.0 * 2 * np.pi)
    do = seasonal + diel + rng.normal(0, 0.6, t.size)
    temp = 22.0 + 8.0 * np.sin((doy - 100) / 365.0 * 2 * np.pi) + rng.normal(0, 0.5, t.size)
    return pd.DataFrame({"datetimestamp": t, "do_mgl": do, "temp": temp})


def main():
    start_ts = time.time()
    print(hr("="))
    print("nerrsviz: Threshold Runner")
    print(hr("="))
    kv("Python", sys.version.split()[0])
    kv("numpy", np.__version__)
    kv("pandas", pd.__version__)
    kv("matplotlib", matplotlib.__version__)

    info("Discovering files")
    kv("BASE_DIR", BASE_DIR)
    kv("FILE_PATTERN", FILE_PATTERN)
    files = list_files(BASE_DIR, FILE_PATTERN) if os.path.isdir(BASE_DIR) else []
    summarize_files(files)

    if files:
        obs = load_station_csv(files[0])
    else:
        bullet("Using a synthetic apacpwq record instead.")
        obs = as_observation_table(synthetic_station(), "apacpwq")

    info("Observation table")
    print_observation_summary(obs)

    info(f"Events: {PARAM} {THRESHOLD_TYPE} {THRESHOLD:g} for >= {MIN_HOURS} h")
    events = threshold_identification(obs, PARAM, THRESHOLD, THRESHOLD_TYPE, MIN_HOURS)
    print_event_summary(events)

    if all(p in obs.parameters for p in MULTI["param"]):
        info("Events: several parameters at once")
        print_event_summary(threshold_identification(obs, **MULTI))

    info("Seasonal grid")
    grid = threshold_summary(
        obs, PARAM, "season", THRESHOLD, THRESHOLD_TYPE, MIN_HOURS, seasons=SEASONS, verbose=False
    )
    bullet(grid.head(8).to_string(index=False), indent=4)

    info("Charts")
    for summary_type in ("month", "season", "year"):
        kv("summary_type", summary_type)
        plot_call(
            threshold_summary_plot,
            obs=obs,
            param=PARAM,
            summary_type=summary_type,
            parameter_threshold=THRESHOLD,
            threshold_type=THRESHOLD_TYPE,
            time_threshold=MIN_HOURS,
            seasons=SEASONS,
            plot_title=True,
            base_dir=BASE_DIR,
            figures_root=FIG_DIR,
            verbose=True,
        )

    print()
    kv("Elapsed", f"{time.time() - start_ts:.1f} s")
    print(hr("="))


if __name__ == "__main__":
    main()
