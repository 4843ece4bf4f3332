# nerrsviz/plot.py

"""
Console + plotting helpers for demos/runners.

This module centralizes:
- pretty printing (hr, info, bullet, kv)
- plotting wrapper (passes verbose=True when supported)
- observation / event table summary printers
- grouped bar drawing used by the threshold summary chart

Keep these functions generic so any example script can reuse them.
"""

from __future__ import annotations
from typing import Any, List, Optional, Sequence
import os
import textwrap
import inspect
import contextlib
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .io import ObservationTable, discover_paths


# ---------------------------
# Pretty printing utilities
# ---------------------------
def hr(char: str = "=", width: int = 78) -> str:
    """Horizontal rule."""
    return char * width


def info(title: str) -> None:
    """Section header."""
    print()
    print(hr("="))
    print(title)
    print(hr("-"))


def bullet(msg: str, indent: int = 2) -> None:
    """Indented, wrapped bullet text."""
    pad = " " * indent
    for line in textwrap.dedent(str(msg)).rstrip().splitlines():
        print(pad + line)


def kv(label: str, value: Any) -> None:
    """Key: Value printing with basic alignment."""
    print(f"  - {label:<18} {value}")


# ---------------------------
# File discovery summary
# ---------------------------
def list_files(base_dir: str, pattern: str) -> List[str]:
    """Use package discovery to list files; warns if none are found."""
    return discover_paths(base_dir, pattern)


def summarize_files(files: List[str]) -> None:
    """Print a succinct summary (head/tail) of matched files."""
    if not files:
        bullet("No files matched. Double-check BASE_DIR and FILE_PATTERN.")
        return
    kv("Matched files", len(files))
    head = files[:3]
    tail = files[-3:] if len(files) > 3 else []
    for p in head:
        bullet(f"• {p}")
    if tail:
        bullet("…")
        for p in tail:
            bullet(f"• {p}")


# ---------------------------
# plotting wrapper
# ---------------------------
def plot_call(fn, *, verbose: bool = False, **kwargs):
    """
    Call a plotting function.

    Behavior:
      - `verbose` controls whether print() output from the function is shown.
        • verbose=False -> suppress stdout/stderr during the call
        • verbose=True  -> show stdout/stderr
      - If the target function has a `verbose` kwarg, we pass this same value.
        If it doesn't, we just silence/allow prints as requested.
    """
    has_verbose = "verbose" in inspect.signature(fn).parameters
    if has_verbose:
        kwargs["verbose"] = verbose
    else:
        kwargs.pop("verbose", None)

    if verbose:
        return fn(**kwargs)

    with contextlib.ExitStack() as stack:
        with open(os.devnull, "w") as devnull:
            stack.enter_context(contextlib.redirect_stdout(devnull))
            stack.enter_context(contextlib.redirect_stderr(devnull))
            return fn(**kwargs)


# ---------------------------
# Table summaries
# ---------------------------
def print_observation_summary(obs: ObservationTable) -> None:
    """Print station, category, parameters and time coverage."""
    kv("Station", obs.station)
    kv("Data type", obs.data_type)
    kv("Parameters", obs.parameters)
    kv("QAQC columns", obs.qaqc_cols)
    t = obs.times
    if t.size:
        kv("Time start", str(t[0]))
        kv("Time end", str(t[-1]))
        kv("Timesteps", t.size)
        step = obs.time_step()
        if step is not None:
            kv("Time step", str(step))
    else:
        kv("Time coverage", "no rows")


def print_event_summary(events: pd.DataFrame, max_rows: int = 5) -> None:
    """Event counts and duration range per parameter, plus the first few events."""
    kv("Events", len(events))
    if events.empty:
        return
    for param, sub in events.groupby("parameter", sort=True):
        d = sub["duration"]
        kv(f"  {param}", f"{len(sub)} event(s), duration {d.min():g}-{d.max():g} h")
    for row in events.head(max_rows).itertuples(index=False):
        bullet(
            f"• {row.parameter} {row.operator} {row.threshold:g}: "
            f"{row.starttime} -> {row.endtime} ({row.duration:g} h)"
        )
    if len(events) > max_rows:
        bullet("…")


# ---------------------------
# Grouped bars
# ---------------------------
def grouped_count_bars(
    ax,
    x: Sequence[float],
    counts: Sequence[float],
    labels: Sequence[Any],
    *,
    colors: Optional[List[str]] = None,
    bar_width: float = 0.9,
    show_legend: bool = True,
    legend_fontsize: int = 8,
    legend_ncol: Optional[int] = None,
) -> dict:
    """
    Draw one bar per (x, count), coloured by label, with one legend entry per label.

    x       : bar positions
    counts  : bar heights; NaN/inf drawn as 0
    labels  : group label per bar (e.g. season); colours repeat in first-seen order
    colors  : palette; defaults to the current matplotlib colour cycle

    Returns the {label: color} mapping used.
    """
    x = np.asarray(list(x), dtype=float)
    h = np.asarray(list(counts), dtype=float)
    h[~np.isfinite(h)] = 0.0
    labs = list(labels)
    if not (len(x) == len(h) == len(labs)):
        raise ValueError("x, counts, and labels must have the same length")

    unique_labels: list = []
    for lab in labs:
        if lab not in unique_labels:
            unique_labels.append(lab)

    if colors is None:
        try:
            cycle = plt.rcParams["axes.prop_cycle"].by_key().get("color", [])
        except Exception:
            cycle = []
        if not cycle:
            cycle = [f"C{i}" for i in range(10)]
    else:
        cycle = list(colors)

    label_to_color = {lab: cycle[i % len(cycle)] for i, lab in enumerate(unique_labels)}

    handles = {}
    for lab in unique_labels:
        sel = np.array([l == lab for l in labs], dtype=bool)
        rects = ax.bar(x[sel], h[sel], width=bar_width, color=label_to_color[lab], label=str(lab))
        handles[lab] = rects

    if show_legend and handles:
        ax.legend(
            [handles[lab] for lab in unique_labels],
            [str(lab) for lab in unique_labels],
            loc="lower center",
            bbox_to_anchor=(0.5, 1.0),
            ncol=legend_ncol or max(1, int(np.ceil(len(unique_labels) / 2))),
            fontsize=legend_fontsize,
            frameon=False,
        )
    return label_to_color


__all__ = [
    "hr",
    "info",
    "bullet",
    "kv",
    "list_files",
    "summarize_files",
    "plot_call",
    "print_observation_summary",
    "print_event_summary",
    "grouped_count_bars",
]
