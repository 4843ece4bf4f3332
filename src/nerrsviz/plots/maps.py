# nerrsviz/plots/maps.py
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple
import os
import warnings
import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import box

import matplotlib.pyplot as plt
from matplotlib.lines import Line2D

from ..regions import (
    MAP_PANELS,
    MapPanel,
    inset_layout,
    inset_axes_rect,
    loc_subsample,
    label_positions,
    normalize_bbox,
    points_frame,
)
from ..stations import normalize_station_table
from ..utils import out_dir, file_prefix

# -----------------------------
# Seasonal Kendall result styling
# -----------------------------
TREND_CODES = ("inc", "dec", "insig", "insuff")
TREND_LABELS = {
    "inc": "Increasing trend",
    "dec": "Decreasing trend",
    "insig": "No significant trend",
    "insuff": "Insufficient data",
}
TREND_MARKERS = {"inc": "^", "dec": "v", "insig": "o", "insuff": "X"}
DEFAULT_SK_FILL_COLORS = ("#444E65", "#A3DFFF", "#247BA0", "#0a0a0a")

STATE_FILL = "#f8f8f8"
STATE_HIGHLIGHT = "#cccccc"
STATE_LINE = "#999999"
SHP_FILL = "yellow"
SHP_EDGE = "#B3B300"


def _vprint(verbose: bool, *args, **kwargs):
    if verbose:
        print(*args, **kwargs)


def _check_trend_codes(results: Sequence[str]) -> List[str]:
    out = [str(r) for r in results]
    bad = sorted({r for r in out if r not in TREND_CODES})
    if bad:
        raise ValueError(f"Unknown seasonal kendall result(s) {bad}; use {list(TREND_CODES)}.")
    return out


def _trend_colors(sk_fill_colors: Sequence[str]) -> Dict[str, str]:
    if len(sk_fill_colors) != len(TREND_CODES):
        raise ValueError(
            f"sk_fill_colors needs {len(TREND_CODES)} colours (inc, dec, insig, insuff)."
        )
    return dict(zip(TREND_CODES, sk_fill_colors))


def _require_geo(shp, name: str = "shp") -> gpd.GeoDataFrame:
    if isinstance(shp, gpd.GeoSeries):
        shp = gpd.GeoDataFrame(geometry=shp)
    if not isinstance(shp, gpd.GeoDataFrame):
        raise TypeError(f"{name} must be a geopandas GeoDataFrame or GeoSeries.")
    return shp


def _to_lonlat(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    if gdf.crs is None:
        return gdf.set_crs(4326)
    if gdf.crs.to_epsg() != 4326:
        return gdf.to_crs(4326)
    return gdf


def _draw_trend_points(ax, pts: gpd.GeoDataFrame, colors: Dict[str, str], size: float) -> None:
    for code in TREND_CODES:
        sub = pts[pts["sk_result"] == code]
        if sub.empty:
            continue
        ax.scatter(
            sub["X"], sub["Y"],
            marker=TREND_MARKERS[code], s=size, c=colors[code],
            edgecolors="black", linewidths=0.5, zorder=4,
        )


def _trend_legend(ax, colors: Dict[str, str], codes: Sequence[str], **kwargs) -> None:
    handles = [
        Line2D([], [], linestyle="", marker=TREND_MARKERS[c], markersize=8,
               markerfacecolor=colors[c], markeredgecolor="black", label=TREND_LABELS[c])
        for c in TREND_CODES if c in set(codes)
    ]
    if handles:
        ax.legend(handles=handles, frameon=False, fontsize=8, **kwargs)


def _bare_axes(ax) -> None:
    ax.set_xticks([]); ax.set_yticks([])
    for s in ax.spines.values():
        s.set_visible(False)


def _draw_panel(
    ax,
    states: gpd.GeoDataFrame,
    pts: gpd.GeoDataFrame,
    panel: MapPanel,
    colors: Dict[str, str],
    point_size: float,
) -> None:
    st = states.to_crs(panel.crs)
    # shapes far outside a UTM zone project to inf
    st = st[np.isfinite(st.bounds.to_numpy()).all(axis=1)]
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        st = st.clip(box(*panel.bbox))
    st = st[~st.geometry.is_empty]
    if not st.empty:
        st.plot(
            ax=ax,
            color=np.where(st["_flag"], STATE_HIGHLIGHT, STATE_FILL).tolist(),
            edgecolor=STATE_LINE,
            linewidth=0.15,
        )
    if not pts.empty:
        p = loc_subsample(pts, panel.bbox, panel.crs)
        if not p.empty:
            _draw_trend_points(ax, p, colors, point_size)
    ax.set_xlim(panel.bbox[0], panel.bbox[2])
    ax.set_ylim(panel.bbox[1], panel.bbox[3])
    ax.set_aspect("equal")
    _bare_axes(ax)


def _save(fig, base_dir, figures_root, fname, dpi, verbose) -> None:
    if base_dir is None or figures_root is None:
        return
    path = os.path.join(out_dir(base_dir, figures_root), f"{file_prefix(base_dir)}__{fname}")
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    _vprint(verbose, f"[maps] Saved {path}")


# ------------------------------------------------------------
# Mapping Functions
# ------------------------------------------------------------

def national_sk_map(
    states: gpd.GeoDataFrame,
    reserves: gpd.GeoDataFrame,
    *,
    incl: Sequence[str] = ("contig", "AK", "HI", "PR"),
    agg_county: bool = True,
    highlight_states: Optional[Sequence[str]] = None,
    sk_reserves: Optional[Sequence[str]] = None,
    sk_results: Optional[Sequence[str]] = None,
    sk_fill_colors: Sequence[str] = DEFAULT_SK_FILL_COLORS,
    reserve_col: str = "nerr_site_id",
    fips_col: str = "fips",
    point_size: float = 60.0,
    figsize: Tuple[float, float] = (10, 6.5),
    dpi: int = 150,
    base_dir: Optional[str] = None,
    figures_root: Optional[str] = None,
    verbose: bool = False,
) -> Tuple[plt.Figure, plt.Axes]:
    """
    National map of reserves annotated with seasonal Kendall trend results.

    The contiguous US is drawn in UTM 14N; Alaska, Hawaii and Puerto Rico are
    drawn in their own UTM zones as insets along the bottom of the main map,
    sized with `inset_layout` (AK 0.38, HI 0.225, PR 0.25 of the main height).

    Parameters
    ----------
    states : GeoDataFrame
        State (or county) polygons with a CRS and a `fips_col` column.
    reserves : GeoDataFrame
        Reserve locations (points) with a CRS and a `reserve_col` column.
    incl : sequence of {'contig', 'AK', 'HI', 'PR'}
        Panels to draw; the contiguous map is always the base.
    agg_county : bool, default True
        Merge polygons sharing a `fips_col` value (e.g. counties) into one
        outline per code before drawing.
    highlight_states : sequence of str, optional
        FIPS codes of states to shade.
    sk_reserves, sk_results : sequences of str
        Reserve ids and their result codes ('inc', 'dec', 'insig', 'insuff'),
        one result per reserve.
    sk_fill_colors : 4 colours for inc, dec, insig, insuff.

    Returns
    -------
    (Figure, Axes)
        The figure and its main axes (insets are children of it).

    Raises
    ------
    ValueError
        If `sk_reserves` and `sk_results` differ in length, or a result code,
        inset name or colour count is invalid.
    """
    sk_reserves = list(sk_reserves or [])
    sk_results = list(sk_results or [])
    if len(sk_reserves) != len(sk_results):
        raise ValueError("A seasonal kendall result is required for each reserve in sk_reserves.")
    sk_results = _check_trend_codes(sk_results)
    colors = _trend_colors(sk_fill_colors)
    states = _require_geo(states, "states")
    reserves = _require_geo(reserves, "reserves")

    bad = [i for i in incl if i not in MAP_PANELS]
    if bad:
        raise ValueError(f"Unknown map panel(s) {bad}; use {list(MAP_PANELS)}.")

    if agg_county and fips_col in states.columns:
        n0 = len(states)
        states = states.dissolve(by=fips_col, as_index=False)
        _vprint(verbose, f"[maps] Merged {n0} polygon(s) into {len(states)} by {fips_col!r}")
    states = states.copy()
    if highlight_states and fips_col in states.columns:
        states["_flag"] = states[fips_col].astype(str).isin([str(s) for s in highlight_states])
    else:
        states["_flag"] = False

    results = pd.DataFrame({reserve_col: sk_reserves, "sk_result": sk_results})
    pts = reserves[reserves[reserve_col].isin(sk_reserves)].merge(results, on=reserve_col)
    pts = gpd.GeoDataFrame(pts, geometry=reserves.geometry.name, crs=reserves.crs)
    _vprint(verbose, f"[maps] {len(pts)} of {len(sk_reserves)} reserve(s) located")

    main = MAP_PANELS["contig"]
    fig, ax = plt.subplots(figsize=figsize)
    _draw_panel(ax, states, pts, main, colors, point_size)

    insets = [i for i in incl if i != "contig"]
    for name, extent in inset_layout(main, insets).items():
        panel = MAP_PANELS[name]
        ax_in = ax.inset_axes(inset_axes_rect(main, extent))
        _draw_panel(ax_in, states, pts, panel, colors, point_size * (1 - panel.scale))
        _vprint(verbose, f"[maps] Inset {name}: extent={tuple(round(v) for v in extent)}")

    _trend_legend(ax, colors, sk_results, loc="lower right")
    _save(fig, base_dir, figures_root, "National__SKMap.png", dpi, verbose)
    return fig, ax


def res_custom_sk_map(
    stations: Sequence[str],
    x_loc: Sequence[float],
    y_loc: Sequence[float],
    sk_result: Sequence[str],
    bbox: Sequence[float],
    shp,
    *,
    station_labs: bool = True,
    lab_loc: Optional[Sequence[str]] = None,
    sk_fill_colors: Sequence[str] = DEFAULT_SK_FILL_COLORS,
    point_size: float = 120.0,
    figsize: Tuple[float, float] = (7, 7),
    dpi: int = 150,
    base_dir: Optional[str] = None,
    figures_root: Optional[str] = None,
    verbose: bool = False,
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Reserve map with arbitrary station locations and seasonal Kendall results.

    `x_loc`/`y_loc` are longitudes/latitudes (EPSG:4326); `shp` is the reserve
    boundary and is drawn in lon/lat. Labels go left of each station unless
    the matching `lab_loc` entry is 'R'.
    """
    shp = _require_geo(shp)
    stations = [str(s) for s in stations]
    sk_result = _check_trend_codes(sk_result)
    if len(stations) != len(sk_result):
        raise ValueError("Incorrect number of seasonal kendall results specified.")
    bbox = normalize_bbox(bbox)
    if len(stations) != len(x_loc):
        raise ValueError(
            "An incorrect number of x coordinates were specified. "
            "One x coordinate must be specified for each station."
        )
    if len(stations) != len(y_loc):
        raise ValueError(
            "An incorrect number of y coordinates were specified. "
            "One y coordinate must be specified for each station."
        )
    if lab_loc is not None and len(lab_loc) != len(stations):
        raise ValueError("One label location ('L' or 'R') must be given for each station.")
    colors = _trend_colors(sk_fill_colors)

    x_loc = np.asarray(x_loc, dtype=float)
    y_loc = np.asarray(y_loc, dtype=float)
    if np.any(x_loc > 0):
        warnings.warn("Positive longitudes given, please double check.", UserWarning, stacklevel=2)

    loc = points_frame(x_loc, y_loc, abbrev=stations, sk_result=sk_result)
    loc["X"] = x_loc
    loc["Y"] = y_loc

    fig, ax = plt.subplots(figsize=figsize)
    _to_lonlat(shp).plot(ax=ax, color=SHP_FILL, edgecolor=SHP_EDGE, alpha=0.3)
    _draw_trend_points(ax, loc, colors, point_size)

    if station_labs:
        lx, ly = label_positions(x_loc, y_loc, bbox, lab_loc, x_factor=0.06)
        for name, x, y in zip(stations, lx, ly):
            ax.annotate(name, (x, y), ha="center", va="center", fontsize=9,
                        bbox=dict(boxstyle="round,pad=0.2", fc="white", ec="0.5"))

    ax.set_xlim(bbox[0], bbox[2])
    ax.set_ylim(bbox[1], bbox[3])
    _bare_axes(ax)
    _trend_legend(ax, colors, sk_result, loc="lower left")
    _save(fig, base_dir, figures_root, "Reserve__SKMap.png", dpi, verbose)
    return fig, ax


def res_local_map(
    nerr_site_id: str,
    stations: Sequence[str],
    bbox: Sequence[float],
    shp,
    sampling_stations: pd.DataFrame,
    *,
    station_labs: bool = True,
    lab_loc: Optional[Sequence[str]] = None,
    point_size: float = 120.0,
    figsize: Tuple[float, float] = (7, 7),
    dpi: int = 150,
    base_dir: Optional[str] = None,
    figures_root: Optional[str] = None,
    verbose: bool = False,
) -> Tuple[plt.Figure, plt.Axes]:
    """
    Local reserve map of the selected sampling stations.

    Station coordinates come from `sampling_stations` (longitudes there are
    positive-west and are flipped). Stations are drawn in code order, each in
    the table's 'color' column if present, labelled with characters 4-5 of
    the station code (e.g. 'apacpwq' -> 'CP').
    """
    shp = _require_geo(shp)
    stations = [str(s).lower() for s in stations]
    if lab_loc is not None and len(lab_loc) != len(stations):
        raise ValueError(
            "Incorrect number of label location identifiers specified. "
            "R or L designation must be made for each station."
        )
    bbox = normalize_bbox(bbox)

    tbl = normalize_station_table(sampling_stations)
    loc = tbl[tbl["station_code"].isin(stations)].drop_duplicates("station_code")
    missing = sorted(set(stations) - set(loc["station_code"]))
    if missing:
        raise ValueError(f"Stations not found in sampling_stations: {missing}")
    loc = loc.sort_values("station_code").reset_index(drop=True)
    abbrev = loc["station_code"].str[3:5].str.upper().tolist()
    lon = -np.abs(loc["longitude"].astype(float).to_numpy())
    lat = loc["latitude"].astype(float).to_numpy()
    if "color" in loc.columns:
        point_colors = loc["color"].astype(str).tolist()
    else:
        point_colors = [f"C{i % 10}" for i in range(len(loc))]

    # lab_loc follows the caller's station order; re-key it to the sorted order
    if lab_loc is not None:
        side = dict(zip(stations, lab_loc))
        lab_loc = [side[c] for c in loc["station_code"]]

    fig, ax = plt.subplots(figsize=figsize)
    _to_lonlat(shp).plot(ax=ax, color=SHP_FILL, edgecolor=SHP_EDGE, alpha=0.3)
    ax.scatter(lon, lat, s=point_size, c=point_colors, edgecolors=point_colors, marker="o", zorder=4)

    if station_labs:
        lx, ly = label_positions(lon, lat, bbox, lab_loc, x_factor=0.045)
        for name, x, y in zip(abbrev, lx, ly):
            ax.annotate(name, (x, y), ha="center", va="center", fontsize=9,
                        bbox=dict(boxstyle="round,pad=0.2", fc="white", ec="0.5"))

    ax.set_xlim(bbox[0], bbox[2])
    ax.set_ylim(bbox[1], bbox[3])
    _bare_axes(ax)
    _vprint(verbose, f"[maps] {nerr_site_id.upper()}: {len(loc)} station(s) {abbrev}")
    _save(fig, base_dir, figures_root, f"{nerr_site_id.lower()}__LocalMap.png", dpi, verbose)
    return fig, ax
