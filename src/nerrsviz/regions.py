"""
Region helpers.

Bounding boxes, map panel definitions (contiguous US + Alaska / Hawaii /
Puerto Rico insets) and point subsetting for the trend maps.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple
import warnings
import numpy as np
import pandas as pd
import geopandas as gpd
from shapely.geometry import box


BBox = Tuple[float, float, float, float]


def normalize_bbox(bbox: Optional[Sequence[float]]) -> BBox:
    """
    Return (xmin, ymin, xmax, ymax) from any two opposite corners (X1, Y1, X2, Y2).
    """
    if bbox is None:
        raise ValueError("Specify a bounding box (bbox) in the form of (X1, Y1, X2, Y2).")
    vals = [float(v) for v in bbox]
    if len(vals) != 4:
        raise ValueError(
            "Incorrect number of elements specified for bbox. "
            "Specify a bounding box (bbox) in the form of (X1, Y1, X2, Y2)."
        )
    x1, y1, x2, y2 = vals
    return min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2)


@dataclass(frozen=True)
class MapPanel:
    """A map panel: projected bounding box (metres), EPSG code and inset scale."""

    name: str
    bbox: BBox
    crs: int
    scale: float = 1.0

    @property
    def width(self) -> float:
        return self.bbox[2] - self.bbox[0]

    @property
    def height(self) -> float:
        return self.bbox[3] - self.bbox[1]


# UTM zones (NAD83 HARN); scale is the inset height relative to the main panel
MAP_PANELS: Dict[str, MapPanel] = {
    "contig": MapPanel("contig", (-2160000, 2500000, 3100000, 5800000), 26914),
    "AK": MapPanel("AK", (-1800000, 5900000, 2100000, 8800000), 26905, 0.38),
    "HI": MapPanel("HI", (284000, 2070000, 1030000, 2510000), 26904, 0.225),
    "PR": MapPanel("PR", (-50000, 1900000, 280000, 2140000), 26920, 0.25),
}

# inset origin as (fraction of main width, fraction of main height) from main (xmin, ymin)
_INSET_ORIGIN = {
    "AK": (0.0, 0.0),
    "HI": (0.275, 0.0),
    "PR": (0.575, -0.05),
}


def inset_layout(
    main: MapPanel = MAP_PANELS["contig"],
    insets: Sequence[str] = ("AK", "HI", "PR"),
    panels: Dict[str, MapPanel] = MAP_PANELS,
) -> Dict[str, BBox]:
    """
    Inset extents in the main panel's projected coordinates.

    Each inset's height is `scale` × the main panel height; its width keeps
    the inset panel's own aspect ratio. Insets sit along the bottom of the
    main map.
    """
    out: Dict[str, BBox] = {}
    for name in insets:
        if name not in _INSET_ORIGIN:
            raise ValueError(f"Unknown inset {name!r}; use one of {list(_INSET_ORIGIN)}.")
        p = panels[name]
        h = p.scale * main.height
        w = h * p.width / p.height
        fx, fy = _INSET_ORIGIN[name]
        x0 = main.bbox[0] + fx * main.width
        y0 = main.bbox[1] + fy * main.height
        out[name] = (x0, y0, x0 + w, y0 + h)
    return out


def inset_axes_rect(main: MapPanel, extent: BBox) -> Tuple[float, float, float, float]:
    """Convert an inset extent to an axes-fraction rect (left, bottom, width, height)."""
    return (
        (extent[0] - main.bbox[0]) / main.width,
        (extent[1] - main.bbox[1]) / main.height,
        (extent[2] - extent[0]) / main.width,
        (extent[3] - extent[1]) / main.height,
    )


def loc_subsample(gdf: gpd.GeoDataFrame, bbox: Sequence[float], crs) -> gpd.GeoDataFrame:
    """
    Reproject `gdf` to `crs`, keep features inside `bbox` (in `crs` units),
    and add projected 'X'/'Y' coordinate columns.
    """
    xmin, ymin, xmax, ymax = normalize_bbox(bbox)
    if gdf.crs is None:
        raise ValueError("GeoDataFrame has no CRS; set one before reprojecting.")
    out = gdf.to_crs(crs)
    with warnings.catch_warnings():
        # clip_by_rect warns on empty inputs in some shapely releases
        warnings.simplefilter("ignore", RuntimeWarning)
        out = out.clip(box(xmin, ymin, xmax, ymax))
    out = out[~out.geometry.is_empty].copy()
    if out.empty:
        out["X"] = pd.Series(dtype=float)
        out["Y"] = pd.Series(dtype=float)
        return out
    pts = out.geometry.representative_point()
    out["X"] = pts.x.to_numpy()
    out["Y"] = pts.y.to_numpy()
    return out


def points_frame(
    lon: Sequence[float],
    lat: Sequence[float],
    crs: int = 4326,
    **columns,
) -> gpd.GeoDataFrame:
    """GeoDataFrame of points from lon/lat vectors plus extra columns."""
    df = pd.DataFrame(dict(columns))
    return gpd.GeoDataFrame(
        df, geometry=gpd.points_from_xy(np.asarray(lon, float), np.asarray(lat, float)), crs=crs
    )


def label_positions(
    lon: Sequence[float],
    lat: Sequence[float],
    bbox: Sequence[float],
    lab_loc: Optional[Sequence[str]] = None,
    *,
    x_factor: float = 0.06,
    y_factor: float = 0.015,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Label anchor points offset from station points.

    Labels default to the left of the point; entries of `lab_loc` equal to
    'R' move that label to the right. Offsets scale with the bbox size.
    """
    xmin, ymin, xmax, ymax = normalize_bbox(bbox)
    lon = np.asarray(lon, dtype=float)
    lat = np.asarray(lat, dtype=float)
    align = np.full(lon.shape, -1.25)
    if lab_loc is not None:
        align[np.asarray([str(s).upper() == "R" for s in lab_loc], dtype=bool)] = 1.25
    return lon + x_factor * align * (xmax - xmin), lat + y_factor * (ymax - ymin)
