"""
Station metadata helpers.

`sampling_stations` is the CDMO sampling-stations table with (at least) the
columns:

    station_code, nerr_site_id, status, is_swmp, station_name,
    latitude, longitude

R-style dotted headers ('Station.Code', 'NERR.Site.ID', 'isSWMP', ...) are
accepted and normalised.
"""

from __future__ import annotations
import os
import re
from typing import Iterable, List, Optional, Union
import pandas as pd

_COLUMN_ALIASES = {
    "station.code": "station_code",
    "nerr.site.id": "nerr_site_id",
    "station.name": "station_name",
    "isswmp": "is_swmp",
}


def normalize_station_table(sampling_stations: pd.DataFrame) -> pd.DataFrame:
    """Lower-case, snake_case column names."""
    cols = {}
    for c in sampling_stations.columns:
        key = str(c).strip().lower()
        cols[c] = _COLUMN_ALIASES.get(key, key.replace(".", "_").replace(" ", "_"))
    out = sampling_stations.rename(columns=cols)
    if "station_code" not in out.columns:
        raise ValueError("sampling_stations needs a 'station_code' column.")
    out["station_code"] = out["station_code"].astype(str).str.strip().str.lower()
    if "nerr_site_id" in out.columns:
        out["nerr_site_id"] = out["nerr_site_id"].astype(str).str.strip().str.lower()
    return out


def site_code(path_or_station: str) -> str:
    """Reserve code (first three letters) of a station code or data file/folder name."""
    stem = os.path.basename(os.path.normpath(str(path_or_station)))
    m = re.match(r"([A-Za-z]{3})", stem)
    if not m:
        raise ValueError(f"Cannot derive a reserve code from {path_or_station!r}.")
    return m.group(1).lower()


def get_sites(
    sampling_stations: pd.DataFrame,
    site: str,
    type: Union[str, Iterable[str]] = ("wq", "nut", "met"),
    active: bool = True,
    primary: bool = True,
) -> List[str]:
    """
    Sampling stations of a reserve.

    Parameters
    ----------
    sampling_stations : pd.DataFrame
        Station metadata table.
    site : str
        Reserve code, station code or data path; reduced with `site_code`.
    type : str or iterable of str
        Station types to keep ('wq', 'nut', 'met'), matched on the code suffix.
    active : bool, default True
        Drop stations whose status is not 'Active'.
    primary : bool, default True
        Drop non-primary (is_swmp != 'P') stations.

    Returns
    -------
    list of str
        Unique station codes in table order.
    """
    tbl = normalize_station_table(sampling_stations)
    res = site_code(site)
    if "nerr_site_id" in tbl.columns:
        tbl = tbl[tbl["nerr_site_id"] == res]
    else:
        tbl = tbl[tbl["station_code"].str[:3] == res]

    if active and "status" in tbl.columns:
        tbl = tbl[tbl["status"].astype(str).str.strip() == "Active"]
    if primary and "is_swmp" in tbl.columns:
        tbl = tbl[tbl["is_swmp"].astype(str).str.strip() == "P"]

    types = [type] if isinstance(type, str) else list(type)
    pattern = "|".join(f"{re.escape(t)}$" for t in types)
    codes = tbl["station_code"][tbl["station_code"].str.contains(pattern, regex=True)]
    return list(dict.fromkeys(codes))


def station_name(sampling_stations: pd.DataFrame, station: str) -> Optional[str]:
    tbl = normalize_station_table(sampling_stations)
    if "station_name" not in tbl.columns:
        return None
    hit = tbl.loc[tbl["station_code"] == str(station).lower(), "station_name"]
    if hit.empty:
        return None
    return str(hit.iloc[0]).strip()
