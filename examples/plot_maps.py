#!/usr/bin/env python3
# examples/plot_maps.py

from __future__ import annotations
import os

import geopandas as gpd
import pandas as pd
from shapely.geometry import box

from nerrsviz.plot import plot_call, info, hr, kv, bullet
from nerrsviz.regions import points_frame
from nerrsviz.stations import get_sites
from nerrsviz.plots.maps import national_sk_map, res_custom_sk_map, res_local_map
import matplotlib
matplotlib.use("Agg", force=True)  # headless backend

# ---------------------------------------------------------------------
# Project paths (EDIT)
# ---------------------------------------------------------------------
BASE_DIR = "./data/apa"
FIG_DIR  = "./figures"

# Shapefiles; leave as None to use the rough boxes below
STATES_SHP   = None    # US states with a 'fips' column
RESERVE_SHP  = None    # reserve boundary polygon
STATIONS_CSV = None    # CDMO sampling_stations.csv

# ---------------------------------------------------------------------
# Seasonal Kendall results ('inc', 'dec', 'insig', 'insuff')
# ---------------------------------------------------------------------
SK_RESERVES = ["apa", "sap", "gtm", "hee", "kac", "job"]
SK_RESULTS  = ["inc", "insig", "dec", "insuff", "insig", "inc"]
RESERVES = points_frame(
    [-84.9, -81.3, -81.3, -155.1, -151.5, -66.2],
    [29.7, 31.4, 29.9, 19.7, 59.6, 18.0],
    nerr_site_id=["apa", "sap", "gtm", "hee", "kac", "job"],
)

# Apalachicola stations: (code, lat, lon as positive-west, colour)
SAMPLING_STATIONS = pd.DataFrame(
    {
        "station_code": ["apacpwq", "apadbwq", "apaebwq", "apaeswq"],
        "nerr_site_id": ["apa"] * 4,
        "status": ["Active"] * 4,
        "is_swmp": ["P"] * 4,
        "latitude": [29.7021, 29.6747, 29.7858, 29.7857],
        "longitude": [84.8802, 85.0628, 84.8751, 84.8752],
        "color": ["#247BA0", "#A3DFFF", "#444E65", "#0a0a0a"],
    }
)
BBOX = [-85.3, 29.5, -84.6, 30.0]


def load_states() -> gpd.GeoDataFrame:
    if STATES_SHP:
        return gpd.read_file(STATES_SHP)
    # coarse stand-ins, good enough to see the layout
    return gpd.GeoDataFrame(
        {"fips": ["12", "13", "15", "02", "72"]},
        geometry=[
            box(-87.6, 24.5, -80.0, 31.0),
            box(-85.6, 30.4, -80.8, 35.0),
            box(-160.5, 18.9, -154.8, 22.3),
            box(-168.0, 54.0, -141.0, 71.0),
            box(-67.3, 17.9, -65.2, 18.6),
        ],
        crs=4326,
    )


def load_reserve() -> gpd.GeoDataFrame:
    if RESERVE_SHP:
        return gpd.read_file(RESERVE_SHP)
    return gpd.GeoDataFrame(geometry=[box(-85.2, 29.6, -84.7, 29.95)], crs=4326)


def main():
    print(hr("="))
    print("nerrsviz: Map Runner")
    print(hr("="))
    kv("BASE_DIR", BASE_DIR)
    kv("FIG_DIR", FIG_DIR)
    kv("Output subdir", os.environ.get("NERRSVIZ_PLOT_SUBDIR", "maps (auto)"))

    states = load_states()
    shp = load_reserve()
    stations = pd.read_csv(STATIONS_CSV) if STATIONS_CSV else SAMPLING_STATIONS

    info("National seasonal Kendall map")
    bullet("Contiguous US in UTM 14N with AK / HI / PR insets.")
    plot_call(
        national_sk_map,
        states=states,
        reserves=RESERVES,
        highlight_states=["12", "13"],
        sk_reserves=SK_RESERVES,
        sk_results=SK_RESULTS,
        base_dir=BASE_DIR,
        figures_root=FIG_DIR,
        verbose=True,
    )

    info("Reserve map with custom station locations")
    plot_call(
        res_custom_sk_map,
        stations=["CP", "DB", "EB"],
        x_loc=[-84.88, -85.06, -84.87],
        y_loc=[29.70, 29.67, 29.79],
        sk_result=["inc", "dec", "insig"],
        bbox=BBOX,
        shp=shp,
        lab_loc=["R", "L", "R"],
        base_dir=BASE_DIR,
        figures_root=FIG_DIR,
        verbose=True,
    )

    info("Local reserve map")
    sites = get_sites(stations, "apa", type="wq")
    kv("Stations", sites)
    plot_call(
        res_local_map,
        nerr_site_id="apa",
        stations=sites,
        bbox=BBOX,
        shp=shp,
        sampling_stations=stations,
        base_dir=BASE_DIR,
        figures_root=FIG_DIR,
        verbose=True,
    )
    print(hr("="))


if __name__ == "__main__":
    main()
