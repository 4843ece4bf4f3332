import matplotlib

matplotlib.use("Agg", force=True)  # must be before any pyplot import

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt

from nerrsviz.io import as_observation_table


def hourly_frame(values, start="2016-07-01 00:00", param="do_mgl", **extra):
    t = pd.date_range(start, periods=len(values), freq="h")
    df = pd.DataFrame({"datetimestamp": t, param: np.asarray(values, dtype=float)})
    for k, v in extra.items():
        df[k] = v
    return df


@pytest.fixture
def make_hourly():
    return hourly_frame


@pytest.fixture
def do_obs():
    """10 hourly DO readings; hours 3-6 are below 2 mg/L."""
    vals = [5.0, 4.8, 4.1, 1.9, 1.5, 1.2, 1.8, 3.0, 4.2, 5.1]
    return as_observation_table(hourly_frame(vals), "apacpwq")


@pytest.fixture
def nut_obs():
    t = pd.date_range("2014-01-01", periods=60, freq="MS") + pd.Timedelta(days=14)
    rng = np.random.default_rng(7)
    chla = rng.uniform(2, 8, size=t.size)
    chla[[3, 4, 5, 20, 41]] = 15.0
    df = pd.DataFrame({"datetimestamp": t, "chla_n": chla, "po4f": rng.uniform(0, 0.05, t.size)})
    return as_observation_table(df, "apacpnut")


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")
