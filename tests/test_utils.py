import importlib
import os

import pandas as pd
import pytest

from nerrsviz.utils import (
    build_time_window_label,
    date_locator,
    file_prefix,
    out_dir,
    set_date_break_labs,
    set_date_breaks,
    set_date_breaks_minor,
    title_labeler,
    y_count_labeler,
    y_labeler,
)


def test_set_date_breaks_schedule():
    assert set_date_breaks([1990, 2015]) == "4 years"
    assert set_date_breaks([2000, 2015]) == "2 years"
    assert set_date_breaks([2010, 2015]) == "1 year"
    assert set_date_breaks([2013, 2015]) == "4 months"
    assert set_date_breaks([2015, 2015]) == "1 month"
    assert set_date_breaks([pd.Timestamp("2001-01-01"), pd.Timestamp("2012-06-01")]) == "2 years"


def test_minor_breaks_and_labels():
    assert set_date_breaks_minor([2010, 2015]) == "1 year"
    assert set_date_breaks_minor([2015, 2015]) == "1 month"
    assert set_date_break_labs([2010, 2015]) == "%Y"
    assert set_date_break_labs([2014, 2015]) == "%b-%y"
    assert set_date_break_labs([2015]) == "%b"


def test_date_locator():
    import matplotlib.dates as mdates

    assert isinstance(date_locator("2 years"), mdates.YearLocator)
    assert isinstance(date_locator("4 months"), mdates.MonthLocator)


def test_labels():
    assert y_labeler("do_mgl") == "Dissolved Oxygen (mg/L)"
    assert y_labeler("po4f", converted=True) == "Orthophosphate (µM)"
    assert y_labeler("mystery") == "mystery"
    lab = y_count_labeler("do_mgl", 2, "<", 2)
    assert lab == "Count (Dissolved Oxygen < 2 mg/L, >= 2 hrs)"
    assert title_labeler("apacpwq") == "APACPWQ"
    tbl = pd.DataFrame({"Station.Code": ["apacpwq"], "Station.Name": ["Cat Point"]})
    assert title_labeler("apacpwq", tbl) == "Cat Point"


def test_time_window_label():
    assert build_time_window_label([6, 7, 8], [2015, 2016], None, None) == "Jun-Aug__2015-2016"
    assert build_time_window_label(None, None, None, None) == "AllTime"


def test_out_dir_env_override(tmp_path, monkeypatch):
    base = str(tmp_path / "runs" / "apa2020")
    root = str(tmp_path / "figs")
    assert file_prefix(base) == "apa2020"

    monkeypatch.setenv("NERRSVIZ_PLOT_SUBDIR", "custom")
    d = out_dir(base, root)
    assert d == os.path.join(root, "apa2020", "custom")
    assert os.path.isdir(d)

    monkeypatch.setenv("NERRSVIZ_PLOT_SUBDIR", "")
    assert out_dir(base, root) == os.path.join(root, "apa2020")

    monkeypatch.delenv("NERRSVIZ_PLOT_SUBDIR")
    assert out_dir(base, root) == os.path.join(root, "apa2020")


@pytest.mark.parametrize("module", ["seasons", "utils", "stations", "regions"])
def test_module_docstrings(module):
    mod = importlib.import_module(f"nerrsviz.{module}")
    assert mod.__doc__ and mod.__doc__.strip()
