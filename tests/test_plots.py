import os

import numpy as np
import pandas as pd

from nerrsviz.io import as_observation_table
from nerrsviz.plot import grouped_count_bars, print_event_summary, plot_call
from nerrsviz.plots.threshold import threshold_summary_plot
from nerrsviz.thresholds import threshold_identification


def _long_obs(years=12):
    t = pd.date_range("2005-01-01", periods=years * 12, freq="MS")
    rng = np.random.default_rng(1)
    vals = rng.uniform(0, 20, size=t.size)
    return as_observation_table(pd.DataFrame({"datetimestamp": t, "chla_n": vals}), "apacpnut")


def test_season_chart_ticks_and_legend():
    obs = _long_obs()
    fig, ax, grid = threshold_summary_plot(obs, "chla_n", "season", 10, ">", verbose=False)
    assert len(grid) == 4 * 12
    labels = [t.get_text() for t in ax.get_xticklabels()]
    assert len(labels) == 12
    assert labels[0] == "2005" and labels[1] == "" and labels[2] == "2007"
    legend = ax.get_legend()
    assert [t.get_text() for t in legend.get_texts()] == ["Win", "Spr", "Sum", "Fal"]
    assert ax.get_ylabel().startswith("Count (Chlorophyll-a > 10")


def test_year_chart_saves_png(tmp_path, monkeypatch):
    monkeypatch.delenv("NERRSVIZ_PLOT_SUBDIR", raising=False)
    obs = _long_obs(3)
    fig, ax, grid = threshold_summary_plot(
        obs, "chla_n", "year", 10, ">",
        plot_title=True, base_dir=str(tmp_path / "apa"), figures_root=str(tmp_path / "figs"),
        verbose=False,
    )
    assert ax.get_title() == "APACPNUT"
    assert ax.get_legend() is None
    path = tmp_path / "figs" / "apa" / "threshold" / "apa__apacpnut__chla_n__year__2005-2007__ThresholdSummary.png"
    assert path.exists()
    assert sum(p.get_height() for p in ax.patches) == grid["count"].sum()


def test_grouped_count_bars_colors():
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots()
    mapping = grouped_count_bars(ax, [1, 2, 3, 4], [1, np.nan, 3, 0], ["a", "b", "a", "b"], colors=["r", "g"])
    assert mapping == {"a": "r", "b": "g"}
    assert len(ax.patches) == 4


def test_print_event_summary_and_plot_call(do_obs, capsys):
    ev = threshold_identification(do_obs, "do_mgl", 2, "<")
    print_event_summary(ev)
    out = capsys.readouterr().out
    assert "Events" in out and "do_mgl" in out

    def noisy(verbose=False):
        print("hello")
        return 42

    assert plot_call(noisy, verbose=False) == 42
    assert capsys.readouterr().out == ""
    assert plot_call(noisy, verbose=True) == 42
    assert "hello" in capsys.readouterr().out
