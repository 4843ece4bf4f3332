import pandas as pd
import pytest

from nerrsviz.seasons import SeasonConfig, assign_season


def test_default_config():
    cfg = SeasonConfig()
    assert cfg.ordered_names() == ["Winter", "Spring", "Summer", "Fall"]
    assert cfg.season_of(12) == "Winter"
    assert cfg.season_of(1) == "Winter"
    assert cfg.season_of(7, abb=True) == "Sum"


def test_start_season_rotates_order():
    cfg = SeasonConfig.from_lists(
        [[1, 2, 3], [4, 5, 6], [7, 8, 9], [10, 11, 12]],
        ["Winter", "Spring", "Summer", "Fall"],
        season_start="Fall",
    )
    assert cfg.ordered_names() == ["Fall", "Winter", "Spring", "Summer"]
    assert cfg.ordered_names(abb=True) == ["Fal", "Win", "Spr", "Sum"]


def test_monthly_config():
    cfg = SeasonConfig.monthly()
    assert len(cfg.ordered_names()) == 12
    assert cfg.season_of(3) == "Mar"


@pytest.mark.parametrize(
    "grps, names, start",
    [
        ([[1, 2, 3], [4, 5, 6], [7, 8, 9]], ["A", "B", "C"], None),  # months missing
        ([[1, 2, 3, 4], [4, 5, 6], [7, 8, 9], [10, 11, 12]], ["A", "B", "C", "D"], None),  # overlap
        ([[0, 1, 2, 3], [4, 5, 6], [7, 8, 9], [10, 11, 12]], ["A", "B", "C", "D"], None),  # bad month
        ([[1, 2, 3], [4, 5, 6], [7, 8, 9], [10, 11, 12]], ["A", "B", "C"], None),  # name count
        ([[1, 2, 3], [4, 5, 6], [7, 8, 9], [10, 11, 12]], ["A", "B", "C", "C"], None),  # dup names
        ([[1, 2, 3], [4, 5, 6], [7, 8, 9], [10, 11, 12]], ["A", "B", "C", "D"], "E"),  # start
    ],
)
def test_invalid_configs(grps, names, start):
    with pytest.raises(ValueError):
        SeasonConfig.from_lists(grps, names, start)


def test_colliding_abbreviations_keep_full_names():
    cfg = SeasonConfig.from_lists(
        [[1, 2, 3, 4, 5, 6], [7, 8, 9, 10, 11, 12]], ["Wet1", "Wet2"]
    )
    assert cfg.ordered_names(abb=True) == ["Wet1", "Wet2"]
    assert cfg.season_of(8, abb=True) == "Wet2"
    out = assign_season(pd.to_datetime(["2015-02-01", "2015-09-01"]), cfg, abb=True)
    assert list(out) == ["Wet1", "Wet2"]


def test_assign_season_categorical():
    t = pd.to_datetime(["2015-01-10", "2015-04-02", "2015-12-31", "2016-08-15"])
    cfg = SeasonConfig(season_start="Spring")
    out = assign_season(t, cfg, abb=True)
    assert list(out) == ["Win", "Spr", "Win", "Sum"]
    assert list(out.categories) == ["Spr", "Sum", "Fal", "Win"]
    assert out.ordered
