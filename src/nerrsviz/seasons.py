"""
Season assignment.

A SeasonConfig maps every calendar month to exactly one named season and
fixes the cyclic order in which seasons are reported (``season_start`` comes
first, e.g. a water year that starts in Fall).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import pandas as pd

MONTH_ABB = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

DEFAULT_SEASON_GRPS: Tuple[Tuple[int, ...], ...] = ((12, 1, 2), (3, 4, 5), (6, 7, 8), (9, 10, 11))
DEFAULT_SEASON_NAMES: Tuple[str, ...] = ("Winter", "Spring", "Summer", "Fall")


@dataclass(frozen=True)
class SeasonConfig:
    """
    Month -> season policy.

    Parameters
    ----------
    season_grps : sequence of sequences of int
        One group of months (1-12) per season. Every month must appear in
        exactly one group.
    season_names : sequence of str
        Season labels, same length and order as `season_grps`.
    season_start : str, optional
        Label of the season that starts the cycle. Defaults to the first name.

    Raises
    ------
    ValueError
        If the groups do not partition months 1-12, names are duplicated or
        their count differs from the groups, or `season_start` is unknown.
    """

    season_grps: Tuple[Tuple[int, ...], ...] = DEFAULT_SEASON_GRPS
    season_names: Tuple[str, ...] = DEFAULT_SEASON_NAMES
    season_start: Optional[str] = None

    def __post_init__(self) -> None:
        grps = tuple(tuple(int(m) for m in g) for g in self.season_grps)
        names = tuple(str(n) for n in self.season_names)
        object.__setattr__(self, "season_grps", grps)
        object.__setattr__(self, "season_names", names)

        if len(grps) != len(names):
            raise ValueError(
                f"season_names ({len(names)}) must have one label per season group ({len(grps)})."
            )
        if len(set(names)) != len(names):
            raise ValueError(f"season_names must be unique; got {list(names)}.")

        months = [m for g in grps for m in g]
        bad = sorted({m for m in months if not 1 <= m <= 12})
        if bad:
            raise ValueError(f"Months must be in 1..12; got {bad}.")
        dupes = sorted({m for m in months if months.count(m) > 1})
        if dupes:
            raise ValueError(f"Months assigned to more than one season: {dupes}.")
        missing = sorted(set(range(1, 13)) - set(months))
        if missing:
            raise ValueError(f"Months not assigned to any season: {missing}.")

        if self.season_start is not None and self.season_start not in names:
            raise ValueError(f"season_start '{self.season_start}' is not one of {list(names)}.")

    @classmethod
    def monthly(cls) -> "SeasonConfig":
        """Twelve single-month seasons labelled Jan..Dec."""
        return cls(tuple((m,) for m in range(1, 13)), tuple(MONTH_ABB), "Jan")

    @classmethod
    def from_lists(
        cls,
        season_grps: Sequence[Iterable[int]],
        season_names: Sequence[str],
        season_start: Optional[str] = None,
    ) -> "SeasonConfig":
        return cls(tuple(tuple(g) for g in season_grps), tuple(season_names), season_start)

    def ordered_names(self, abb: bool = False) -> List[str]:
        """
        Season labels in cycle order.

        With ``abb=True`` each name is cut to its first three letters, unless
        two names would then coincide, in which case the full names are kept.
        """
        names = list(self.season_names)
        if self.season_start is not None:
            k = names.index(self.season_start)
            names = names[k:] + names[:k]
        if abb:
            short = self._short_names()
            names = [short[n] for n in names]
        return names

    def season_of(self, month: int, abb: bool = False) -> str:
        for grp, name in zip(self.season_grps, self.season_names):
            if int(month) in grp:
                return self._short_names()[name] if abb else name
        raise ValueError(f"Month {month!r} is not in 1..12.")

    def _short_names(self) -> Dict[str, str]:
        short = [n[:3] for n in self.season_names]
        if len(set(short)) != len(short):
            short = list(self.season_names)
        return dict(zip(self.season_names, short))


def assign_season(
    timestamps: Iterable,
    config: Optional[SeasonConfig] = None,
    *,
    abb: bool = False,
) -> pd.Categorical:
    """Season label for each timestamp, as an ordered Categorical in cycle order."""
    config = config or SeasonConfig()
    t = pd.DatetimeIndex(pd.to_datetime(list(timestamps)))
    short = config._short_names()
    lookup = {}
    for grp, name in zip(config.season_grps, config.season_names):
        for m in grp:
            lookup[m] = short[name] if abb else name
    labels = [lookup[m] for m in t.month]
    return pd.Categorical(labels, categories=config.ordered_names(abb=abb), ordered=True)
