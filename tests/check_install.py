#!/usr/bin/env python
"""
check_install.py - Installation check for nerrsviz.

Checks:
  - Python >= 3.10
  - nerrsviz imports and reports a version
  - The installed distribution is found and its declared runtime
    dependencies import
  - Geospatial stack (geopandas, shapely, pyproj) is present (warn-only)
  - Smoke test: detect one event in a tiny synthetic series

Does NOT check:
  - Test tools (pytest)
"""

from __future__ import annotations
import sys
import re
import importlib
import traceback
from dataclasses import dataclass
from typing import List, Optional, Tuple, Sequence
from importlib import metadata as importlib_metadata


# --------------------------- Configuration --------------------------- #

MIN_PYTHON = (3, 10)
DIST_CANDIDATES = ["nerrs-viz", "nerrsviz"]
MODULE_NAME = "nerrsviz"

# (distribution-name, import-name)
RECOMMENDED_ENV: Sequence[Tuple[str, str]] = (
    ("numpy", "numpy"),
    ("pandas", "pandas"),
    ("matplotlib", "matplotlib"),
    ("geopandas", "geopandas"),
    ("shapely", "shapely"),
    ("pyproj", "pyproj"),
)


@dataclass
class CheckResult:
    name: str
    ok: bool
    detail: str = ""
    warn: bool = False


def _print(msg: str, *, verbose: bool = True):
    if verbose:
        print(msg)


def check_python(min_version: Tuple[int, int]) -> CheckResult:
    ok = sys.version_info >= (*min_version, 0)
    return CheckResult(
        name=f"Python {min_version[0]}.{min_version[1]}+",
        ok=ok,
        detail=f"Detected Python {sys.version.split()[0]}",
    )


def find_distribution(candidates: Sequence[str]) -> Tuple[Optional[importlib_metadata.Distribution], str]:
    for name in candidates:
        try:
            return importlib_metadata.distribution(name), name
        except importlib_metadata.PackageNotFoundError:
            continue
    return None, ""


_REQ_NAME = re.compile(r"^\s*([A-Za-z0-9_.\-]+)")
_EXTRA_MARKER = re.compile(r";\s*extra\s*==", re.IGNORECASE)


def parse_requirements(requires_dist: Optional[List[str]]) -> List[str]:
    """Runtime requirement names; entries gated on an extra (e.g. test) are skipped."""
    out: List[str] = []
    for raw in requires_dist or []:
        s = (raw or "").strip()
        if not s or _EXTRA_MARKER.search(s):
            continue
        m = _REQ_NAME.match(s)
        if m:
            out.append(m.group(1))
    return out


def version_of(dist_name: str) -> Optional[str]:
    try:
        return importlib_metadata.version(dist_name)
    except importlib_metadata.PackageNotFoundError:
        return None


def smoke_test() -> CheckResult:
    import pandas as pd
    from nerrsviz.io import as_observation_table
    from nerrsviz.thresholds import threshold_identification

    t = pd.date_range("2016-07-01", periods=6, freq="h")
    df = pd.DataFrame({"datetimestamp": t, "do_mgl": [5.0, 1.9, 1.5, 1.2, 4.0, 5.0]})
    events = threshold_identification(as_observation_table(df, "apacpwq"), "do_mgl", 2, "<")
    ok = len(events) == 1 and float(events["duration"].iloc[0]) == 2.0
    return CheckResult("Smoke test", ok=ok, detail=f"{len(events)} event(s) detected")


def summarize(results: List[CheckResult]) -> None:
    print("\n=== nerrsviz Installation Summary ===")
    width = max(len(r.name) for r in results) + 2
    for r in results:
        status = "OK" if r.ok and not r.warn else ("WARN" if r.warn else "FAIL")
        print(f"{status:>4}  {r.name:<{width}} {r.detail}")
    print("=====================================")
    if any((not r.ok) and (not r.warn) for r in results):
        print("One or more checks failed. Please review the FAIL items above.")
    elif any(r.warn for r in results):
        print("Environment looks usable, with warnings.")
    else:
        print("All good! nerrsviz and its dependencies look ready to run.")


def main(argv: Optional[List[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="nerrsviz installation check")
    parser.add_argument("--verbose", action="store_true", help="Show detailed output")
    args = parser.parse_args(argv)
    verbose = args.verbose

    results: List[CheckResult] = [check_python(MIN_PYTHON)]

    try:
        mod = importlib.import_module(MODULE_NAME)
    except ImportError as e:
        results.append(CheckResult(f"Import {MODULE_NAME}", ok=False, detail=f"{e.__class__.__name__}: {e}"))
        summarize(results)
        return 1
    results.append(CheckResult(
        f"Import {MODULE_NAME}", ok=True, detail=f"version {getattr(mod, '__version__', 'unknown')}"
    ))

    dist, dist_name = find_distribution(DIST_CANDIDATES)
    if dist is None:
        results.append(CheckResult(
            "Distribution located", ok=False, detail="Tried: " + ", ".join(DIST_CANDIDATES)
        ))
        summarize(results)
        return 1
    results.append(CheckResult("Distribution located", ok=True, detail=f"{dist_name} {dist.version}"))

    failures: List[str] = []
    for dep in parse_requirements(dist.requires):
        ver = version_of(dep)
        if ver is None:
            failures.append(f"{dep}: not installed")
            _print(f"[FAIL] {dep}: not installed", verbose=True)
        else:
            _print(f"[OK] {dep}: {ver}", verbose=verbose)
    results.append(CheckResult(
        "Dependencies installed",
        ok=not failures,
        detail="All dependencies present" if not failures else "; ".join(failures),
    ))

    missing: List[str] = []
    for dist_name, import_name in RECOMMENDED_ENV:
        try:
            importlib.import_module(import_name)
        except ImportError:
            missing.append(dist_name)
            _print(f"[WARN] {dist_name}: not importable", verbose=True)
    results.append(CheckResult(
        "Plotting/geospatial stack",
        ok=True,
        warn=bool(missing),
        detail="All importable" if not missing else "Missing: " + ", ".join(missing),
    ))

    try:
        results.append(smoke_test())
    except Exception as e:
        results.append(CheckResult("Smoke test", ok=False, detail=f"{e.__class__.__name__}: {e}"))

    summarize(results)
    return 1 if any((not r.ok) and (not r.warn) for r in results) else 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(130)
    except Exception:
        print("Unexpected error:\n" + traceback.format_exc())
        sys.exit(1)
