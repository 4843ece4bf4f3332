import numpy as np
import pytest

from nerrsviz.regions import (
    MAP_PANELS,
    inset_axes_rect,
    inset_layout,
    label_positions,
    loc_subsample,
    normalize_bbox,
    points_frame,
)


def test_normalize_bbox():
    assert normalize_bbox([-84.0, 30.0, -85.0, 29.5]) == (-85.0, 29.5, -84.0, 30.0)
    with pytest.raises(ValueError):
        normalize_bbox(None)
    with pytest.raises(ValueError):
        normalize_bbox([1, 2, 3])


def test_inset_layout_scales_and_origins():
    main = MAP_PANELS["contig"]
    lay = inset_layout(main)
    ak = lay["AK"]
    assert ak[0] == main.bbox[0] and ak[1] == main.bbox[1]
    assert ak[3] - ak[1] == pytest.approx(0.38 * main.height)
    ak_panel = MAP_PANELS["AK"]
    assert (ak[2] - ak[0]) / (ak[3] - ak[1]) == pytest.approx(ak_panel.width / ak_panel.height)
    assert lay["HI"][0] == pytest.approx(main.bbox[0] + 0.275 * main.width)
    assert lay["PR"][1] == pytest.approx(main.bbox[1] - 0.05 * main.height)
    assert set(inset_layout(main, ["HI"])) == {"HI"}
    with pytest.raises(ValueError):
        inset_layout(main, ["GU"])


def test_inset_axes_rect():
    main = MAP_PANELS["contig"]
    rect = inset_axes_rect(main, main.bbox)
    assert rect == pytest.approx((0.0, 0.0, 1.0, 1.0))


def test_label_positions_left_right():
    lx, ly = label_positions([-85.0, -84.0], [29.0, 29.5], (-86, 28, -84, 30), ["L", "R"])
    assert lx[0] == pytest.approx(-85.0 - 0.06 * 1.25 * 2)
    assert lx[1] == pytest.approx(-84.0 + 0.06 * 1.25 * 2)
    assert np.allclose(ly, [29.0 + 0.03, 29.5 + 0.03])


def test_loc_subsample_crops_and_projects():
    pts = points_frame([-90.0, -90.0], [35.0, 10.0], nerr_site_id=["in", "out"])
    main = MAP_PANELS["contig"]
    sub = loc_subsample(pts, main.bbox, main.crs)
    assert sub["nerr_site_id"].tolist() == ["in"]
    assert main.bbox[0] <= sub["X"].iloc[0] <= main.bbox[2]
    assert main.bbox[1] <= sub["Y"].iloc[0] <= main.bbox[3]
    assert sub.crs.to_epsg() == main.crs


def test_loc_subsample_needs_crs():
    pts = points_frame([-90.0], [35.0], crs=None, nerr_site_id=["x"])
    with pytest.raises(ValueError):
        loc_subsample(pts, MAP_PANELS["contig"].bbox, 26914)
