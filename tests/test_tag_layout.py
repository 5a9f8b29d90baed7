import json
import logging
import math

import pytest

from core.paths import TAG_LAYOUT_PATH
from pose_fusion.tag_layout import (
    NOMINAL_FIELD_LENGTH_M, NOMINAL_FIELD_WIDTH_M, TagLayout, load_tag_layout, parse_tag_layout,
)
from pose_fusion.types import Pose3d


def test_bundled_layout_loads():
    layout = load_tag_layout(TAG_LAYOUT_PATH)

    assert len(layout) == 8
    assert [tag_id for tag_id, _ in layout.all_entries()] == list(range(1, 9))
    assert layout.field_length == pytest.approx(16.54175)
    assert layout.field_width == pytest.approx(8.0137)

    tag1 = layout.lookup(1)
    assert tag1.x == pytest.approx(15.513558)
    assert abs(tag1.yaw) == pytest.approx(math.pi)
    assert layout.lookup(5).yaw == pytest.approx(0.0)


def test_unknown_tag_lookup():
    layout = TagLayout({1: Pose3d(1.0, 2.0, 0.0)})
    assert layout.lookup(7) is None
    assert 1 in layout and 7 not in layout


def test_missing_file_gives_empty_layout(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        layout = load_tag_layout(str(tmp_path / "missing.json"))

    assert len(layout) == 0
    assert layout.all_entries() == []
    assert layout.field_length == NOMINAL_FIELD_LENGTH_M
    assert layout.field_width == NOMINAL_FIELD_WIDTH_M
    assert any(r.levelno == logging.WARNING for r in caplog.records)


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"tags": [{"ID": 1}]}),
    json.dumps({"tags": [{"ID": 1, "pose": {"translation": {"x": 1, "y": 2, "z": 0},
                                             "rotation": {"quaternion": {"W": 0, "X": 0, "Y": 0, "Z": 0}}}}]}),
    json.dumps([1, 2, 3]),
])
def test_unparseable_file_gives_empty_layout(tmp_path, content):
    path = tmp_path / "layout.json"
    path.write_text(content, encoding="utf-8")
    assert len(load_tag_layout(str(path))) == 0


def test_parse_rotated_tag():
    half = math.sqrt(0.5)
    layout = parse_tag_layout({
        "tags": [{"ID": 3, "pose": {"translation": {"x": 1.0, "y": 2.0, "z": 0.5},
                                    "rotation": {"quaternion": {"W": half, "X": 0.0, "Y": 0.0, "Z": half}}}}],
    })
    tag = layout.lookup(3)
    assert tag.yaw == pytest.approx(math.pi / 2)
    assert tag.z == pytest.approx(0.5)
    assert layout.field_length == NOMINAL_FIELD_LENGTH_M
