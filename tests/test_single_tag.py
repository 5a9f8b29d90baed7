import math

import pytest

from pose_fusion.single_tag import SingleTagEstimator
from pose_fusion.types import NO_ESTIMATE, Detection, Estimate, Pose2d, Pose3d

from conftest import make_detection, make_pipeline, make_snapshot


def test_single_valid_tag(layout, recorder):
    pipeline = make_pipeline(make_snapshot(1.0, make_detection(1, 2.0)))
    est = SingleTagEstimator(layout, recorder).estimate(pipeline)

    assert isinstance(est, Estimate)
    assert est.distance == pytest.approx(2.0)
    assert est.pose.x == pytest.approx(3.0)
    assert est.pose.y == pytest.approx(1.0)
    assert est.pose.yaw == pytest.approx(0.0)


def test_closest_tag_wins(layout, recorder):
    pipeline = make_pipeline(make_snapshot(
        1.0, make_detection(1, 4.0), make_detection(2, 2.5), make_detection(3, 3.0)))
    est = SingleTagEstimator(layout, recorder).estimate(pipeline)

    assert est.distance == pytest.approx(2.5)
    assert est.pose.y == pytest.approx(-1.0)


def test_distance_tie_keeps_first_detection(layout, recorder):
    pipeline = make_pipeline(make_snapshot(1.0, make_detection(2, 2.0), make_detection(1, 2.0)))
    est = SingleTagEstimator(layout, recorder).estimate(pipeline)

    assert est.pose.y == pytest.approx(-1.0)


def test_tags_at_or_beyond_max_range_are_ignored(layout, recorder):
    estimator = SingleTagEstimator(layout, recorder)
    assert estimator.estimate(make_pipeline(make_snapshot(1.0, make_detection(1, 6.0)))) is NO_ESTIMATE
    assert estimator.estimate(make_pipeline(make_snapshot(1.0, make_detection(1, 7.5)))) is NO_ESTIMATE

    est = estimator.estimate(make_pipeline(make_snapshot(
        1.0, make_detection(1, 7.5), make_detection(2, 5.9))))
    assert est.distance == pytest.approx(5.9)


def test_distance_is_planar(layout, recorder):
    det = Detection(1, 0.1, Pose3d(3.0, 4.0, 10.0))
    est = SingleTagEstimator(layout, recorder).estimate(make_pipeline(make_snapshot(1.0, det)))
    assert est.distance == pytest.approx(5.0)


def test_invalid_detections_never_selected(layout, recorder):
    estimator = SingleTagEstimator(layout, recorder)
    pipeline = make_pipeline(make_snapshot(
        1.0,
        make_detection(1, 1.0, ambiguity=0.6),
        make_detection(-1, 1.0),
        make_detection(1, 1.0, ambiguity=-1),
        make_detection(99, 1.0),
        make_detection(2, 3.0),
    ))
    est = estimator.estimate(pipeline)
    assert est.distance == pytest.approx(3.0)
    assert est.pose.y == pytest.approx(-1.0)


def test_ambiguous_only_detection_gives_no_estimate(layout, recorder):
    pipeline = make_pipeline(make_snapshot(1.0, make_detection(1, 2.0, ambiguity=0.6)))
    assert SingleTagEstimator(layout, recorder).estimate(pipeline) is NO_ESTIMATE


def test_empty_snapshot_gives_no_estimate(layout, recorder):
    est = SingleTagEstimator(layout, recorder).estimate(make_pipeline(make_snapshot(1.0)))
    assert est is NO_ESTIMATE


def test_camera_mount_offset_applied(layout, recorder):
    # 相机装在车体前方 0.5 m、左侧 0.2 m
    mount = Pose3d(0.5, 0.2, 0.3)
    pipeline = make_pipeline(make_snapshot(1.0, make_detection(1, 2.0)), camera_to_robot=mount)
    est = SingleTagEstimator(layout, recorder).estimate(pipeline)

    assert est.pose.x == pytest.approx(2.5)
    assert est.pose.y == pytest.approx(0.8)
    assert est.pose.z == pytest.approx(-0.3)


def test_rotated_tag(layout, recorder):
    # Tag 3 朝向场地 +y；相机与 Tag 同向，位于其后方 2 m
    pipeline = make_pipeline(make_snapshot(1.0, make_detection(3, 2.0)))
    est = SingleTagEstimator(layout, recorder).estimate(pipeline)

    assert est.pose.x == pytest.approx(8.0)
    assert est.pose.y == pytest.approx(-2.0)
    assert est.pose.yaw == pytest.approx(math.pi / 2)


def test_telemetry_slots_reset_each_call(layout, recorder):
    estimator = SingleTagEstimator(layout, recorder)
    estimator.estimate(make_pipeline(make_snapshot(1.0, make_detection(1, 2.0), make_detection(2, 3.0))))

    assert recorder.get("Vision/TagPose0_0") == Pose2d(5.0, 1.0, 0.0)
    assert recorder.get("Vision/TagPose0_1") == Pose2d(5.0, -1.0, 0.0)
    assert recorder.get("Vision/NVRobotPose0_1").x == pytest.approx(2.0)

    estimator.estimate(make_pipeline(make_snapshot(2.0)))
    for slot in range(2):
        assert recorder.get(f"Vision/TagPose0_{slot}") == Pose2d()
        assert recorder.get(f"Vision/NVRobotPose0_{slot}") == Pose2d()


def test_telemetry_limited_to_two_slots(layout, recorder):
    estimator = SingleTagEstimator(layout, recorder)
    estimator.estimate(make_pipeline(make_snapshot(
        1.0, make_detection(1, 2.0), make_detection(2, 3.0), make_detection(3, 4.0))))
    assert recorder.get("Vision/TagPose0_2") is None
