from pose_fusion.telemetry import TelemetryRecorder, get_recorder


def test_latest_value_wins():
    rec = TelemetryRecorder()
    rec.record("Vision/IsEnabled", True)
    rec.record("Vision/IsEnabled", False)

    assert rec.get("Vision/IsEnabled") is False
    assert rec.get("Vision/Missing", "n/a") == "n/a"
    assert rec.get_all() == {"Vision/IsEnabled": False}


def test_history_is_bounded_and_newest_first():
    rec = TelemetryRecorder(max_history=3)
    for i in range(5):
        rec.record("k", i)

    assert [e.value for e in rec.get_history(limit=None)] == [4, 3, 2]
    assert [e.value for e in rec.get_history(limit=2)] == [4, 3]

    rec.clear()
    assert rec.get_all() == {}
    assert rec.get_history() == []


def test_global_recorder_is_shared():
    assert get_recorder() is get_recorder()
