"""Tests for calibration tracking."""

import math

import pytest

from adpredictor.calibration import CalibrationTracker


@pytest.fixture
def tracker():
    t = CalibrationTracker()
    t.record(0.8, 1.0)
    t.record(0.3, 0.0)
    t.record(0.6, 0.0)
    t.record(0.9, 1.0)
    return t


def test_empty_tracker():
    t = CalibrationTracker()
    assert t.brier_score() is None
    assert t.log_loss() is None
    assert t.auc() is None
    assert t.calibration_curve()["counts"] == []
    assert t.summary()["n"] == 0


def test_brier_score(tracker):
    expected = (0.2 ** 2 + 0.3 ** 2 + 0.6 ** 2 + 0.1 ** 2) / 4
    assert tracker.brier_score() == pytest.approx(expected)


def test_log_loss(tracker):
    expected = -(math.log(0.8) + math.log(0.7) + math.log(0.4) + math.log(0.9)) / 4
    assert tracker.log_loss() == pytest.approx(expected)


def test_auc(tracker):
    assert tracker.auc() == pytest.approx(1.0)


def test_auc_needs_both_classes():
    t = CalibrationTracker()
    t.record(0.7, 1.0)
    t.record(0.2, 1.0)
    assert t.auc() is None


def test_labels_are_binarized():
    t = CalibrationTracker()
    t.record(0.5, -1.0)
    t.record(0.5, 3.0)
    assert t.positive_rate() == 0.5


def test_log_loss_clips_extremes():
    t = CalibrationTracker()
    t.record(0.0, 1.0)
    assert math.isfinite(t.log_loss())


def test_calibration_curve():
    t = CalibrationTracker()
    for p, y in [(0.05, 0.0), (0.15, 0.0), (0.12, 1.0), (0.95, 1.0), (1.0, 1.0)]:
        t.record(p, y)
    curve = t.calibration_curve(n_bins=10)
    assert curve["bin_centers"] == pytest.approx([0.05, 0.15, 0.95])
    assert curve["counts"] == [1, 2, 2]
    assert curve["mean_actual"] == pytest.approx([0.0, 0.5, 1.0])


def test_buffer_is_bounded():
    t = CalibrationTracker(buffer_size=3)
    for _ in range(10):
        t.record(0.5, 1.0)
    assert len(t) == 3
