import math

import pytest

from rc_localization.geometry.pose import Pose2d
from rc_localization.utils.ring_buffer import TimeInterpolatableBuffer


def test_empty_buffer_samples_none():
    buf = TimeInterpolatableBuffer.for_floats(1.0)
    assert buf.sample(0.0) is None
    assert buf.latest() is None and buf.oldest() is None


def test_interpolation_and_clamping():
    buf = TimeInterpolatableBuffer.for_floats(10.0)
    buf.add_sample(0.0, 0.0)
    buf.add_sample(1.0, 10.0)
    assert buf.sample(0.5) == pytest.approx(5.0)
    assert buf.sample(-3.0) == 0.0
    assert buf.sample(7.0) == 10.0
    assert buf.sample(1.0) == 10.0


def test_equal_time_overwrites():
    buf = TimeInterpolatableBuffer.for_floats(10.0)
    buf.add_sample(0.0, 1.0)
    buf.add_sample(1.0, 2.0)
    buf.add_sample(1.0, 3.0)
    assert len(buf) == 2
    assert buf.sample(1.0) == 3.0


def test_out_of_order_insert_keeps_time_order():
    buf = TimeInterpolatableBuffer.for_floats(10.0)
    buf.add_sample(0.0, 0.0)
    buf.add_sample(2.0, 20.0)
    buf.add_sample(1.0, 5.0)
    assert [t for t, _ in buf.items()] == [0.0, 1.0, 2.0]
    assert buf.sample(0.5) == pytest.approx(2.5)
    assert buf.sample(1.5) == pytest.approx(12.5)


def test_insert_before_oldest_is_ignored():
    buf = TimeInterpolatableBuffer.for_floats(10.0)
    buf.add_sample(1.0, 1.0)
    buf.add_sample(2.0, 2.0)
    buf.add_sample(0.5, 99.0)
    assert buf.items() == [(1.0, 1.0), (2.0, 2.0)]


def test_old_samples_are_evicted():
    buf = TimeInterpolatableBuffer.for_floats(1.5)
    buf.add_sample(0.0, 0.0)
    buf.add_sample(1.5, 1.5)
    assert len(buf) == 2          # exactly at the window edge stays
    buf.add_sample(2.0, 2.0)
    assert buf.oldest() == (1.5, 1.5)
    buf.add_sample(10.0, 10.0)
    assert buf.items() == [(10.0, 10.0)]


def test_floor_lookup():
    buf = TimeInterpolatableBuffer.for_floats(10.0)
    for t in (0.0, 1.0, 2.0):
        buf.add_sample(t, t * 10)
    assert buf.floor(1.5) == (1.0, 10.0)
    assert buf.floor(2.0) == (2.0, 20.0)
    assert buf.floor(-0.1) is None


def test_pose_samples_interpolate_between_neighbours():
    buf = TimeInterpolatableBuffer(1.5)
    p1, p2, p3 = Pose2d.of(0.0, 0.0, 0.0), Pose2d.of(2.0, 0.0, math.pi / 2), Pose2d.of(2.0, 2.0, math.pi)
    buf.add_sample(0.0, p1)
    buf.add_sample(1.0, p2)
    buf.add_sample(1.2, p3)

    for t in (0.0, 0.25, 0.5, 0.9, 1.0):
        s = buf.sample(t)
        expected = p1.interpolate(p2, t)
        assert (s.x, s.y) == pytest.approx((expected.x, expected.y))
        assert s.rotation.radians == pytest.approx(expected.rotation.radians)
        assert s.y == pytest.approx(0.0, abs=1e-12)   # on the segment p1-p2

    assert buf.sample(0.25).rotation.radians == pytest.approx(math.pi / 8)
    assert buf.sample(-1.0) is p1
    assert buf.sample(5.0) is p3


def test_history_must_be_positive():
    with pytest.raises(ValueError):
        TimeInterpolatableBuffer(0.0)
