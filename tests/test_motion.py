#!/usr/bin/env python3
"""
Mouth motion tests.
"""

import math

import numpy as np
import pytest

from patient_sim.animation.motion import (
    JawPose, MouthAnimator, amplitude_series, mouth_amplitude, relax_factor,
)


def test_speaking_amplitude_formula():
    assert mouth_amplitude(0.0, True) == pytest.approx(0.2)
    t = math.pi / 16  # sin(t * 8) == 1
    expected = 0.4 + 0.2 + math.sin(t * 3) * 0.1
    assert mouth_amplitude(t, True) == pytest.approx(expected)


def test_idle_amplitude_formula():
    assert mouth_amplitude(0.0, False) == 0.0
    assert mouth_amplitude(math.pi / 4, False) == pytest.approx(0.02)


def test_amplitude_ranges():
    times = np.linspace(0.0, 30.0, 5000)
    speaking = amplitude_series(times, True)
    idle = amplitude_series(times, False)
    assert speaking.min() >= -0.3 - 1e-9
    assert speaking.max() <= 0.7 + 1e-9
    assert np.abs(idle).max() <= 0.02 + 1e-9


def test_series_matches_scalar():
    times = [0.0, 0.37, 1.5, 12.25]
    for speaking in (True, False):
        series = amplitude_series(times, speaking)
        for t, value in zip(times, series):
            assert value == pytest.approx(mouth_amplitude(t, speaking))


def test_base_frequency_is_configurable():
    t = math.pi / 8  # sin(t * 4) == 1
    assert mouth_amplitude(t, True, base_frequency=4.0) == pytest.approx(0.6 + math.sin(t * 3) * 0.1)


def test_jaw_pose_from_amplitude():
    pose = JawPose.from_amplitude(0.5)
    assert pose.jaw_pitch == pytest.approx(0.15)
    assert pose.jaw_roll == pytest.approx(0.025)
    assert pose.mouth_open == pytest.approx(0.5)
    assert pose.scale_y == pytest.approx(1.075)
    assert pose.scale_x == pytest.approx(1.04)


def test_relax_factor():
    assert relax_factor(0.0) == 1.0
    assert relax_factor(-1.0) == 1.0
    assert relax_factor(1 / 60) == pytest.approx(0.95)


def test_animator_relaxes_independent_of_frame_rate():
    fast = MouthAnimator()
    slow = MouthAnimator()
    t0 = math.pi / 16
    fast.update(t0, True)
    slow.update(t0, True)

    for i in range(1, 61):
        fast.update(t0 + i / 60, False)
    slow.update(t0 + 1.0, False)

    assert fast.pose.jaw_pitch == pytest.approx(slow.pose.jaw_pitch)
    assert slow.pose.mouth_open == pytest.approx(mouth_amplitude(t0, True) * 0.95 ** 60)


def test_animator_idle_scale():
    animator = MouthAnimator()
    t = math.pi / 4
    pose = animator.update(t, False)
    assert pose.scale_y == pytest.approx(1.02)
    assert pose.scale_x == pytest.approx(1.01)
    assert pose.jaw_pitch == 0.0


def test_animator_reset():
    animator = MouthAnimator()
    animator.update(1.0, True)
    animator.reset()
    assert animator.pose == JawPose()
