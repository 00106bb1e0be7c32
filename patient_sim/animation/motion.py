"""
Mouth Motion - Procedural mouth/jaw amplitude for the talking avatar.

Everything here is a function of the elapsed session time supplied by the
renderer, so frames can arrive at any rate without drift.
"""

import math
from dataclasses import dataclass
from typing import Union

import numpy as np

BASE_FREQUENCY = 8.0        # primary mouth oscillation (rad/s)
SECONDARY_FREQUENCY = 3.0   # slower variation layered on top
IDLE_FREQUENCY = 2.0        # breathing-like movement while silent

SPEAKING_SWING = 0.4
SPEAKING_OFFSET = 0.2
SECONDARY_SWING = 0.1
IDLE_SWING = 0.02

# Jaw/mesh response to one unit of amplitude
JAW_PITCH_GAIN = 0.3
JAW_ROLL_GAIN = 0.05
MOUTH_SCALE_Y_GAIN = 0.15
MOUTH_SCALE_X_GAIN = 0.08

# Silent relax: keep 95% per frame at 60 fps
RELAX_PER_FRAME = 0.95
REFERENCE_FPS = 60.0


def mouth_amplitude(t: float, speaking: bool, base_frequency: float = BASE_FREQUENCY) -> float:
    """Mouth openness at elapsed time ``t``."""
    if speaking:
        return (math.sin(t * base_frequency) * SPEAKING_SWING + SPEAKING_OFFSET
                + math.sin(t * SECONDARY_FREQUENCY) * SECONDARY_SWING)
    return math.sin(t * IDLE_FREQUENCY) * IDLE_SWING


def amplitude_series(times: Union[np.ndarray, list], speaking: bool,
                     base_frequency: float = BASE_FREQUENCY) -> np.ndarray:
    """Vectorized :func:`mouth_amplitude` over an array of times."""
    t = np.asarray(times, dtype=float)
    if speaking:
        return (np.sin(t * base_frequency) * SPEAKING_SWING + SPEAKING_OFFSET
                + np.sin(t * SECONDARY_FREQUENCY) * SECONDARY_SWING)
    return np.sin(t * IDLE_FREQUENCY) * IDLE_SWING


@dataclass(frozen=True)
class JawPose:
    """Values a renderer applies to the jaw bone, mouth morph and head mesh."""
    jaw_pitch: float = 0.0
    jaw_roll: float = 0.0
    mouth_open: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0

    @classmethod
    def from_amplitude(cls, amplitude: float) -> 'JawPose':
        return cls(
            jaw_pitch=amplitude * JAW_PITCH_GAIN,
            jaw_roll=amplitude * JAW_ROLL_GAIN,
            mouth_open=amplitude,
            scale_x=1.0 + amplitude * MOUTH_SCALE_X_GAIN,
            scale_y=1.0 + amplitude * MOUTH_SCALE_Y_GAIN,
        )


def relax_factor(dt: float, per_frame: float = RELAX_PER_FRAME, fps: float = REFERENCE_FPS) -> float:
    """Fraction of a pose kept after ``dt`` seconds of relaxing."""
    if dt <= 0:
        return 1.0
    return per_frame ** (dt * fps)


class MouthAnimator:
    """
    Turns (time, speaking) into a JawPose each frame.

    While speaking the pose follows the amplitude directly. While silent the
    jaw and morph relax toward rest by elapsed time, and the head keeps the
    small idle oscillation so the character never looks frozen.
    """

    def __init__(self, base_frequency: float = BASE_FREQUENCY):
        self.base_frequency = base_frequency
        self.pose = JawPose()
        self._last_time = None

    def update(self, t: float, speaking: bool) -> JawPose:
        dt = 0.0 if self._last_time is None else t - self._last_time
        self._last_time = t

        if speaking:
            self.pose = JawPose.from_amplitude(mouth_amplitude(t, True, self.base_frequency))
        else:
            keep = relax_factor(dt)
            idle = mouth_amplitude(t, False)
            self.pose = JawPose(
                jaw_pitch=self.pose.jaw_pitch * keep,
                jaw_roll=self.pose.jaw_roll * keep,
                mouth_open=self.pose.mouth_open * keep,
                scale_x=1.0 + idle * 0.5,
                scale_y=1.0 + idle,
            )
        return self.pose

    def reset(self):
        self.pose = JawPose()
        self._last_time = None
