"""
Latency-compensated pose estimator.

Fuses dead-reckoned odometry with delayed absolute pose measurements
(vision). Odometry poses are kept in a short time-indexed history; when a
measurement stamped in the past arrives, the estimate at that time is
pulled toward the measurement by a fixed per-axis gain, and the odometry
motion since then is replayed on top of the corrected pose.

Threading: one control loop calls update(); a vision producer may call
add_vision_measurement() from another thread. Every public call runs under
one lock.
"""
from bisect import bisect_right
from dataclasses import dataclass
import threading
from typing import Generic, List, Optional, Sequence, TypeVar

import numpy as np

from rc_localization.utils.math import as_std_devs
from rc_localization.utils.ring_buffer import TimeInterpolatableBuffer
from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Pose2d
from rc_localization.kinematics.base import Kinematics
from rc_localization.estimation.odometry import Odometry

P = TypeVar("P")

DEFAULT_STATE_STD_DEVS = (0.1, 0.1, 0.1)
DEFAULT_VISION_STD_DEVS = (0.9, 0.9, 0.9)
DEFAULT_HISTORY_SECONDS = 1.5


def correction_gain(state_std_devs: np.ndarray, measurement_std_devs: np.ndarray) -> np.ndarray:
    """
    Steady-state approximation of a Kalman gain, per axis:
        k = s / (s + sqrt(s * m))
    s = state (odometry) std dev, m = measurement std dev, clamped to [0, 1].
    """
    s = np.asarray(state_std_devs, dtype=float)
    m = np.asarray(measurement_std_devs, dtype=float)
    k = s / (s + np.sqrt(s * m))
    return np.clip(k, 0.0, 1.0)


@dataclass(frozen=True)
class VisionUpdate:
    """A correction: the fused pose and the raw odometry pose at the same instant."""
    vision_pose: Pose2d
    odometry_pose: Pose2d

    def compensate(self, pose: Pose2d) -> Pose2d:
        """Carry an odometry pose into the corrected frame of this update."""
        return self.vision_pose + (pose - self.odometry_pose)


class PoseEstimator(Generic[P]):
    def __init__(self, kinematics: Kinematics, gyro_angle: Rotation2d, wheel_positions: P,
                 initial_pose: Optional[Pose2d] = None,
                 state_std_devs: Sequence[float] = DEFAULT_STATE_STD_DEVS,
                 vision_std_devs: Sequence[float] = DEFAULT_VISION_STD_DEVS,
                 history_seconds: float = DEFAULT_HISTORY_SECONDS):
        self._state_std = as_std_devs(state_std_devs, "state_std_devs")
        self._vision_k = correction_gain(self._state_std, as_std_devs(vision_std_devs, "vision_std_devs"))

        self._lock = threading.Lock()
        self._odometry: Odometry[P] = Odometry(kinematics, gyro_angle, wheel_positions, initial_pose)
        self._odometry_buffer: TimeInterpolatableBuffer[Pose2d] = TimeInterpolatableBuffer(history_seconds)

        # time-ordered corrections, kept as parallel lists for bisect
        self._update_times: List[float] = []
        self._updates: List[VisionUpdate] = []

        self._estimate = self._odometry.pose

    # ---- Configuration
    @property
    def history_seconds(self) -> float:
        return self._odometry_buffer.history_seconds

    @property
    def vision_gain(self) -> np.ndarray:
        return self._vision_k.copy()

    def set_vision_measurement_std_devs(self, std_devs: Sequence[float]) -> None:
        k = correction_gain(self._state_std, as_std_devs(std_devs, "vision_std_devs"))
        with self._lock:
            self._vision_k = k

    # ---- Queries
    def get_estimated_pose(self) -> Pose2d:
        with self._lock:
            return self._estimate

    @property
    def odometry_pose(self) -> Pose2d:
        with self._lock:
            return self._odometry.pose

    def sample_at(self, timestamp: float) -> Optional[Pose2d]:
        """Fused estimate at a past time, or None before the first update."""
        with self._lock:
            return self._sample(timestamp)

    # ---- Resets (odometry, estimate and both histories change together)
    def reset_position(self, gyro_angle: Rotation2d, wheel_positions: P, pose: Pose2d) -> None:
        with self._lock:
            self._odometry.reset_position(gyro_angle, wheel_positions, pose)
            self._clear_history()

    def reset_pose(self, pose: Pose2d) -> None:
        with self._lock:
            self._odometry.reset_pose(pose)
            self._clear_history()

    def reset_translation(self, translation: Translation2d) -> None:
        with self._lock:
            self._odometry.reset_translation(translation)
            self._clear_history()

    def reset_rotation(self, rotation: Rotation2d) -> None:
        with self._lock:
            self._odometry.reset_rotation(rotation)
            self._clear_history()

    # ---- Hot path
    def update(self, timestamp: float, gyro_angle: Rotation2d, wheel_positions: P) -> Pose2d:
        with self._lock:
            odom = self._odometry.update(gyro_angle, wheel_positions)
            self._odometry_buffer.add_sample(timestamp, odom)
            self._estimate = self._updates[-1].compensate(odom) if self._updates else odom
            return self._estimate

    # ---- Delayed measurements
    def add_vision_measurement(self, pose: Pose2d, timestamp: float,
                               std_devs: Optional[Sequence[float]] = None) -> bool:
        """
        Fuse an absolute robot pose observed at `timestamp`.

        Returns False (and changes nothing) when there is no odometry yet or
        the timestamp falls outside the retained history.
        """
        k = self._vision_k if std_devs is None else \
            correction_gain(self._state_std, as_std_devs(std_devs, "std_devs"))

        with self._lock:
            latest = self._odometry_buffer.latest()
            if latest is None or timestamp < latest[0] - self._odometry_buffer.history_seconds:
                return False

            self._prune_updates()

            odometry_sample = self._odometry_buffer.sample(timestamp)
            fused_sample = self._sample(timestamp)

            # discrepancy in the tangent space at the measurement time, damped per axis
            twist = fused_sample.log(pose).scaled(float(k[0]), float(k[1]), float(k[2]))
            update = VisionUpdate(fused_sample.exp(twist), odometry_sample)

            # later corrections were computed against a history that no longer holds
            i = bisect_right(self._update_times, timestamp)
            if i > 0 and self._update_times[i - 1] == timestamp:
                i -= 1
            del self._update_times[i:]
            del self._updates[i:]
            self._update_times.append(timestamp)
            self._updates.append(update)

            self._estimate = update.compensate(self._odometry.pose)
            return True

    # ---- Internals (caller holds the lock)
    def _sample(self, timestamp: float) -> Optional[Pose2d]:
        oldest = self._odometry_buffer.oldest()
        if oldest is None:
            return None
        newest_t = self._odometry_buffer.latest()[0]
        timestamp = min(max(timestamp, oldest[0]), newest_t)

        odom = self._odometry_buffer.sample(timestamp)
        if not self._updates or timestamp < self._update_times[0]:
            return odom
        i = bisect_right(self._update_times, timestamp) - 1
        return self._updates[i].compensate(odom)

    def _prune_updates(self) -> None:
        """Drop corrections no retained odometry sample depends on (keep the newest of those)."""
        oldest = self._odometry_buffer.oldest()
        if oldest is None or not self._updates or oldest[0] < self._update_times[0]:
            return
        i = bisect_right(self._update_times, oldest[0]) - 1
        if i > 0:
            del self._update_times[:i]
            del self._updates[:i]

    def _clear_history(self) -> None:
        self._odometry_buffer.clear()
        self._update_times.clear()
        self._updates.clear()
        self._estimate = self._odometry.pose
