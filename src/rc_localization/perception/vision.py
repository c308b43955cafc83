"""
Vision collaborator adapter.

A camera reports its own pose in the field (Pose3d); the estimator wants the
robot's floor pose. `SimulatedCamera` stands in for a real pipeline: it
captures noisy poses from ground truth at a fixed period and releases them
after a latency, optionally from a background thread that feeds an estimator
the way a real vision process would.
"""
from collections import deque
import threading
import time
from typing import Callable, Deque, List, Optional, Sequence

import numpy as np

from rc_localization.utils.messages import VisionMeasurement
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Pose2d
from rc_localization.geometry.pose3d import Pose3d, Rotation3d, Transform3d, Translation3d


def camera_to_robot_pose(camera_pose: Pose3d, robot_to_camera: Transform3d) -> Pose2d:
    """Robot floor pose from a field-frame camera pose and the camera mounting transform."""
    return (camera_pose + robot_to_camera.inverse()).to_pose2d()


class SimulatedCamera:
    def __init__(self, robot_to_camera: Transform3d, period_s: float, latency_s: float,
                 noise_m: float, noise_rad: float,
                 std_devs: Optional[Sequence[float]] = None,
                 rng: Optional[np.random.Generator] = None):
        self.robot_to_camera = robot_to_camera
        self.period_s = period_s
        self.latency_s = latency_s
        self.noise_m = noise_m
        self.noise_rad = noise_rad
        self.std_devs = tuple(std_devs) if std_devs is not None else None
        self._rng = rng if rng is not None else np.random.default_rng()

        self._pending: Deque[VisionMeasurement] = deque()
        self._last_capture: Optional[float] = None
        self._lock = threading.Lock()

        self._stop_evt = threading.Event()
        self._bg_thread: Optional[threading.Thread] = None

    # ---- Capture / delivery
    def observe(self, t: float, true_pose: Pose2d) -> Optional[VisionMeasurement]:
        """Capture a frame if a period has elapsed since the last one."""
        if self._last_capture is not None and t - self._last_capture < self.period_s - 1e-9:
            return None
        self._last_capture = t

        cam = Pose3d.from_pose2d(true_pose) + self.robot_to_camera
        nx, ny = self._rng.normal(0.0, self.noise_m, 2) if self.noise_m > 0 else (0.0, 0.0)
        nyaw = self._rng.normal(0.0, self.noise_rad) if self.noise_rad > 0 else 0.0
        noisy = Pose3d(
            cam.translation + Translation3d(float(nx), float(ny), 0.0),
            cam.rotation + Rotation3d.from_euler(0.0, 0.0, float(nyaw)),
        )
        m = VisionMeasurement(
            t_capture=t,
            pose=camera_to_robot_pose(noisy, self.robot_to_camera),
            std_devs=self.std_devs,
            t_ready=t + self.latency_s,
        )
        with self._lock:
            self._pending.append(m)
        return m

    def poll(self, now: float) -> List[VisionMeasurement]:
        """Measurements whose latency has elapsed by `now`, oldest first."""
        out = []
        with self._lock:
            while self._pending and self._pending[0].t_ready <= now:
                out.append(self._pending.popleft())
        return out

    # ---- Background delivery thread
    def start_background(self, estimator, clock: Callable[[], float], rate_hz: float = 100.0):
        """Push ready measurements into `estimator` from a separate thread."""
        if self._bg_thread and self._bg_thread.is_alive():
            return
        self._stop_evt.clear()
        period = 1.0 / max(1.0, rate_hz)

        def _loop():
            while not self._stop_evt.is_set():
                for m in self.poll(clock()):
                    estimator.add_vision_measurement(m.pose, m.t_capture, m.std_devs)
                time.sleep(period)

        self._bg_thread = threading.Thread(target=_loop, daemon=True)
        self._bg_thread.start()

    def stop_background(self):
        """Stop the delivery thread (safe to call multiple times)."""
        self._stop_evt.set()
        if self._bg_thread:
            self._bg_thread.join(timeout=1.0)
        self._bg_thread = None


def mounted_camera(height_m: float, pitch_rad: float = 0.0,
                   offset: Translation2d = Translation2d()) -> Transform3d:
    """Robot-to-camera transform for a camera at `offset` on the chassis, `height_m` up."""
    return Transform3d(Translation3d(offset.x, offset.y, height_m),
                       Rotation3d.from_euler(0.0, pitch_rad, 0.0))
