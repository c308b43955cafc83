from dataclasses import dataclass, astuple

import numpy as np

from rc_localization.utils.math import clamp, lerp
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Twist2d
from rc_localization.kinematics.chassis_speeds import ChassisSpeeds


@dataclass(frozen=True)
class MecanumDriveWheelSpeeds:
    front_left: float = 0.0
    front_right: float = 0.0
    rear_left: float = 0.0
    rear_right: float = 0.0

    def desaturate(self, max_speed: float) -> "MecanumDriveWheelSpeeds":
        speeds = astuple(self)
        real_max = max(abs(s) for s in speeds)
        if real_max <= max_speed:
            return self
        k = max_speed / real_max
        return MecanumDriveWheelSpeeds(*(s * k for s in speeds))


@dataclass(frozen=True)
class MecanumDriveWheelPositions:
    front_left: float = 0.0
    front_right: float = 0.0
    rear_left: float = 0.0
    rear_right: float = 0.0

    def interpolate(self, end: "MecanumDriveWheelPositions", t: float) -> "MecanumDriveWheelPositions":
        t = clamp(t, 0.0, 1.0)
        return MecanumDriveWheelPositions(*(lerp(a, b, t) for a, b in zip(astuple(self), astuple(end))))


class MecanumDriveKinematics:
    """Four 45-degree roller wheels; order is front-left, front-right, rear-left, rear-right."""
    num_modules = 4

    def __init__(self, front_left: Translation2d, front_right: Translation2d,
                 rear_left: Translation2d, rear_right: Translation2d):
        fl, fr, rl, rr = front_left, front_right, rear_left, rear_right
        self.wheel_locations = (fl, fr, rl, rr)
        self._inverse = np.array([
            [1.0, -1.0, -(fl.x + fl.y)],
            [1.0, 1.0, fr.x - fr.y],
            [1.0, 1.0, rl.x - rl.y],
            [1.0, -1.0, -(rr.x + rr.y)],
        ])
        if np.linalg.matrix_rank(self._inverse) < 3:
            raise ValueError("mecanum wheel locations are degenerate")
        self._forward = np.linalg.pinv(self._inverse)

    def to_wheel_speeds(self, speeds: ChassisSpeeds) -> MecanumDriveWheelSpeeds:
        w = self._inverse @ np.array([speeds.vx, speeds.vy, speeds.omega])
        return MecanumDriveWheelSpeeds(*(float(v) for v in w))

    def to_chassis_speeds(self, wheels: MecanumDriveWheelSpeeds) -> ChassisSpeeds:
        vx, vy, omega = self._forward @ np.array(astuple(wheels))
        return ChassisSpeeds(float(vx), float(vy), float(omega))

    def to_twist2d(self, start: MecanumDriveWheelPositions,
                   end: MecanumDriveWheelPositions) -> Twist2d:
        d = np.array(astuple(end)) - np.array(astuple(start))
        dx, dy, dtheta = self._forward @ d
        return Twist2d(float(dx), float(dy), float(dtheta))

    def copy(self, positions: MecanumDriveWheelPositions) -> MecanumDriveWheelPositions:
        if not isinstance(positions, MecanumDriveWheelPositions):
            raise ValueError(f"expected MecanumDriveWheelPositions, got {type(positions).__name__}")
        return positions

    def interpolate(self, start, end, t: float) -> MecanumDriveWheelPositions:
        return start.interpolate(end, t)
