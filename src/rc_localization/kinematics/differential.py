from dataclasses import dataclass

from rc_localization.utils.math import clamp, lerp
from rc_localization.geometry.pose import Twist2d
from rc_localization.kinematics.chassis_speeds import ChassisSpeeds


@dataclass(frozen=True)
class DifferentialDriveWheelSpeeds:
    left: float = 0.0    # m/s
    right: float = 0.0   # m/s

    def desaturate(self, max_speed: float) -> "DifferentialDriveWheelSpeeds":
        real_max = max(abs(self.left), abs(self.right))
        if real_max <= max_speed:
            return self
        k = max_speed / real_max
        return DifferentialDriveWheelSpeeds(self.left * k, self.right * k)


@dataclass(frozen=True)
class DifferentialDriveWheelPositions:
    left: float = 0.0    # m
    right: float = 0.0   # m

    def interpolate(self, end: "DifferentialDriveWheelPositions", t: float) -> "DifferentialDriveWheelPositions":
        t = clamp(t, 0.0, 1.0)
        return DifferentialDriveWheelPositions(lerp(self.left, end.left, t), lerp(self.right, end.right, t))


class DifferentialDriveKinematics:
    """
    Two fixed wheels `trackwidth` apart. The drivetrain cannot strafe, so a
    commanded vy is dropped (least-squares fit) rather than rejected.
    """
    num_modules = 2

    def __init__(self, trackwidth: float):
        if not trackwidth > 0.0:
            raise ValueError(f"trackwidth must be positive, got {trackwidth}")
        self.trackwidth = float(trackwidth)

    def to_wheel_speeds(self, speeds: ChassisSpeeds) -> DifferentialDriveWheelSpeeds:
        half = 0.5 * self.trackwidth * speeds.omega
        return DifferentialDriveWheelSpeeds(speeds.vx - half, speeds.vx + half)

    def to_chassis_speeds(self, wheels: DifferentialDriveWheelSpeeds) -> ChassisSpeeds:
        return ChassisSpeeds(
            0.5 * (wheels.left + wheels.right),
            0.0,
            (wheels.right - wheels.left) / self.trackwidth,
        )

    def to_twist2d(self, start: DifferentialDriveWheelPositions,
                   end: DifferentialDriveWheelPositions) -> Twist2d:
        dl = end.left - start.left
        dr = end.right - start.right
        return Twist2d(0.5 * (dl + dr), 0.0, (dr - dl) / self.trackwidth)

    def copy(self, positions: DifferentialDriveWheelPositions) -> DifferentialDriveWheelPositions:
        if not isinstance(positions, DifferentialDriveWheelPositions):
            raise ValueError(f"expected DifferentialDriveWheelPositions, got {type(positions).__name__}")
        return positions

    def interpolate(self, start, end, t: float) -> DifferentialDriveWheelPositions:
        return start.interpolate(end, t)
