from dataclasses import dataclass

from rc_localization.utils.math import body_to_world, world_to_body
from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.pose import Pose2d


@dataclass(frozen=True)
class ChassisSpeeds:
    """Robot-relative velocity: vx forward (m/s), vy left (m/s), omega CCW (rad/s)."""
    vx: float = 0.0
    vy: float = 0.0
    omega: float = 0.0

    @staticmethod
    def from_field_relative_speeds(vx: float, vy: float, omega: float,
                                   robot_angle: Rotation2d) -> "ChassisSpeeds":
        bx, by = world_to_body(vx, vy, robot_angle.radians)
        return ChassisSpeeds(float(bx), float(by), omega)

    def to_field_relative(self, robot_angle: Rotation2d) -> "ChassisSpeeds":
        fx, fy = body_to_world(self.vx, self.vy, robot_angle.radians)
        return ChassisSpeeds(float(fx), float(fy), self.omega)

    @staticmethod
    def discretize(speeds: "ChassisSpeeds", dt: float) -> "ChassisSpeeds":
        """
        Speeds that, held for `dt` and integrated along an arc, end on the pose
        the continuous command would reach by straight-line extrapolation.
        Removes the sideways skew of translating while rotating.
        """
        desired = Pose2d.of(speeds.vx * dt, speeds.vy * dt, speeds.omega * dt)
        twist = Pose2d().log(desired)
        return ChassisSpeeds(twist.dx / dt, twist.dy / dt, twist.dtheta / dt)

    def is_zero(self) -> bool:
        return self.vx == 0.0 and self.vy == 0.0 and self.omega == 0.0

    def __add__(self, other: "ChassisSpeeds") -> "ChassisSpeeds":
        return ChassisSpeeds(self.vx + other.vx, self.vy + other.vy, self.omega + other.omega)

    def __sub__(self, other: "ChassisSpeeds") -> "ChassisSpeeds":
        return ChassisSpeeds(self.vx - other.vx, self.vy - other.vy, self.omega - other.omega)

    def __neg__(self) -> "ChassisSpeeds":
        return ChassisSpeeds(-self.vx, -self.vy, -self.omega)

    def __mul__(self, scalar: float) -> "ChassisSpeeds":
        return ChassisSpeeds(self.vx * scalar, self.vy * scalar, self.omega * scalar)

    def __truediv__(self, scalar: float) -> "ChassisSpeeds":
        return ChassisSpeeds(self.vx / scalar, self.vy / scalar, self.omega / scalar)
