from typing import Protocol, TypeVar

from rc_localization.geometry.pose import Twist2d
from rc_localization.kinematics.chassis_speeds import ChassisSpeeds

S = TypeVar("S")  # wheel speeds type
P = TypeVar("P")  # wheel positions type


class Kinematics(Protocol[S, P]):
    """
    What odometry and the pose estimator need from a drivetrain.

    Implementations: SwerveDriveKinematics, DifferentialDriveKinematics,
    MecanumDriveKinematics. Module geometry is fixed at construction.
    """
    @property
    def num_modules(self) -> int: ...

    def to_chassis_speeds(self, wheel_speeds: S) -> ChassisSpeeds: ...

    def to_wheel_speeds(self, chassis_speeds: ChassisSpeeds) -> S: ...

    def to_twist2d(self, start: P, end: P) -> Twist2d: ...

    def copy(self, positions: P) -> P: ...

    def interpolate(self, start: P, end: P, t: float) -> P: ...
