from typing import Generic, Optional, TypeVar

from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Pose2d, Twist2d
from rc_localization.kinematics.base import Kinematics

P = TypeVar("P")


class Odometry(Generic[P]):
    """
    Dead reckoning from wheel positions plus an absolute heading sensor.

    Translation comes from the kinematics twist between consecutive wheel
    position samples; the rotational part of that twist is replaced by the
    gyro delta, since wheel slip corrupts heading far more than distance.
    The gyro is not required to read zero at the start: an offset maps
    gyro angles onto field headings and is re-derived on every reset.
    """
    def __init__(self, kinematics: Kinematics, gyro_angle: Rotation2d,
                 wheel_positions: P, initial_pose: Optional[Pose2d] = None):
        self.kinematics = kinematics
        pose = initial_pose if initial_pose is not None else Pose2d()
        self._pose = pose
        self._gyro_offset = pose.rotation - gyro_angle
        self._previous_angle = pose.rotation
        self._previous_positions: P = kinematics.copy(wheel_positions)

    @property
    def pose(self) -> Pose2d:
        return self._pose

    def reset_position(self, gyro_angle: Rotation2d, wheel_positions: P, pose: Pose2d) -> None:
        self._pose = pose
        self._previous_angle = pose.rotation
        self._gyro_offset = pose.rotation - gyro_angle
        self._previous_positions = self.kinematics.copy(wheel_positions)

    def reset_pose(self, pose: Pose2d) -> None:
        """Move the pose without new sensor readings; the gyro offset follows the heading change."""
        self._gyro_offset = self._gyro_offset + (pose.rotation - self._pose.rotation)
        self._pose = pose
        self._previous_angle = pose.rotation

    def reset_translation(self, translation: Translation2d) -> None:
        self._pose = Pose2d(translation, self._pose.rotation)

    def reset_rotation(self, rotation: Rotation2d) -> None:
        self.reset_pose(Pose2d(self._pose.translation, rotation))

    def update(self, gyro_angle: Rotation2d, wheel_positions: P) -> Pose2d:
        angle = gyro_angle + self._gyro_offset

        twist = self.kinematics.to_twist2d(self._previous_positions, wheel_positions)
        twist = Twist2d(twist.dx, twist.dy, (angle - self._previous_angle).radians)

        moved = self._pose.exp(twist)
        self._previous_positions = self.kinematics.copy(wheel_positions)
        self._previous_angle = angle
        self._pose = Pose2d(moved.translation, angle)
        return self._pose
