"""Ground-truth paths for simulation and tests."""
from dataclasses import dataclass, field
import math

from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Pose2d, Transform2d
from rc_localization.kinematics.chassis_speeds import ChassisSpeeds


@dataclass(frozen=True)
class FigureEightPath:
    """
    Two tangent circles of radius `radius` driven at constant `speed`:
    a counter-clockwise lobe, then a clockwise lobe, repeating. The robot
    always faces along the path, so the chassis command is (speed, 0, +-speed/radius).
    """
    speed: float
    radius: float
    start: Pose2d = field(default_factory=Pose2d)

    @property
    def lobe_time(self) -> float:
        return 2.0 * math.pi * self.radius / self.speed

    def _direction(self, t: float) -> float:
        return 1.0 if int(t // self.lobe_time) % 2 == 0 else -1.0

    def sample(self, t: float) -> Pose2d:
        phi = (t % self.lobe_time) * self.speed / self.radius
        d = self._direction(t)
        local = Transform2d(
            Translation2d(self.radius * math.sin(phi), d * self.radius * (1.0 - math.cos(phi))),
            Rotation2d.from_radians(d * phi),
        )
        return self.start + local

    def chassis_speeds(self, t: float) -> ChassisSpeeds:
        return ChassisSpeeds(self.speed, 0.0, self._direction(t) * self.speed / self.radius)
