from dataclasses import dataclass
from typing import Optional, Tuple

from rc_localization.geometry.pose import Pose2d

TimeS = float  # seconds, same time base as the control loop


@dataclass
class VisionMeasurement:
    t_capture: TimeS                                   # when the image was taken
    pose: Pose2d                                       # robot pose in the field frame
    std_devs: Optional[Tuple[float, float, float]] = None  # x m, y m, theta rad
    t_ready: TimeS = 0.0                               # when it reaches the estimator


@dataclass
class EstimatorState:
    t: TimeS
    X: float; Y: float; psi: float

    @staticmethod
    def from_pose(t: TimeS, pose: Pose2d) -> "EstimatorState":
        return EstimatorState(t, pose.x, pose.y, pose.rotation.radians)
