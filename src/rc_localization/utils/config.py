from dataclasses import dataclass, field
import math
from typing import Any, Dict, List, Sequence, Tuple

import yaml

from rc_localization.utils.math import as_std_devs
from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Pose2d
from rc_localization.kinematics.swerve import SwerveDriveKinematics
from rc_localization.kinematics.differential import DifferentialDriveKinematics
from rc_localization.kinematics.mecanum import MecanumDriveKinematics
from rc_localization.estimation.pose_estimator import PoseEstimator

DRIVETRAIN_TYPES = ("swerve", "differential", "mecanum")


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, 'r') as f: return yaml.safe_load(f) or {}


# -------------------- Drivetrain --------------------

@dataclass
class DrivetrainConfig:
    type: str = "swerve"
    # [x, y] per module in meters; FL, FR, RL, RR for mecanum
    module_positions: List[Sequence[float]] = field(default_factory=lambda: [
        [0.3, 0.3], [0.3, -0.3], [-0.3, 0.3], [-0.3, -0.3]])
    trackwidth: float = 0.6        # differential only
    max_module_speed: float = 4.5  # m/s

    def __post_init__(self):
        if self.type not in DRIVETRAIN_TYPES:
            raise ValueError(f"drivetrain type must be one of {DRIVETRAIN_TYPES}, got {self.type!r}")
        if self.type == "mecanum" and len(self.module_positions) != 4:
            raise ValueError(f"mecanum needs 4 wheel positions, got {len(self.module_positions)}")
        if self.type == "swerve" and len(self.module_positions) < 2:
            raise ValueError("swerve needs at least 2 module positions")
        for p in self.module_positions:
            if len(p) != 2:
                raise ValueError(f"module position must be [x, y], got {p!r}")
        if not self.max_module_speed > 0.0:
            raise ValueError("max_module_speed must be positive")

    @property
    def translations(self) -> Tuple[Translation2d, ...]:
        return tuple(Translation2d(float(x), float(y)) for x, y in self.module_positions)


# -------------------- Estimator --------------------

@dataclass
class EstimatorConfig:
    state_std_devs: Sequence[float] = (0.1, 0.1, 0.1)   # x m, y m, theta rad
    vision_std_devs: Sequence[float] = (0.9, 0.9, 0.9)
    history_seconds: float = 1.5

    def __post_init__(self):
        self.state_std_devs = tuple(as_std_devs(self.state_std_devs, "state_std_devs").tolist())
        self.vision_std_devs = tuple(as_std_devs(self.vision_std_devs, "vision_std_devs").tolist())
        if not (self.history_seconds > 0.0 and math.isfinite(self.history_seconds)):
            raise ValueError(f"history_seconds must be positive, got {self.history_seconds}")


# -------------------- Simulation --------------------

@dataclass
class SimConfig:
    rate_hz: float = 50.0
    duration_s: float = 20.0
    speed: float = 1.5             # m/s along the path
    radius: float = 1.5            # m, figure-eight lobe radius
    gyro_noise_rad: float = 0.05
    vision_period_s: float = 0.1
    vision_latency_s: float = 0.06
    vision_noise_m: float = 0.1
    vision_noise_rad: float = 0.1
    camera_height_m: float = 0.5
    seed: int = 0

    def __post_init__(self):
        for name in ("rate_hz", "duration_s", "speed", "radius", "vision_period_s"):
            if not getattr(self, name) > 0.0:
                raise ValueError(f"{name} must be positive")
        for name in ("gyro_noise_rad", "vision_latency_s", "vision_noise_m", "vision_noise_rad"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be non-negative")


# -------------------- Builders --------------------

def build_kinematics(cfg: DrivetrainConfig):
    if cfg.type == "differential":
        return DifferentialDriveKinematics(cfg.trackwidth)
    if cfg.type == "mecanum":
        return MecanumDriveKinematics(*cfg.translations)
    return SwerveDriveKinematics(*cfg.translations)


def build_estimator(kinematics, gyro_angle: Rotation2d, wheel_positions,
                    initial_pose: Pose2d, cfg: EstimatorConfig) -> PoseEstimator:
    return PoseEstimator(
        kinematics, gyro_angle, wheel_positions, initial_pose,
        state_std_devs=cfg.state_std_devs,
        vision_std_devs=cfg.vision_std_devs,
        history_seconds=cfg.history_seconds,
    )


def load_configs(path: str) -> Tuple[DrivetrainConfig, EstimatorConfig, SimConfig]:
    cfg = load_yaml(path)
    return (
        DrivetrainConfig(**cfg.get("drivetrain", {})),
        EstimatorConfig(**cfg.get("estimator", {})),
        SimConfig(**cfg.get("sim", {})),
    )
