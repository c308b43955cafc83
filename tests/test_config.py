from pathlib import Path

import pytest

from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.kinematics.swerve import SwerveDriveKinematics, SwerveModulePosition
from rc_localization.kinematics.differential import DifferentialDriveKinematics, DifferentialDriveWheelPositions
from rc_localization.kinematics.mecanum import MecanumDriveKinematics
from rc_localization.utils.config import (
    DrivetrainConfig, EstimatorConfig, SimConfig, build_estimator, build_kinematics, load_configs)

REPO_CONFIG = Path(__file__).resolve().parents[1] / "config" / "localization.yaml"


def test_repo_config_loads():
    drive, est, sim = load_configs(str(REPO_CONFIG))
    assert drive.type == "swerve"
    assert drive.translations[0] == Translation2d(0.3, 0.3)
    assert est.vision_std_devs == (3.0, 3.0, 1000.0)
    assert est.history_seconds == 1.5
    assert sim.rate_hz == 50.0


def test_missing_sections_use_defaults(tmp_path):
    p = tmp_path / "partial.yaml"
    p.write_text("drivetrain:\n  type: differential\n  trackwidth: 0.5\n")
    drive, est, sim = load_configs(str(p))
    assert drive.type == "differential" and drive.trackwidth == 0.5
    assert est == EstimatorConfig()
    assert sim == SimConfig()

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_configs(str(empty))[0] == DrivetrainConfig()


@pytest.mark.parametrize("make", [
    lambda: DrivetrainConfig(type="tank"),
    lambda: DrivetrainConfig(type="mecanum", module_positions=[[1, 1], [1, -1], [-1, 1]]),
    lambda: DrivetrainConfig(module_positions=[[0.3, 0.3]]),
    lambda: DrivetrainConfig(module_positions=[[0.3, 0.3, 0.0], [0.3, -0.3, 0.0]]),
    lambda: DrivetrainConfig(max_module_speed=0.0),
    lambda: EstimatorConfig(state_std_devs=(0.1, 0.1)),
    lambda: EstimatorConfig(vision_std_devs=(0.1, -0.1, 0.1)),
    lambda: EstimatorConfig(history_seconds=0.0),
    lambda: SimConfig(rate_hz=0.0),
    lambda: SimConfig(vision_latency_s=-0.01),
])
def test_invalid_config_is_rejected(make):
    with pytest.raises(ValueError):
        make()


def test_std_devs_are_normalized_to_tuples():
    cfg = EstimatorConfig(state_std_devs=[1, 2, 3])
    assert cfg.state_std_devs == (1.0, 2.0, 3.0)


def test_build_kinematics_per_type():
    assert isinstance(build_kinematics(DrivetrainConfig()), SwerveDriveKinematics)
    assert build_kinematics(DrivetrainConfig()).num_modules == 4
    assert isinstance(build_kinematics(DrivetrainConfig(type="differential")), DifferentialDriveKinematics)
    assert isinstance(build_kinematics(DrivetrainConfig(type="mecanum")), MecanumDriveKinematics)


def test_build_estimator_uses_config():
    kin = build_kinematics(DrivetrainConfig(type="differential", trackwidth=0.5))
    est = build_estimator(kin, Rotation2d(), DifferentialDriveWheelPositions(), None,
                          EstimatorConfig(state_std_devs=(0.1,) * 3, vision_std_devs=(0.1,) * 3,
                                          history_seconds=2.0))
    assert est.history_seconds == 2.0
    assert est.vision_gain == pytest.approx([0.5] * 3)

    swerve = build_kinematics(DrivetrainConfig())
    est = build_estimator(swerve, Rotation2d(), [SwerveModulePosition()] * 4, None, EstimatorConfig())
    assert est.get_estimated_pose().x == 0.0
