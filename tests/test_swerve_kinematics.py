import math

import pytest

from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.kinematics.chassis_speeds import ChassisSpeeds
from rc_localization.kinematics.swerve import (
    SwerveDriveKinematics, SwerveModulePosition, SwerveModuleState)

FL = Translation2d(12.0, 12.0)
FR = Translation2d(12.0, -12.0)
BL = Translation2d(-12.0, 12.0)
BR = Translation2d(-12.0, -12.0)


@pytest.fixture
def kin():
    return SwerveDriveKinematics(FL, FR, BL, BR)


def speeds_of(states):
    return [s.speed for s in states]


def degrees_of(states):
    return [s.angle.degrees for s in states]


# -------------------- Inverse kinematics --------------------

def test_straight_line(kin):
    states = kin.to_swerve_module_states(ChassisSpeeds(5.0, 0.0, 0.0))
    assert speeds_of(states) == pytest.approx([5.0] * 4)
    assert degrees_of(states) == pytest.approx([0.0] * 4, abs=1e-9)


def test_strafe(kin):
    states = kin.to_swerve_module_states(ChassisSpeeds(0.0, 5.0, 0.0))
    assert speeds_of(states) == pytest.approx([5.0] * 4)
    assert degrees_of(states) == pytest.approx([90.0] * 4)


def test_turn_in_place(kin):
    states = kin.to_swerve_module_states(ChassisSpeeds(0.0, 0.0, 2.0 * math.pi))
    assert speeds_of(states) == pytest.approx([2.0 * math.pi * math.hypot(12, 12)] * 4)
    assert degrees_of(states) == pytest.approx([135.0, 45.0, -135.0, -45.0])


def test_off_center_rotation(kin):
    states = kin.to_swerve_module_states(ChassisSpeeds(0.0, 0.0, 2.0 * math.pi), FL)
    assert speeds_of(states) == pytest.approx(
        [0.0, 2.0 * math.pi * 24.0, 2.0 * math.pi * 24.0, 2.0 * math.pi * math.hypot(24, 24)], abs=1e-9)
    assert degrees_of(states)[1:] == pytest.approx([0.0, -90.0, -45.0], abs=1e-9)
    # back to the centre: matrix is rebuilt
    straight = kin.to_swerve_module_states(ChassisSpeeds(0.0, 0.0, 1.0))
    assert speeds_of(straight) == pytest.approx([math.hypot(12, 12)] * 4)


def test_zero_command_holds_last_angles(kin):
    assert degrees_of(kin.to_swerve_module_states(ChassisSpeeds())) == pytest.approx([0.0] * 4)
    kin.to_swerve_module_states(ChassisSpeeds(0.0, 1.0, 0.0))
    held = kin.to_swerve_module_states(ChassisSpeeds())
    assert speeds_of(held) == [0.0] * 4
    assert degrees_of(held) == pytest.approx([90.0] * 4)


def test_reset_headings(kin):
    kin.reset_headings([Rotation2d.from_degrees(d) for d in (10, 20, 30, 40)])
    assert degrees_of(kin.to_swerve_module_states(ChassisSpeeds())) == pytest.approx([10, 20, 30, 40])
    with pytest.raises(ValueError):
        kin.reset_headings(Rotation2d())


# -------------------- Forward kinematics --------------------

def test_forward_turn_in_place(kin):
    states = [SwerveModuleState(106.63, Rotation2d.from_degrees(d)) for d in (135, 45, -135, -45)]
    s = kin.to_chassis_speeds(states)
    assert (s.vx, s.vy) == pytest.approx((0.0, 0.0), abs=1e-9)
    assert s.omega == pytest.approx(106.63 / math.hypot(12, 12))


@pytest.mark.parametrize("modules", [
    (FL, FR, BL, BR),
    (Translation2d(0.5, 0.0), Translation2d(-0.25, 0.43), Translation2d(-0.25, -0.43)),
    tuple(Translation2d(math.cos(a), math.sin(a)) for a in (0.0, 1.0, 2.0, 3.0, 4.0, 5.0)),
])
@pytest.mark.parametrize("cmd", [
    ChassisSpeeds(1.0, 0.0, 0.0),
    ChassisSpeeds(-0.5, 2.0, 1.5),
    ChassisSpeeds(0.3, -0.2, -3.0),
])
def test_module_states_round_trip(modules, cmd):
    k = SwerveDriveKinematics(*modules)
    back = k.to_chassis_speeds(k.to_swerve_module_states(cmd))
    assert (back.vx, back.vy, back.omega) == pytest.approx((cmd.vx, cmd.vy, cmd.omega), abs=1e-9)


def test_twist_from_module_distances(kin):
    start = [SwerveModulePosition() for _ in range(4)]
    end = [SwerveModulePosition(5.0, Rotation2d()) for _ in range(4)]
    t = kin.to_twist2d(start, end)
    assert (t.dx, t.dy, t.dtheta) == pytest.approx((5.0, 0.0, 0.0), abs=1e-9)

    d = 2.0 * math.pi * math.hypot(12, 12)
    end = [SwerveModulePosition(d, Rotation2d.from_degrees(a)) for a in (135, 45, -135, -45)]
    t = kin.to_twist2d(start, end)
    assert (t.dx, t.dy, t.dtheta) == pytest.approx((0.0, 0.0, 2.0 * math.pi), abs=1e-9)


def test_geometry_errors(kin):
    with pytest.raises(ValueError):
        SwerveDriveKinematics(FL)
    with pytest.raises(ValueError):
        kin.to_chassis_speeds([SwerveModuleState()] * 3)
    with pytest.raises(ValueError):
        kin.copy([SwerveModulePosition()] * 5)


# -------------------- Desaturation --------------------

def test_desaturate_scales_all_modules():
    states = [SwerveModuleState(s, Rotation2d()) for s in (5.0, 6.0, 4.0, 7.0)]
    out = SwerveDriveKinematics.desaturate_wheel_speeds(states, 5.5)
    k = 5.5 / 7.0
    assert speeds_of(out) == pytest.approx([5.0 * k, 6.0 * k, 4.0 * k, 5.5])
    assert max(abs(s) for s in speeds_of(out)) == pytest.approx(5.5)
    # ratios preserved
    assert out[0].speed / out[1].speed == pytest.approx(5.0 / 6.0)


def test_desaturate_is_noop_under_limit():
    states = [SwerveModuleState(s, Rotation2d()) for s in (1.0, -2.0)]
    assert SwerveDriveKinematics.desaturate_wheel_speeds(states, 3.0) == states


def test_desaturate_handles_negative_speeds():
    states = [SwerveModuleState(s, Rotation2d()) for s in (-8.0, 4.0)]
    out = SwerveDriveKinematics.desaturate_wheel_speeds(states, 4.0)
    assert speeds_of(out) == pytest.approx([-4.0, 2.0])


def test_desaturate_against_chassis_envelope(kin):
    states = kin.to_swerve_module_states(ChassisSpeeds(5.0, 0.0, 0.0))
    out = SwerveDriveKinematics.desaturate_wheel_speeds_for_chassis(
        states, ChassisSpeeds(5.0, 0.0, 0.0), 4.0, 5.0, 10.0)
    assert speeds_of(out) == pytest.approx([4.0] * 4)


# -------------------- Module optimization --------------------

def test_optimize_flips_large_steering_moves():
    opt = SwerveModuleState(2.0, Rotation2d.from_degrees(180)).optimize(Rotation2d())
    assert opt.speed == pytest.approx(-2.0)
    assert opt.angle.degrees == pytest.approx(0.0, abs=1e-9)

    keep = SwerveModuleState(2.0, Rotation2d.from_degrees(80)).optimize(Rotation2d())
    assert keep.speed == 2.0
    assert keep.angle.degrees == pytest.approx(80.0)


@pytest.mark.parametrize("desired", [-170, -95, -90, -30, 0, 45, 91, 135, 180])
@pytest.mark.parametrize("current", [-135, -10, 0, 60, 179])
def test_optimized_steering_delta_is_bounded(desired, current):
    cur = Rotation2d.from_degrees(current)
    state = SwerveModuleState(1.5, Rotation2d.from_degrees(desired))
    opt = state.optimize(cur)
    assert abs((opt.angle - cur).degrees) <= 90.0 + 1e-9
    # same wheel velocity vector either way
    assert opt.speed * opt.angle.cos == pytest.approx(state.speed * state.angle.cos, abs=1e-9)
    assert opt.speed * opt.angle.sin == pytest.approx(state.speed * state.angle.sin, abs=1e-9)


def test_cosine_scale():
    s = SwerveModuleState(2.0, Rotation2d.from_degrees(90)).cosine_scale(Rotation2d.from_degrees(30))
    assert s.speed == pytest.approx(1.0)
