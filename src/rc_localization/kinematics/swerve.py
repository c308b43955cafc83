"""
Swerve drive kinematics for N independently steered modules.

Inverse kinematics maps a chassis velocity onto one velocity vector per
module. Forward kinematics is the least-squares inverse of the same
linear system, computed once from the (immutable) module geometry.
"""
from dataclasses import dataclass, field
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from rc_localization.utils.math import clamp, lerp
from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Twist2d
from rc_localization.kinematics.chassis_speeds import ChassisSpeeds


@dataclass(frozen=True)
class SwerveModuleState:
    speed: float = 0.0           # m/s, signed
    angle: Rotation2d = field(default_factory=Rotation2d)

    def optimize(self, current_angle: Rotation2d) -> "SwerveModuleState":
        """
        Pick whichever of (angle, speed) and (angle + 180 deg, -speed) needs
        the smaller steering move from `current_angle`; the result never asks
        the module to steer more than 90 degrees.
        """
        delta = self.angle - current_angle
        if abs(delta.radians) > math.pi / 2.0:
            return SwerveModuleState(-self.speed, self.angle + Rotation2d(-1.0, 0.0))
        return self

    def cosine_scale(self, current_angle: Rotation2d) -> "SwerveModuleState":
        return SwerveModuleState(self.speed * (self.angle - current_angle).cos, self.angle)


@dataclass(frozen=True)
class SwerveModulePosition:
    distance: float = 0.0        # m, accumulated wheel travel
    angle: Rotation2d = field(default_factory=Rotation2d)

    def interpolate(self, end: "SwerveModulePosition", t: float) -> "SwerveModulePosition":
        t = clamp(t, 0.0, 1.0)
        return SwerveModulePosition(lerp(self.distance, end.distance, t),
                                    self.angle.interpolate(end.angle, t))


class SwerveDriveKinematics:
    def __init__(self, *module_locations: Translation2d):
        if len(module_locations) == 1 and not isinstance(module_locations[0], Translation2d):
            module_locations = tuple(module_locations[0])
        if len(module_locations) < 2:
            raise ValueError("swerve drive needs at least two modules")
        self._modules: Tuple[Translation2d, ...] = tuple(module_locations)
        self._headings: List[Rotation2d] = [Rotation2d() for _ in self._modules]

        self._inverse = self._inverse_matrix(Translation2d())
        self._forward = np.linalg.pinv(self._inverse)
        self._prev_cor = Translation2d()

    @property
    def num_modules(self) -> int:
        return len(self._modules)

    @property
    def module_locations(self) -> Tuple[Translation2d, ...]:
        return self._modules

    def _inverse_matrix(self, cor: Translation2d) -> np.ndarray:
        m = np.zeros((2 * len(self._modules), 3))
        for i, loc in enumerate(self._modules):
            rx, ry = loc.x - cor.x, loc.y - cor.y
            m[2 * i] = (1.0, 0.0, -ry)
            m[2 * i + 1] = (0.0, 1.0, rx)
        return m

    def _check(self, items: Sequence, what: str) -> None:
        if len(items) != len(self._modules):
            raise ValueError(f"expected {len(self._modules)} {what}, got {len(items)}")

    def reset_headings(self, *headings: Rotation2d) -> None:
        if len(headings) == 1 and not isinstance(headings[0], Rotation2d):
            headings = tuple(headings[0])
        self._check(headings, "module headings")
        self._headings = list(headings)

    # ---- Inverse kinematics
    def to_swerve_module_states(self, speeds: ChassisSpeeds,
                                center_of_rotation: Optional[Translation2d] = None) -> List[SwerveModuleState]:
        """
        Module states for a chassis velocity. A module asked for zero speed
        keeps its last commanded angle instead of snapping to 0 deg.
        """
        cor = center_of_rotation if center_of_rotation is not None else Translation2d()
        if cor != self._prev_cor:
            self._inverse = self._inverse_matrix(cor)
            self._prev_cor = cor

        if speeds.is_zero():
            return [SwerveModuleState(0.0, h) for h in self._headings]

        v = self._inverse @ np.array([speeds.vx, speeds.vy, speeds.omega])
        states = []
        for i in range(len(self._modules)):
            x, y = float(v[2 * i]), float(v[2 * i + 1])
            speed = math.hypot(x, y)
            if speed > 1e-12:
                self._headings[i] = Rotation2d.from_components(x, y)
            states.append(SwerveModuleState(speed, self._headings[i]))
        return states

    to_wheel_speeds = to_swerve_module_states

    # ---- Forward kinematics
    def to_chassis_speeds(self, states: Sequence[SwerveModuleState]) -> ChassisSpeeds:
        self._check(states, "module states")
        v = np.empty(2 * len(states))
        for i, s in enumerate(states):
            v[2 * i] = s.speed * s.angle.cos
            v[2 * i + 1] = s.speed * s.angle.sin
        vx, vy, omega = self._forward @ v
        return ChassisSpeeds(float(vx), float(vy), float(omega))

    def to_twist2d(self, start: Sequence[SwerveModulePosition],
                   end: Sequence[SwerveModulePosition]) -> Twist2d:
        """Chassis displacement from the change in module distances between two samples."""
        self._check(start, "module positions")
        self._check(end, "module positions")
        v = np.empty(2 * len(end))
        for i, (a, b) in enumerate(zip(start, end)):
            d = b.distance - a.distance
            v[2 * i] = d * b.angle.cos
            v[2 * i + 1] = d * b.angle.sin
        dx, dy, dtheta = self._forward @ v
        return Twist2d(float(dx), float(dy), float(dtheta))

    def copy(self, positions: Sequence[SwerveModulePosition]) -> Tuple[SwerveModulePosition, ...]:
        self._check(positions, "module positions")
        return tuple(positions)

    def interpolate(self, start, end, t: float) -> Tuple[SwerveModulePosition, ...]:
        self._check(start, "module positions")
        self._check(end, "module positions")
        return tuple(a.interpolate(b, t) for a, b in zip(start, end))

    # ---- Desaturation
    @staticmethod
    def desaturate_wheel_speeds(states: Sequence[SwerveModuleState],
                                max_speed: float) -> List[SwerveModuleState]:
        """
        If any module exceeds `max_speed`, scale every module by the same factor
        so the fastest sits exactly at the limit. Angles are untouched.
        """
        real_max = max(abs(s.speed) for s in states)
        if real_max <= max_speed:
            return list(states)
        k = max_speed / real_max
        return [SwerveModuleState(s.speed * k, s.angle) for s in states]

    @staticmethod
    def desaturate_wheel_speeds_for_chassis(states: Sequence[SwerveModuleState],
                                            desired: ChassisSpeeds,
                                            max_module_speed: float,
                                            max_translation_speed: float,
                                            max_rotation_speed: float) -> List[SwerveModuleState]:
        """
        Desaturate against the attainable chassis envelope: translation and
        rotation share the module speed limit in proportion to how much of
        their own maximum the request uses.
        """
        real_max = max(abs(s.speed) for s in states)
        if max_translation_speed == 0.0 or max_rotation_speed == 0.0 or real_max < 1e-12:
            return list(states)
        k_trans = math.hypot(desired.vx, desired.vy) / max_translation_speed
        k_rot = abs(desired.omega / max_rotation_speed)
        k = max(k_trans, k_rot)
        scale = min(k * max_module_speed / real_max, 1.0)
        return [SwerveModuleState(s.speed * scale, s.angle) for s in states]
