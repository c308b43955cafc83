"""
Planar rigid-motion algebra: Pose2d, Transform2d, Twist2d.

Poses live in the field frame. A Transform2d is the motion between two
poses expressed in the first pose's frame, and a Twist2d is a body-frame
displacement along a constant-curvature arc. `Pose2d.exp` integrates a
twist exactly; `Pose2d.log` is its inverse.
"""
from dataclasses import dataclass, field
import math
from typing import Iterable

from rc_localization.utils.math import EPS
from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d

# Below this |dtheta| the closed forms switch to their Taylor expansions
SMALL_ANGLE = 1e-9


@dataclass(frozen=True)
class Twist2d:
    dx: float = 0.0
    dy: float = 0.0
    dtheta: float = 0.0

    def __add__(self, other: "Twist2d") -> "Twist2d":
        return Twist2d(self.dx + other.dx, self.dy + other.dy, self.dtheta + other.dtheta)

    def __mul__(self, scalar: float) -> "Twist2d":
        return Twist2d(self.dx * scalar, self.dy * scalar, self.dtheta * scalar)

    def scaled(self, kx: float, ky: float, ktheta: float) -> "Twist2d":
        return Twist2d(self.dx * kx, self.dy * ky, self.dtheta * ktheta)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Twist2d):
            return NotImplemented
        return (abs(self.dx - other.dx) < EPS
                and abs(self.dy - other.dy) < EPS
                and abs(self.dtheta - other.dtheta) < EPS)

    def __hash__(self):
        return hash((round(self.dx, 9), round(self.dy, 9), round(self.dtheta, 9)))


@dataclass(frozen=True)
class Transform2d:
    translation: Translation2d = field(default_factory=Translation2d)
    rotation: Rotation2d = field(default_factory=Rotation2d)

    @staticmethod
    def between(initial: "Pose2d", final: "Pose2d") -> "Transform2d":
        return Transform2d(
            (final.translation - initial.translation).rotate_by(-initial.rotation),
            final.rotation - initial.rotation,
        )

    @property
    def x(self) -> float:
        return self.translation.x

    @property
    def y(self) -> float:
        return self.translation.y

    def inverse(self) -> "Transform2d":
        return Transform2d((-self.translation).rotate_by(-self.rotation), -self.rotation)

    def __add__(self, other: "Transform2d") -> "Transform2d":
        return Transform2d.between(Pose2d(), Pose2d().transform_by(self).transform_by(other))

    def __mul__(self, scalar: float) -> "Transform2d":
        return Transform2d(self.translation * scalar, self.rotation * scalar)

    def __truediv__(self, scalar: float) -> "Transform2d":
        return self * (1.0 / scalar)


@dataclass(frozen=True)
class Pose2d:
    translation: Translation2d = field(default_factory=Translation2d)
    rotation: Rotation2d = field(default_factory=Rotation2d)

    @staticmethod
    def of(x: float, y: float, theta: float = 0.0) -> "Pose2d":
        return Pose2d(Translation2d(x, y), Rotation2d.from_radians(theta))

    @property
    def x(self) -> float:
        return self.translation.x

    @property
    def y(self) -> float:
        return self.translation.y

    # ---- Composition
    def transform_by(self, other: Transform2d) -> "Pose2d":
        return Pose2d(
            self.translation + other.translation.rotate_by(self.rotation),
            other.rotation + self.rotation,
        )

    def relative_to(self, other: "Pose2d") -> "Pose2d":
        t = Transform2d.between(other, self)
        return Pose2d(t.translation, t.rotation)

    def __add__(self, other: Transform2d) -> "Pose2d":
        return self.transform_by(other)

    def __sub__(self, other: "Pose2d") -> Transform2d:
        p = self.relative_to(other)
        return Transform2d(p.translation, p.rotation)

    def __mul__(self, scalar: float) -> "Pose2d":
        return Pose2d(self.translation * scalar, self.rotation * scalar)

    def __truediv__(self, scalar: float) -> "Pose2d":
        return self * (1.0 / scalar)

    # ---- Exponential / logarithm maps
    def exp(self, twist: Twist2d) -> "Pose2d":
        """
        Integrate a body-frame twist as constant-curvature motion.

        For |dtheta| < SMALL_ANGLE uses sin(t)/t ~ 1 - t^2/6 and
        (1 - cos t)/t ~ t/2 so straight-line motion never divides by zero.
        """
        dx, dy, dtheta = twist.dx, twist.dy, twist.dtheta
        sin_t = math.sin(dtheta)
        cos_t = math.cos(dtheta)
        if abs(dtheta) < SMALL_ANGLE:
            s = 1.0 - dtheta * dtheta / 6.0
            c = 0.5 * dtheta
        else:
            s = sin_t / dtheta
            c = (1.0 - cos_t) / dtheta
        step = Transform2d(
            Translation2d(dx * s - dy * c, dx * c + dy * s),
            Rotation2d(cos_t, sin_t),
        )
        return self + step

    def log(self, end: "Pose2d") -> Twist2d:
        """Twist that, applied to this pose with `exp`, yields `end`."""
        t = end.relative_to(self)
        dtheta = t.rotation.radians
        half = 0.5 * dtheta
        cos_minus_one = t.rotation.cos - 1.0
        if abs(cos_minus_one) < SMALL_ANGLE:
            half_by_tan = 1.0 - dtheta * dtheta / 12.0
        else:
            half_by_tan = -(half * t.rotation.sin) / cos_minus_one
        part = t.translation.rotate_by(Rotation2d.from_components(half_by_tan, -half)) \
            * math.hypot(half_by_tan, half)
        return Twist2d(part.x, part.y, dtheta)

    # ---- Interpolation / search
    def interpolate(self, end: "Pose2d", t: float) -> "Pose2d":
        """Linear in translation, shortest arc in rotation; t clamped to [0, 1]."""
        if t <= 0.0:
            return self
        if t >= 1.0:
            return end
        return Pose2d(
            self.translation.interpolate(end.translation, t),
            self.rotation.interpolate(end.rotation, t),
        )

    def nearest(self, poses: Iterable["Pose2d"]) -> "Pose2d":
        return min(
            poses,
            key=lambda p: (round(self.translation.distance(p.translation), 9),
                           abs((p.rotation - self.rotation).radians)),
        )
