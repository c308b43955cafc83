"""
Spatial poses for sensors mounted off the drive plane (e.g. cameras).

Only what the vision path needs: compose/invert 3-D transforms and project
a Pose3d onto the floor as a Pose2d.
"""
from dataclasses import dataclass, field
import math

import numpy as np

from rc_localization.utils.math import EPS
from rc_localization.geometry.rotation import Rotation2d
from rc_localization.geometry.translation import Translation2d
from rc_localization.geometry.pose import Pose2d


@dataclass(frozen=True)
class Quaternion:
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def conjugate(self) -> "Quaternion":
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def norm(self) -> float:
        return math.sqrt(self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2)

    def inverse(self) -> "Quaternion":
        n2 = self.norm() ** 2
        c = self.conjugate()
        return Quaternion(c.w / n2, c.x / n2, c.y / n2, c.z / n2)

    def normalize(self) -> "Quaternion":
        n = self.norm()
        if n < EPS:
            return Quaternion()
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def dot(self, other: "Quaternion") -> float:
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z


@dataclass(frozen=True)
class Rotation3d:
    q: Quaternion = field(default_factory=Quaternion)

    def __post_init__(self):
        object.__setattr__(self, "q", self.q.normalize())

    @staticmethod
    def from_euler(roll: float, pitch: float, yaw: float) -> "Rotation3d":
        """Extrinsic roll (x), then pitch (y), then yaw (z); radians."""
        cr, sr = math.cos(roll * 0.5), math.sin(roll * 0.5)
        cp, sp = math.cos(pitch * 0.5), math.sin(pitch * 0.5)
        cy, sy = math.cos(yaw * 0.5), math.sin(yaw * 0.5)
        return Rotation3d(Quaternion(
            cr * cp * cy + sr * sp * sy,
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
        ))

    @staticmethod
    def from_axis_angle(axis, angle: float) -> "Rotation3d":
        axis = np.asarray(axis, dtype=float)
        n = float(np.linalg.norm(axis))
        if n < EPS:
            return Rotation3d()
        v = axis / n * math.sin(angle * 0.5)
        return Rotation3d(Quaternion(math.cos(angle * 0.5), float(v[0]), float(v[1]), float(v[2])))

    @property
    def roll(self) -> float:
        w, x, y, z = self.q.w, self.q.x, self.q.y, self.q.z
        return math.atan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))

    @property
    def pitch(self) -> float:
        w, x, y, z = self.q.w, self.q.x, self.q.y, self.q.z
        ratio = 2.0 * (w * y - z * x)
        if abs(ratio) >= 1.0:
            return math.copysign(math.pi / 2.0, ratio)
        return math.asin(ratio)

    @property
    def yaw(self) -> float:
        w, x, y, z = self.q.w, self.q.x, self.q.y, self.q.z
        return math.atan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))

    @property
    def angle(self) -> float:
        v = math.sqrt(self.q.x ** 2 + self.q.y ** 2 + self.q.z ** 2)
        return 2.0 * math.atan2(v, self.q.w)

    def to_matrix(self) -> np.ndarray:
        w, x, y, z = self.q.w, self.q.x, self.q.y, self.q.z
        return np.array([
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ])

    def to_rotation2d(self) -> Rotation2d:
        return Rotation2d.from_radians(self.yaw)

    def rotate_by(self, other: "Rotation3d") -> "Rotation3d":
        return Rotation3d(other.q * self.q)

    def __add__(self, other: "Rotation3d") -> "Rotation3d":
        return self.rotate_by(other)

    def __sub__(self, other: "Rotation3d") -> "Rotation3d":
        return self + (-other)

    def __neg__(self) -> "Rotation3d":
        return Rotation3d(self.q.inverse())

    def __mul__(self, scalar: float) -> "Rotation3d":
        # scale the rotation angle about the same axis
        q = self.q
        if q.w >= 0.0:
            return Rotation3d.from_axis_angle((q.x, q.y, q.z), 2.0 * scalar * math.acos(min(q.w, 1.0)))
        return Rotation3d.from_axis_angle((-q.x, -q.y, -q.z), 2.0 * scalar * math.acos(min(-q.w, 1.0)))

    def __truediv__(self, scalar: float) -> "Rotation3d":
        return self * (1.0 / scalar)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Rotation3d):
            return NotImplemented
        return abs(abs(self.q.dot(other.q)) - 1.0) < EPS

    def __hash__(self):
        return hash(tuple(round(v, 9) for v in (self.roll, self.pitch, self.yaw)))


@dataclass(frozen=True)
class Translation3d:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def norm(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)

    def distance(self, other: "Translation3d") -> float:
        return (other - self).norm

    def rotate_by(self, rot: Rotation3d) -> "Translation3d":
        p = rot.q * Quaternion(0.0, self.x, self.y, self.z) * rot.q.inverse()
        return Translation3d(p.x, p.y, p.z)

    def to_translation2d(self) -> Translation2d:
        return Translation2d(self.x, self.y)

    def __add__(self, other: "Translation3d") -> "Translation3d":
        return Translation3d(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Translation3d") -> "Translation3d":
        return Translation3d(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Translation3d":
        return Translation3d(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> "Translation3d":
        return Translation3d(self.x * scalar, self.y * scalar, self.z * scalar)

    def __truediv__(self, scalar: float) -> "Translation3d":
        return self * (1.0 / scalar)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Translation3d):
            return NotImplemented
        return self.distance(other) < EPS

    def __hash__(self):
        return hash((round(self.x, 9), round(self.y, 9), round(self.z, 9)))


@dataclass(frozen=True)
class Transform3d:
    translation: Translation3d = field(default_factory=Translation3d)
    rotation: Rotation3d = field(default_factory=Rotation3d)

    @staticmethod
    def between(initial: "Pose3d", final: "Pose3d") -> "Transform3d":
        return Transform3d(
            (final.translation - initial.translation).rotate_by(-initial.rotation),
            final.rotation - initial.rotation,
        )

    @property
    def x(self) -> float:
        return self.translation.x

    @property
    def y(self) -> float:
        return self.translation.y

    @property
    def z(self) -> float:
        return self.translation.z

    def inverse(self) -> "Transform3d":
        return Transform3d((-self.translation).rotate_by(-self.rotation), -self.rotation)

    def __add__(self, other: "Transform3d") -> "Transform3d":
        return Transform3d.between(Pose3d(), Pose3d().transform_by(self).transform_by(other))

    def __mul__(self, scalar: float) -> "Transform3d":
        return Transform3d(self.translation * scalar, self.rotation * scalar)

    def __truediv__(self, scalar: float) -> "Transform3d":
        return self * (1.0 / scalar)


@dataclass(frozen=True)
class Pose3d:
    translation: Translation3d = field(default_factory=Translation3d)
    rotation: Rotation3d = field(default_factory=Rotation3d)

    @staticmethod
    def from_pose2d(pose: Pose2d) -> "Pose3d":
        return Pose3d(
            Translation3d(pose.x, pose.y, 0.0),
            Rotation3d.from_euler(0.0, 0.0, pose.rotation.radians),
        )

    def transform_by(self, other: Transform3d) -> "Pose3d":
        return Pose3d(
            self.translation + other.translation.rotate_by(self.rotation),
            other.rotation + self.rotation,
        )

    def relative_to(self, other: "Pose3d") -> "Pose3d":
        t = Transform3d.between(other, self)
        return Pose3d(t.translation, t.rotation)

    def __add__(self, other: Transform3d) -> "Pose3d":
        return self.transform_by(other)

    def __sub__(self, other: "Pose3d") -> Transform3d:
        p = self.relative_to(other)
        return Transform3d(p.translation, p.rotation)

    def to_pose2d(self) -> Pose2d:
        return Pose2d(self.translation.to_translation2d(), self.rotation.to_rotation2d())
