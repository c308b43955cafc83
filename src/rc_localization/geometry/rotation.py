from dataclasses import dataclass
import math

from rc_localization.utils.math import EPS, wrap_angle


@dataclass(frozen=True)
class Rotation2d:
    """
    Planar orientation stored as a unit (cos, sin) pair.

    The angle reported by `radians` is always in (-pi, pi]; composition is
    done on the unit circle so wrap-around never accumulates.
    """
    cos: float = 1.0
    sin: float = 0.0

    # ---- Construction
    @staticmethod
    def from_radians(rad: float) -> "Rotation2d":
        return Rotation2d(math.cos(rad), math.sin(rad))

    @staticmethod
    def from_degrees(deg: float) -> "Rotation2d":
        return Rotation2d.from_radians(math.radians(deg))

    @staticmethod
    def from_rotations(rot: float) -> "Rotation2d":
        return Rotation2d.from_radians(rot * 2.0 * math.pi)

    @staticmethod
    def from_components(x: float, y: float) -> "Rotation2d":
        """Direction of the vector (x, y); a zero vector maps to the zero rotation."""
        mag = math.hypot(x, y)
        if mag < EPS:
            return Rotation2d()
        return Rotation2d(x / mag, y / mag)

    # ---- Accessors
    @property
    def radians(self) -> float:
        return wrap_angle(math.atan2(self.sin, self.cos))

    @property
    def degrees(self) -> float:
        return math.degrees(self.radians)

    @property
    def rotations(self) -> float:
        return self.radians / (2.0 * math.pi)

    # ---- Algebra
    def rotate_by(self, other: "Rotation2d") -> "Rotation2d":
        return Rotation2d.from_components(
            self.cos * other.cos - self.sin * other.sin,
            self.cos * other.sin + self.sin * other.cos,
        )

    def __add__(self, other: "Rotation2d") -> "Rotation2d":
        return self.rotate_by(other)

    def __sub__(self, other: "Rotation2d") -> "Rotation2d":
        return self + (-other)

    def __neg__(self) -> "Rotation2d":
        return Rotation2d(self.cos, -self.sin)

    def __mul__(self, scalar: float) -> "Rotation2d":
        return Rotation2d.from_radians(self.radians * scalar)

    def __truediv__(self, scalar: float) -> "Rotation2d":
        return self * (1.0 / scalar)

    def interpolate(self, end: "Rotation2d", t: float) -> "Rotation2d":
        t = min(max(t, 0.0), 1.0)
        return self + (end - self) * t

    def __eq__(self, other) -> bool:
        if not isinstance(other, Rotation2d):
            return NotImplemented
        return math.hypot(self.cos - other.cos, self.sin - other.sin) < EPS

    def __hash__(self):
        return hash(round(self.radians, 9))

    def __repr__(self) -> str:
        return f"Rotation2d(deg={self.degrees:.3f})"
