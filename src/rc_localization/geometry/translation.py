from dataclasses import dataclass
import math

from rc_localization.utils.math import EPS, lerp
from rc_localization.geometry.rotation import Rotation2d


@dataclass(frozen=True)
class Translation2d:
    x: float = 0.0
    y: float = 0.0

    @property
    def norm(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def angle(self) -> Rotation2d:
        return Rotation2d.from_components(self.x, self.y)

    def distance(self, other: "Translation2d") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def rotate_by(self, rot: Rotation2d) -> "Translation2d":
        return Translation2d(
            self.x * rot.cos - self.y * rot.sin,
            self.x * rot.sin + self.y * rot.cos,
        )

    def rotate_around(self, other: "Translation2d", rot: Rotation2d) -> "Translation2d":
        return (self - other).rotate_by(rot) + other

    def interpolate(self, end: "Translation2d", t: float) -> "Translation2d":
        t = min(max(t, 0.0), 1.0)
        return Translation2d(lerp(self.x, end.x, t), lerp(self.y, end.y, t))

    def nearest(self, translations) -> "Translation2d":
        return min(translations, key=self.distance)

    def __add__(self, other: "Translation2d") -> "Translation2d":
        return Translation2d(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Translation2d") -> "Translation2d":
        return Translation2d(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Translation2d":
        return Translation2d(-self.x, -self.y)

    def __mul__(self, scalar: float) -> "Translation2d":
        return Translation2d(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> "Translation2d":
        return Translation2d(self.x / scalar, self.y / scalar)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Translation2d):
            return NotImplemented
        return abs(self.x - other.x) < EPS and abs(self.y - other.y) < EPS

    def __hash__(self):
        return hash((round(self.x, 9), round(self.y, 9)))
