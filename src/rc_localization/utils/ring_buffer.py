from bisect import bisect_left, bisect_right
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


def _interpolate_method(start, end, t: float):
    return start.interpolate(end, t)


class TimeInterpolatableBuffer(Generic[T]):
    """
    Time-ordered history of samples covering the last `history_seconds`.

    - add_sample(t, v): strictly increasing times; an equal time overwrites,
      a time before the oldest retained sample is ignored
    - sample(t): clamp to the ends, otherwise interpolate between neighbours
    - samples older than newest - history_seconds are evicted on insert

    Not locked: the owner (PoseEstimator) serializes access.
    """
    def __init__(self, history_seconds: float,
                 interpolate: Optional[Callable[[T, T, float], T]] = None):
        if not history_seconds > 0.0:
            raise ValueError(f"history_seconds must be positive, got {history_seconds}")
        self.history_seconds = float(history_seconds)
        self._interpolate = interpolate or _interpolate_method
        self._times: List[float] = []
        self._values: List[T] = []

    @staticmethod
    def for_floats(history_seconds: float) -> "TimeInterpolatableBuffer[float]":
        return TimeInterpolatableBuffer(history_seconds, lambda a, b, t: a + (b - a) * t)

    def __len__(self) -> int:
        return len(self._times)

    def add_sample(self, time: float, value: T) -> None:
        times = self._times
        if not times or time > times[-1]:
            times.append(time)
            self._values.append(value)
        elif time < times[0]:
            return
        else:
            i = bisect_left(times, time)
            if times[i] == time:
                self._values[i] = value
            else:
                times.insert(i, time)
                self._values.insert(i, value)

        # evict everything older than the retention window
        cutoff = times[-1] - self.history_seconds
        n = bisect_left(times, cutoff)
        if n:
            del times[:n]
            del self._values[:n]

    def clear(self) -> None:
        self._times.clear()
        self._values.clear()

    def sample(self, time: float) -> Optional[T]:
        times = self._times
        if not times:
            return None
        if time <= times[0]:
            return self._values[0]
        if time >= times[-1]:
            return self._values[-1]

        hi = bisect_left(times, time)
        if times[hi] == time:
            return self._values[hi]
        lo = hi - 1
        frac = (time - times[lo]) / (times[hi] - times[lo])
        return self._interpolate(self._values[lo], self._values[hi], frac)

    def oldest(self) -> Optional[Tuple[float, T]]:
        return (self._times[0], self._values[0]) if self._times else None

    def latest(self) -> Optional[Tuple[float, T]]:
        return (self._times[-1], self._values[-1]) if self._times else None

    def floor(self, time: float) -> Optional[Tuple[float, T]]:
        """Newest sample at or before `time`, without interpolation."""
        i = bisect_right(self._times, time) - 1
        return (self._times[i], self._values[i]) if i >= 0 else None

    def items(self) -> List[Tuple[float, T]]:
        return list(zip(self._times, self._values))
