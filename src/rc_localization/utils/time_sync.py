import time
def now_s() -> float: return time.monotonic()
class Rate:
    """Paces a fixed-rate loop; sleep() waits out whatever is left of the period."""
    def __init__(self, hz: float):
        if not hz > 0.0:
            raise ValueError(f"rate must be positive, got {hz}")
        self.period = 1.0 / hz
        self._last = time.perf_counter()
    def sleep(self) -> float:
        now = time.perf_counter()
        rem = self.period - (now - self._last)
        if rem > 0: time.sleep(rem)
        self._last = time.perf_counter()
        return max(rem, 0.0)
