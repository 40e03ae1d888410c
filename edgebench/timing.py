import time
from dataclasses import dataclass
from typing import Callable, Optional

ITERS = 10


@dataclass(frozen=True)
class TimingResult:
    label: str
    total: float  # seconds
    iterations: int

    @property
    def average(self) -> float:
        return self.total / self.iterations

    @property
    def total_ms(self) -> float:
        return self.total * 1e3

    @property
    def average_ms(self) -> float:
        return self.average * 1e3

    def line(self) -> str:
        return (f"{self.label} pipeline: {self.average_ms:.3f} ms/iter "
                f"({self.total_ms:.3f} ms total, {self.iterations} iters)")


def time_it(label: str, fn: Callable[[], object], iters: int = ITERS,
            sync: Optional[Callable[[], object]] = None,
            clock: Callable[[], float] = time.perf_counter) -> TimingResult:
    """
    Call `fn` `iters` times back to back and time the whole loop.

    `sync`, when given, runs once after the last call and before the clock is
    read (device work has to be complete to count). The first exception from
    `fn` or `sync` propagates; nothing is reported for a partial loop.
    """
    if iters < 1:
        raise ValueError(f"iters must be >= 1, got {iters}")
    t0 = clock()
    for _ in range(iters):
        fn()
    if sync is not None:
        sync()
    elapsed = clock() - t0
    return TimingResult(label, elapsed, iters)
