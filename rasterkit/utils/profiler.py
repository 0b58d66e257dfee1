"""Lightweight wall-clock profiling.

Provides:
    - timer(): context manager for wall-clock timing with optional sink

Used to measure scene rendering and per-shape cost in render_scene.py.
No heavy dependencies (no cProfile overhead in the draw loop).
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(name: str, sink: Optional[Callable[[str, float], None]] = None):
    """Context manager for wall-clock timing.

    Parameters
    ----------
    name : str
        Timer name (for logging/display)
    sink : Optional[Callable[[str, float], None]]
        Optional callback(name, elapsed_seconds).
        If None, the timing is logged at DEBUG.

    Examples
    --------
    >>> with timer("render_scene"):
    ...     surface = render_scene(scene)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if sink is not None:
            sink(name, elapsed)
        else:
            logger.debug(f"{name}: {elapsed:.4f} s")


class TimingCollector:
    """Accumulates timer() results by name.

    Examples
    --------
    >>> timings = TimingCollector()
    >>> with timer("fill_tri", sink=timings):
    ...     g.fill_tri(tri, Color.RED)
    >>> timings.summary()["fill_tri"]["count"]
    1
    """

    def __init__(self):
        self._samples: Dict[str, List[float]] = {}

    def __call__(self, name: str, elapsed: float) -> None:
        self._samples.setdefault(name, []).append(elapsed)

    def summary(self) -> Dict[str, Dict[str, float]]:
        """Per-name count, total and mean seconds."""
        out = {}
        for name, samples in self._samples.items():
            total = sum(samples)
            out[name] = {
                'count': len(samples),
                'total_s': total,
                'mean_s': total / len(samples),
            }
        return out
