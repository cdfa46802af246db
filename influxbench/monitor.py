"""
Host resource sampling while the benchmark runs.
"""

import asyncio
import statistics
from dataclasses import dataclass
from typing import List, Optional

import psutil

from influxbench.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResourceUsage:
    avg_cpu_percent: float
    max_cpu_percent: float
    avg_memory_mb: float
    max_memory_mb: float

    def __str__(self) -> str:
        return (
            f"CPU avg:{self.avg_cpu_percent:.1f}% max:{self.max_cpu_percent:.1f}% "
            f"Mem avg:{self.avg_memory_mb:.0f}MB max:{self.max_memory_mb:.0f}MB"
        )


class ResourceMonitor:
    """Monitor system resource usage during benchmarks."""

    def __init__(self, sample_interval: float = 0.5):
        self.sample_interval = sample_interval
        self._cpu_samples: List[float] = []
        self._memory_samples: List[float] = []
        self._monitor_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._monitor_task is not None and not self._monitor_task.done()

    async def start(self):
        """Start resource monitoring."""
        self._cpu_samples.clear()
        self._memory_samples.clear()
        # Prime the counter; the first cpu_percent(None) call always reports 0.0
        psutil.cpu_percent(interval=None)
        self._monitor_task = asyncio.create_task(self._sample_loop(), name="resource-monitor")

    async def stop(self):
        """Stop resource monitoring."""
        if self._monitor_task is None:
            return
        self._monitor_task.cancel()
        try:
            await self._monitor_task
        except asyncio.CancelledError:
            pass
        self._monitor_task = None

    def sample(self) -> None:
        self._cpu_samples.append(psutil.cpu_percent(interval=None))
        self._memory_samples.append(psutil.virtual_memory().used / (1024 * 1024))

    async def _sample_loop(self):
        while True:
            await asyncio.sleep(self.sample_interval)
            try:
                self.sample()
            except psutil.Error as e:
                logger.debug("Skipping resource sample: %s", e)

    def usage(self) -> Optional[ResourceUsage]:
        """Aggregate of the samples taken so far, or None if there are none."""
        if not self._cpu_samples:
            return None
        return ResourceUsage(
            avg_cpu_percent=statistics.fmean(self._cpu_samples),
            max_cpu_percent=max(self._cpu_samples),
            avg_memory_mb=statistics.fmean(self._memory_samples),
            max_memory_mb=max(self._memory_samples),
        )
