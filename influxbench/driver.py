"""
Benchmark driver: bucket reset, then timed write rounds until stopped.
"""

import asyncio
import signal
from enum import Enum
from typing import Awaitable, Callable, Optional

from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync

from influxbench.bootstrap import bootstrap_bucket
from influxbench.config import BenchmarkSettings
from influxbench.errors import BenchmarkError, WriteError
from influxbench.executor import InfluxBatchWriter, WriteRoundExecutor
from influxbench.logging_config import get_logger
from influxbench.monitor import ResourceMonitor
from influxbench.stats import RunStatistics, StatsAccumulator

logger = get_logger(__name__)


class RunState(str, Enum):
    BOOTSTRAPPING = "bootstrapping"
    RUNNING = "running"
    CANCELLED = "cancelled"
    FATAL = "fatal"


class BenchmarkLoop:
    """
    Drives rounds until ``stop_event`` is set.

    The stop event is only checked between rounds, so a round that is in
    flight when it is set always runs to completion. Any error moves the loop
    to ``FATAL`` and is re-raised for the caller to report. On a write failure
    the statistics of the rounds completed so far are logged first.
    """

    def __init__(
        self,
        executor: WriteRoundExecutor,
        stop_event: asyncio.Event,
        bootstrap: Optional[Callable[[], Awaitable[object]]] = None,
        stats: Optional[StatsAccumulator] = None,
        monitor: Optional[ResourceMonitor] = None,
        max_rounds: Optional[int] = None,
    ):
        self.executor = executor
        self.stop_event = stop_event
        self.stats = stats if stats is not None else StatsAccumulator()
        self.monitor = monitor
        self.max_rounds = max_rounds
        self._bootstrap = bootstrap
        self.state = RunState.BOOTSTRAPPING

    async def run(self) -> Optional[RunStatistics]:
        self.state = RunState.BOOTSTRAPPING
        if self._bootstrap is not None:
            try:
                await self._bootstrap()
            except BenchmarkError:
                self.state = RunState.FATAL
                raise

        self.state = RunState.RUNNING
        logger.info(
            "Starting rounds: %d writers x %d samples",
            self.executor.concurrency, self.executor.batch_size,
        )
        if self.monitor is not None:
            await self.monitor.start()

        try:
            await self._run_rounds()
        except WriteError as e:
            self.state = RunState.FATAL
            logger.error("Write failed in %s", e)
            self.log_summary(partial=True)
            raise
        finally:
            if self.monitor is not None:
                await self.monitor.stop()

        self.state = RunState.CANCELLED
        self.log_summary()
        return self.stats.snapshot()

    async def _run_rounds(self) -> None:
        round_index = 0
        while not self.stop_event.is_set():
            if self.max_rounds is not None and round_index >= self.max_rounds:
                logger.info("Reached %d rounds", self.max_rounds)
                break
            result = await self.executor.run_round(round_index)
            self.stats.record(result.elapsed_ms)
            logger.info("# %d elapsed:%d", result.round_index, result.elapsed_ms)
            round_index += 1

    def log_summary(self, partial: bool = False) -> None:
        snapshot = self.stats.snapshot()
        if snapshot is None:
            logger.info("No rounds completed")
            return

        prefix = f"Partial ({snapshot.rounds} rounds) " if partial else ""
        logger.info("%s%s", prefix, snapshot)

        usage = self.monitor.usage() if self.monitor is not None else None
        if usage is not None:
            logger.info("%s", usage)


def install_stop_signals(stop_event: asyncio.Event) -> None:
    """Set ``stop_event`` on SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()

    def request_stop():
        if not stop_event.is_set():
            logger.info("Stop requested, finishing the current round")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_stop)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(request_stop))


async def run_benchmark(
    settings: BenchmarkSettings,
    stop_event: asyncio.Event,
    max_rounds: Optional[int] = None,
) -> Optional[RunStatistics]:
    """Reset the bucket and run rounds against it until stopped."""
    logger.info("Benchmarking %s", settings.describe())

    async def bootstrap():
        return await asyncio.to_thread(bootstrap_bucket, settings)

    async with InfluxDBClientAsync(url=settings.host, token=settings.token, org=settings.org) as client:
        writer = InfluxBatchWriter(client.write_api(), bucket=settings.bucket, org=settings.org)
        executor = WriteRoundExecutor(writer, timeout=settings.round_timeout)
        loop = BenchmarkLoop(
            executor,
            stop_event,
            bootstrap=bootstrap,
            monitor=ResourceMonitor(),
            max_rounds=max_rounds,
        )
        return await loop.run()
