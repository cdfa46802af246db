"""
Concurrent write rounds.

A round launches ``concurrency`` writers at once, each submitting its own
batch of ``batch_size`` samples, and completes when the slowest one does.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, Protocol

from influxdb_client import WritePrecision

from influxbench.errors import WriteError
from influxbench.logging_config import get_logger
from influxbench.records import SensorSample, generate_batch
from influxbench.schema import SENSOR_SCHEMA, MeasurementSchema
from influxbench.stats import RoundResult

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 11
DEFAULT_BATCH_SIZE = 200


class BatchWriter(Protocol):
    async def write(self, samples: List[SensorSample]) -> None:
        ...


class InfluxBatchWriter:
    """Submits one batch per call through the async write API."""

    def __init__(self, write_api, bucket: str, org: str, schema: MeasurementSchema = SENSOR_SCHEMA):
        self._write_api = write_api
        self.bucket = bucket
        self.org = org
        self.schema = schema

    async def write(self, samples: List[SensorSample]) -> None:
        points = self.schema.to_points(samples, WritePrecision.MS)
        await self._write_api.write(
            bucket=self.bucket,
            org=self.org,
            record=points,
            write_precision=WritePrecision.MS,
        )


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WriteRoundExecutor:
    """Runs one fan-out/join round of writes and times it."""

    def __init__(
        self,
        writer: BatchWriter,
        concurrency: int = DEFAULT_CONCURRENCY,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.perf_counter,
        now: Callable[[], datetime] = utc_now,
    ):
        if concurrency < 1:
            raise ValueError(f"Concurrency must be at least 1, got {concurrency}")
        if batch_size < 0:
            raise ValueError(f"Batch size must be non-negative, got {batch_size}")
        if timeout is not None and timeout <= 0:
            raise ValueError(f"Round timeout must be positive, got {timeout}")

        self.writer = writer
        self.concurrency = concurrency
        self.batch_size = batch_size
        self.timeout = timeout
        self._clock = clock
        self._now = now

    @property
    def samples_per_round(self) -> int:
        return self.concurrency * self.batch_size

    async def run_round(self, round_index: int) -> RoundResult:
        """
        Execute a single round.

        Returns:
            RoundResult with the wall-clock time from first launch to last completion

        Raises:
            WriteError: if any writer fails or the round exceeds its timeout.
                Writers still in flight are cancelled before this is raised.
        """
        start = self._clock()
        now = self._now()
        tasks = [
            asyncio.create_task(
                self._write_batch(round_index, writer_index, now),
                name=f"round-{round_index}-writer-{writer_index}",
            )
            for writer_index in range(self.concurrency)
        ]

        try:
            if self.timeout is None:
                await asyncio.gather(*tasks)
            else:
                await asyncio.wait_for(asyncio.gather(*tasks), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await self._cancel(tasks)
            raise WriteError(f"round did not finish within {self.timeout}s", round_index) from e
        except WriteError:
            await self._cancel(tasks)
            raise

        elapsed_ms = int((self._clock() - start) * 1000)
        logger.debug(
            "Round %d wrote %d samples with %d writers in %dms",
            round_index, self.samples_per_round, self.concurrency, elapsed_ms,
        )
        return RoundResult(round_index=round_index, elapsed_ms=elapsed_ms)

    async def _write_batch(self, round_index: int, writer_index: int, now: datetime) -> None:
        batch = generate_batch(self.batch_size, now)
        try:
            await self.writer.write(batch)
        except Exception as e:
            raise WriteError(f"write of {len(batch)} samples failed: {e}", round_index, writer_index) from e

    @staticmethod
    async def _cancel(tasks: List[asyncio.Task]) -> None:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
