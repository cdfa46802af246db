import asyncio
import sys

from influxbench.config import load_settings
from influxbench.driver import install_stop_signals, run_benchmark
from influxbench.errors import BenchmarkError
from influxbench.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


async def _serve(settings) -> None:
    stop_event = asyncio.Event()
    install_stop_signals(stop_event)
    await run_benchmark(settings, stop_event)


def main() -> int:
    setup_logging()
    try:
        settings = load_settings()
        asyncio.run(_serve(settings))
    except BenchmarkError as e:
        logger.error("Benchmark aborted (%s): %s", type(e).__name__, e)
        return e.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
