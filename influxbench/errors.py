"""
Error taxonomy for the benchmark. Every error is fatal to the run.
"""


class BenchmarkError(Exception):
    """Base class for all benchmark failures."""

    exit_code = 1


class ConfigurationError(BenchmarkError):
    """Missing or invalid configuration, or an ambiguous organization lookup."""

    exit_code = 2


class BootstrapError(BenchmarkError):
    """The target bucket could not be reset."""

    exit_code = 3


class WriteError(BenchmarkError):
    """A write operation inside a round failed or timed out."""

    exit_code = 4

    def __init__(self, message: str, round_index: int, writer_index: int | None = None):
        super().__init__(message)
        self.round_index = round_index
        self.writer_index = writer_index

    def __str__(self) -> str:
        where = f"round {self.round_index}"
        if self.writer_index is not None:
            where += f", writer {self.writer_index}"
        return f"{where}: {self.args[0]}"


class EmptyStatsError(BenchmarkError, ValueError):
    """Statistics were requested before any round was recorded."""
