"""
Shared utilities for benchmark metrics calculations: throughput, thread overhead and size formatting.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from configuration import (
    BYTES_PER_KB,
    BYTES_PER_MB,
    MILLIS_PER_SECOND,
    SIZE_UNIT_PREFIXES,
)
from persistence.record import BenchToolResult

logger = logging.getLogger(__name__)


@dataclass
class AggregateStats:
    """Order-independent sums over the harvested results of a run."""

    total_duration_ms: int
    total_bytes: int
    num_results: int
    throughput_mbps: float
    throughput_per_thread_mbps: Optional[float] = None


def calculate_throughput_mbps(size: int, num_actions: int, total_duration_ms: float) -> float:
    """
    Calculate the single-thread throughput in MB/sec.

    The payload size times the number of actions is divided by the summed
    duration of all actions, i.e. the throughput a single thread would see.

    Args:
        size: Payload size in bytes
        num_actions: Number of actions of the run
        total_duration_ms: Sum of all action durations in milliseconds

    Returns:
        Throughput in MB/sec. Bytes moved in no measurable time give
        infinity, no bytes at all give 0.0
    """
    if total_duration_ms <= 0:
        return float("inf") if size * num_actions > 0 else 0.0
    return size * num_actions * MILLIS_PER_SECOND / (BYTES_PER_MB * total_duration_ms)


def runtime_without_overhead_ms(total_duration_ms: int, num_threads: int) -> int:
    """Summed action duration normalized to a single thread."""
    return int(float(total_duration_ms) / float(num_threads))


def calculate_thread_overhead_ms(benchmark_runtime_ms: int, total_duration_ms: int,
                                 num_threads: int) -> int:
    """Observed harvest time minus the per-thread-normalized action time."""
    return benchmark_runtime_ms - runtime_without_overhead_ms(total_duration_ms, num_threads)


def calculate_aggregate_stats(results: Iterable[BenchToolResult], size: int,
                              num_actions: int, num_threads: int) -> AggregateStats:
    """
    Aggregate harvested results into run statistics.

    With more than one thread the reported throughput is the single-thread
    figure multiplied by the thread count, and the single-thread figure is
    reported per thread.

    Args:
        results: Harvested results, in any order
        size: Configured payload size in bytes
        num_actions: Configured number of actions
        num_threads: Worker pool size

    Returns:
        AggregateStats for the run
    """
    total_duration = 0
    total_bytes = 0
    count = 0
    for result in results:
        total_duration += result.duration_ms
        total_bytes += result.size
        count += 1

    per_thread = calculate_throughput_mbps(size, num_actions, total_duration)

    if num_threads == 1:
        return AggregateStats(total_duration, total_bytes, count, per_thread)
    return AggregateStats(total_duration, total_bytes, count,
                          per_thread * num_threads, per_thread)


def format_throughput(value: float) -> str:
    """Format a throughput with at most two decimals and no trailing zeros."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def convert_size(size: int) -> str:
    """
    Render a byte count with a binary unit, e.g. 1048576 -> '1.0 MB'.

    Args:
        size: Number of bytes

    Returns:
        Human readable size
    """
    if size < BYTES_PER_KB:
        return f"{size} B"

    exp = 0
    while exp < len(SIZE_UNIT_PREFIXES) and size >= BYTES_PER_KB ** (exp + 1):
        exp += 1
    prefix = SIZE_UNIT_PREFIXES[exp - 1]
    return f"{size / BYTES_PER_KB ** exp:.1f} {prefix}B"
