"""
Benchmark runner: drives N objects through one lifecycle action with a fixed-size thread pool.
"""

import logging
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

import pyarrow as pa

from common.action_worker import ActionWorker
from common.metrics_utils import (
    AggregateStats,
    calculate_aggregate_stats,
    calculate_thread_overhead_ms,
    convert_size,
    format_throughput,
    runtime_without_overhead_ms,
)
from common.storage_factory import create_repository_client
from common.types import BenchmarkConfig, FedoraVersion
from observability.cluster import ClusterSizeProvider
from persistence.base import ResultCollector
from persistence.duration_log import DurationLog
from persistence.parquet import ParquetPersistence
from persistence.prom import PrometheusExporter
from systems.base import RepositoryError

logger = logging.getLogger(__name__)

RULE = "-------------------------------------------------"


class PreparationError(RuntimeError):
    """The object population could not be created; nothing was benchmarked."""


@dataclass
class BenchmarkReport:
    """Summary of a finished run."""

    action: str
    num_actions: int
    num_threads: int
    size: int
    overall_runtime_ms: int
    benchmark_runtime_ms: int
    runtime_without_overhead_ms: int
    thread_overhead_ms: int
    stats: AggregateStats
    purge_failures: int = 0
    error: Optional[str] = None
    interrupted: bool = False
    results_file: Optional[str] = None
    cluster_size_before: Optional[int] = None
    cluster_size_after: Optional[int] = None

    @property
    def completed(self) -> bool:
        return self.error is None and self.stats.num_results == self.num_actions


class BenchmarkRunner:
    """Prepares the objects, runs the timed actions, purges, and reports."""

    def __init__(self, config: BenchmarkConfig, client=None,
                 cluster_size_provider: ClusterSizeProvider = None,
                 exporter: PrometheusExporter = None):
        self.config = config
        self.results = ResultCollector()

        self._owns_client = client is None
        if client is None:
            client = create_repository_client(
                config.version, config.fedora_url, config.user, config.password,
                pool_size=config.num_threads,
            )
        self.client = client

        if cluster_size_provider is None and config.version == FedoraVersion.FCREPO4:
            auth = (config.user, config.password) if config.user else None
            cluster_size_provider = ClusterSizeProvider(config.fedora_url, auth=auth)
        self.cluster_size_provider = cluster_size_provider

        if exporter is None and config.prometheus_port:
            exporter = PrometheusExporter(config.prometheus_port)
            exporter.start_server()
        self.exporter = exporter

        logger.info(
            f"Initialized benchmark runner: {config.version.value} at {config.fedora_url} "
            f"with {config.num_threads} thread(s)"
        )

    def run_benchmark(self) -> BenchmarkReport:
        """Execute the complete benchmark.

        Raises:
            PreparationError: If the objects or datastreams could not be created
        """
        start_time = time.time()
        config = self.config

        try:
            cluster_size_before = self._log_parameters()

            # Create the objects up front so their creation does not count towards the actions
            object_ids = self.prepare_objects()

            logger.info(f"Scheduling {config.num_actions} actions")
            if self.exporter:
                self.exporter.update_threads(config.num_threads)

            runtime_ms = 0
            error = None
            try:
                with DurationLog(config.log_path) as duration_log:
                    executor = ThreadPoolExecutor(max_workers=config.num_threads,
                                                  thread_name_prefix="action-worker")
                    try:
                        futures = [
                            executor.submit(ActionWorker(self.client, config.action,
                                                         object_id, config.size))
                            for object_id in object_ids
                        ]
                        runtime_ms, error = self.fetch_results(futures, duration_log)
                    finally:
                        # Actions still queued after a failed harvest are abandoned
                        executor.shutdown(wait=False, cancel_futures=True)
            finally:
                # Delete all created objects and datastreams from the repository
                purge_failures = self.purge_objects(object_ids)

            cluster_size_after = self._get_cluster_size("after")
            results_file = self._save_results()
        finally:
            if self._owns_client:
                self.client.close()

        report = self._build_report(
            overall_runtime_ms=int((time.time() - start_time) * 1000),
            benchmark_runtime_ms=runtime_ms,
            purge_failures=purge_failures,
            error=error,
            results_file=results_file,
            cluster_size_before=cluster_size_before,
            cluster_size_after=cluster_size_after,
        )
        self.log_results(report)
        return report

    def prepare_objects(self) -> List[str]:
        """Generate the object ids and create the objects (and datastreams) in the repository."""
        config = self.config
        object_ids = [str(uuid.uuid4()) for _ in range(config.num_actions)]

        try:
            logger.info(f"Preparing {config.num_actions} objects")
            self.client.create_objects(object_ids)

            if config.action.requires_datastream:
                # Add datastreams which can be manipulated by the benchmarked action
                logger.info(
                    f"Preparing {config.num_actions} datastreams of size "
                    f"{convert_size(config.size)} for {config.action.name}"
                )
                self.client.create_datastreams(object_ids, config.size)
        except RepositoryError as e:
            logger.error(f"Failed to prepare objects: {e}")
            raise PreparationError(f"Unable to prepare {config.num_actions} objects: {e}") from e

        return object_ids

    def fetch_results(self, futures: List[Future],
                      duration_log: DurationLog) -> Tuple[int, Optional[BaseException]]:
        """Wait for the workers in submission order and collect their results.

        Returns:
            Tuple of (harvest runtime in ms, error that stopped harvesting or None)
        """
        count = 0
        error = None
        start_time = time.time()
        try:
            for future in futures:
                result = future.result()
                count += 1
                logger.debug(f"{count} of {self.config.num_actions} actions finished")
                duration_log.write(result.duration_ms)
                self.results.append(result)
                if self.exporter:
                    self.exporter.record_action(result.action, result.duration_ms, result.size)
        except Exception as e:
            logger.error("Error while getting results from worker threads", exc_info=True)
            error = e
            if self.exporter:
                self.exporter.record_failure(self.config.action.value)
        except KeyboardInterrupt as e:
            logger.error("Interrupted while getting results from worker threads")
            error = e
        return int((time.time() - start_time) * 1000), error

    def purge_objects(self, object_ids: List[str]) -> int:
        """Remove everything the run created. Failures are logged, never raised."""
        logger.info(f"Purging {len(object_ids)} objects and datastreams")
        try:
            return self.client.purge_objects(object_ids, self.config.purge_datastreams)
        except Exception as e:
            logger.error(f"Purging objects failed: {e}")
            return len(object_ids)

    def _log_parameters(self) -> Optional[int]:
        config = self.config
        logger.info(
            f"Running {config.num_actions} {config.action.name} action(s) against "
            f"{config.version.name} with a binary size of {convert_size(config.size)} "
            f"using {config.num_threads} thread(s)"
        )
        return self._get_cluster_size("before")

    def _get_cluster_size(self, when: str) -> Optional[int]:
        if self.cluster_size_provider is None:
            return None
        try:
            cluster_size = self.cluster_size_provider.get_cluster_size()
        except Exception as e:
            logger.warning(f"Cluster size query failed: {e}")
            cluster_size = None
        shown = cluster_size if cluster_size is not None else "unknown"
        logger.info(f"The Fedora cluster has {shown} node(s) {when} the benchmark")
        return cluster_size

    def _save_results(self) -> Optional[str]:
        if not self.config.results_dir:
            return None
        try:
            persistence = ParquetPersistence(self.config.results_dir)
            return persistence.save_results(
                self.results.snapshot(),
                num_threads=self.config.num_threads,
                fedora_version=self.config.version.value,
                filename_prefix=f"benchmark_{self.config.action.value}",
            )
        except (OSError, ValueError, pa.ArrowException) as e:
            logger.error(f"Failed to save results to {self.config.results_dir}: {e}")
            return None

    def _build_report(self, overall_runtime_ms: int, benchmark_runtime_ms: int,
                      purge_failures: int, error: Optional[BaseException],
                      results_file: Optional[str], cluster_size_before: Optional[int],
                      cluster_size_after: Optional[int]) -> BenchmarkReport:
        config = self.config
        stats = calculate_aggregate_stats(
            self.results.snapshot(), config.size, config.num_actions, config.num_threads
        )

        error_text = None
        if error is not None:
            error_text = str(error) or type(error).__name__

        return BenchmarkReport(
            action=config.action.name,
            num_actions=config.num_actions,
            num_threads=config.num_threads,
            size=config.size,
            overall_runtime_ms=overall_runtime_ms,
            benchmark_runtime_ms=benchmark_runtime_ms,
            runtime_without_overhead_ms=runtime_without_overhead_ms(
                stats.total_duration_ms, config.num_threads),
            thread_overhead_ms=calculate_thread_overhead_ms(
                benchmark_runtime_ms, stats.total_duration_ms, config.num_threads),
            stats=stats,
            purge_failures=purge_failures,
            error=error_text,
            interrupted=isinstance(error, KeyboardInterrupt),
            results_file=results_file,
            cluster_size_before=cluster_size_before,
            cluster_size_after=cluster_size_after,
        )

    def log_results(self, report: BenchmarkReport) -> None:
        """Emit the run summary."""
        if report.error is not None:
            logger.warning(
                f"Benchmark stopped early, statistics are based on "
                f"{report.stats.num_results} of {report.num_actions} results"
            )

        logger.info(f"Completed {report.num_actions} {report.action} action(s)")
        logger.info(RULE)
        logger.info(f"Overall runtime:\t\t\t{report.overall_runtime_ms} ms")
        logger.info(f"Benchmark runtime:\t\t\t{report.benchmark_runtime_ms} ms")
        logger.info(f"Benchmark runtime w/o thread overhead\t{report.runtime_without_overhead_ms} ms")
        logger.info(f"Thread overhead:\t\t\t{report.thread_overhead_ms} ms")
        logger.info(f"Avg. throughput:\t\t\t{format_throughput(report.stats.throughput_mbps)} mb/sec")
        if report.stats.throughput_per_thread_mbps is not None:
            logger.info(
                f"Avg. throughput/thread:\t\t\t"
                f"{format_throughput(report.stats.throughput_per_thread_mbps)} mb/sec"
            )
        logger.info(RULE)

        if report.results_file:
            logger.info(f"Detailed results saved to: {report.results_file}")
