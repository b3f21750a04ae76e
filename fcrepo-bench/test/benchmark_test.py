"""
Tests for the benchmark runner: preparation, dispatch, harvest, purge and reporting.
"""

import unittest
import tempfile
import threading
import time
import os
import sys
from concurrent.futures import Future
from unittest.mock import Mock, patch

import pyarrow as pa

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cli.benchmark import BenchmarkRunner, PreparationError
from common.metrics_utils import calculate_throughput_mbps
from common.types import Action, BenchmarkConfig, FedoraVersion
from systems.base import RepositoryError


class FakeRepositoryClient:
    """In-memory stand-in for a Fedora REST client that records every call."""

    def __init__(self, fail_on_index=None, fail_prepare=False, fail_datastreams=False,
                 delays=None, default_delay=0.0):
        self.fail_on_index = fail_on_index
        self.fail_prepare = fail_prepare
        self.fail_datastreams = fail_datastreams
        self.delays = delays or {}
        self.default_delay = default_delay
        self.lock = threading.Lock()
        self.calls = []
        self.prepared_ids = []
        self.executed = []
        self.purge_calls = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self.closed = False

    def create_objects(self, object_ids):
        with self.lock:
            self.calls.append("create_objects")
            self.prepared_ids = list(object_ids)
        if self.fail_prepare:
            raise RepositoryError("create object", "http://repo/objects", 500)

    def create_datastreams(self, object_ids, size):
        with self.lock:
            self.calls.append(("create_datastreams", list(object_ids), size))
        if self.fail_datastreams:
            raise RepositoryError("create datastream", "http://repo/objects", 500)

    def execute(self, action, object_id, size):
        index = self.prepared_ids.index(object_id)
        with self.lock:
            self.calls.append("execute")
            self.executed.append((action, object_id, size))
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            time.sleep(self.delays.get(index, self.default_delay))
            if index == self.fail_on_index:
                raise RepositoryError("execute", f"http://repo/objects/{object_id}", 500)
        finally:
            with self.lock:
                self.in_flight -= 1

    def purge_objects(self, object_ids, purge_datastreams):
        with self.lock:
            self.calls.append("purge_objects")
            self.purge_calls.append((list(object_ids), purge_datastreams))
        return 0

    def close(self):
        self.closed = True


def make_config(action=Action.CREATE, num_actions=5, size=1048576, num_threads=1,
                log_path=None, version=FedoraVersion.FCREPO3):
    return BenchmarkConfig(
        action=action,
        fedora_url="http://localhost:8080/fcrepo",
        version=version,
        num_actions=num_actions,
        size=size,
        num_threads=num_threads,
        log_path=log_path,
    )


class TestBenchmarkRunner(unittest.TestCase):
    """Test the benchmark runner against a fake repository."""

    def test_create_single_thread(self):
        """N=5, 1 MB, one thread, CREATE."""
        client = FakeRepositoryClient()
        runner = BenchmarkRunner(make_config(), client=client)

        report = runner.run_benchmark()

        self.assertEqual(len(client.prepared_ids), 5)
        self.assertEqual(len(set(client.prepared_ids)), 5)
        self.assertEqual(report.stats.num_results, 5)
        self.assertEqual(report.stats.total_bytes, 5242880)
        for result in runner.results.snapshot():
            self.assertGreaterEqual(result.duration_ms, 0)
        self.assertEqual(len(client.purge_calls), 1)
        purged_ids, purge_datastreams = client.purge_calls[0]
        self.assertEqual(sorted(purged_ids), sorted(client.prepared_ids))
        self.assertTrue(purge_datastreams)
        self.assertTrue(report.completed)
        self.assertIsNone(report.error)
        self.assertIsNone(report.stats.throughput_per_thread_mbps)

    def test_create_does_not_prepare_datastreams(self):
        client = FakeRepositoryClient()
        BenchmarkRunner(make_config(action=Action.CREATE), client=client).run_benchmark()

        self.assertFalse(any(isinstance(c, tuple) and c[0] == "create_datastreams"
                             for c in client.calls))

    def test_datastreams_prepared_before_workers(self):
        """READ, UPDATE and DELETE get their datastreams once, before any action runs."""
        for action in (Action.READ, Action.UPDATE, Action.DELETE):
            with self.subTest(action=action):
                client = FakeRepositoryClient()
                BenchmarkRunner(make_config(action=action, num_actions=4, size=512),
                                client=client).run_benchmark()

                datastream_calls = [i for i, c in enumerate(client.calls)
                                    if isinstance(c, tuple) and c[0] == "create_datastreams"]
                self.assertEqual(len(datastream_calls), 1)
                _, ids, size = client.calls[datastream_calls[0]]
                self.assertEqual(ids, client.prepared_ids)
                self.assertEqual(size, 512)
                self.assertLess(datastream_calls[0], client.calls.index("execute"))

    def test_delete_with_two_threads(self):
        """N=10, two threads, DELETE."""
        client = FakeRepositoryClient()
        runner = BenchmarkRunner(make_config(action=Action.DELETE, num_actions=10, num_threads=2),
                                 client=client)

        report = runner.run_benchmark()

        self.assertIn("create_datastreams", [c[0] for c in client.calls if isinstance(c, tuple)])
        self.assertEqual(len(client.purge_calls), 1)
        purged_ids, purge_datastreams = client.purge_calls[0]
        self.assertEqual(len(purged_ids), 10)
        self.assertFalse(purge_datastreams)
        self.assertEqual(client.calls[-1], "purge_objects")
        self.assertEqual(report.stats.num_results, 10)
        self.assertIsNotNone(report.stats.throughput_per_thread_mbps)

    def test_failure_during_harvest_still_purges(self):
        """A failing third task stops harvesting but every object is purged."""
        client = FakeRepositoryClient(fail_on_index=2)
        runner = BenchmarkRunner(make_config(num_actions=5), client=client)

        report = runner.run_benchmark()

        self.assertIsNotNone(report.error)
        self.assertFalse(report.completed)
        self.assertFalse(report.interrupted)
        self.assertEqual(report.stats.num_results, 2)
        self.assertEqual(len(client.purge_calls), 1)
        purged_ids, _ = client.purge_calls[0]
        self.assertEqual(purged_ids, client.prepared_ids)

    def test_preparation_failure_aborts(self):
        client = FakeRepositoryClient(fail_prepare=True)
        runner = BenchmarkRunner(make_config(), client=client)

        with self.assertRaises(PreparationError):
            runner.run_benchmark()

        self.assertEqual(client.executed, [])
        self.assertEqual(client.purge_calls, [])

    def test_datastream_preparation_failure_aborts(self):
        client = FakeRepositoryClient(fail_datastreams=True)
        runner = BenchmarkRunner(make_config(action=Action.READ), client=client)

        with self.assertRaises(PreparationError):
            runner.run_benchmark()

        self.assertEqual(client.executed, [])
        self.assertEqual(client.purge_calls, [])

    def test_every_object_gets_one_action(self):
        client = FakeRepositoryClient()
        config = make_config(action=Action.UPDATE, num_actions=20, size=64, num_threads=4)

        report = BenchmarkRunner(config, client=client).run_benchmark()

        executed_ids = [object_id for _, object_id, _ in client.executed]
        self.assertEqual(sorted(executed_ids), sorted(client.prepared_ids))
        self.assertTrue(all(a == Action.UPDATE and s == 64 for a, _, s in client.executed))
        self.assertEqual(report.stats.num_results, 20)

    def test_report_arithmetic(self):
        client = FakeRepositoryClient(delays={0: 0.02, 1: 0.02, 2: 0.02})
        config = make_config(action=Action.READ, num_actions=3, size=2048, num_threads=2)
        runner = BenchmarkRunner(config, client=client)

        report = runner.run_benchmark()

        total = sum(r.duration_ms for r in runner.results.snapshot())
        self.assertEqual(report.stats.total_duration_ms, total)
        self.assertEqual(report.runtime_without_overhead_ms, int(total / 2))
        self.assertEqual(report.thread_overhead_ms, report.benchmark_runtime_ms - int(total / 2))
        base = calculate_throughput_mbps(2048, 3, total)
        self.assertAlmostEqual(report.stats.throughput_per_thread_mbps, base)
        self.assertAlmostEqual(report.stats.throughput_mbps, base * 2)
        self.assertGreaterEqual(report.overall_runtime_ms, report.benchmark_runtime_ms)

    def test_duration_log_in_submission_order(self):
        """Log lines follow submission order even when later tasks finish first."""
        delays = {0: 0.3, 1: 0.2, 2: 0.1, 3: 0.0}
        client = FakeRepositoryClient(delays=delays)
        with tempfile.TemporaryDirectory() as tmpdir:
            log_path = os.path.join(tmpdir, "durations.log")
            config = make_config(action=Action.READ, num_actions=4, size=1, num_threads=4,
                                 log_path=log_path)

            BenchmarkRunner(config, client=client).run_benchmark()

            with open(log_path) as f:
                lines = [int(line) for line in f.read().splitlines()]

        self.assertEqual(len(lines), 4)
        self.assertEqual(lines, sorted(lines, reverse=True))
        self.assertGreaterEqual(lines[0], 250)

    def test_unwritable_log_does_not_fail_run(self):
        client = FakeRepositoryClient()
        with tempfile.TemporaryDirectory() as tmpdir:
            log_path = os.path.join(tmpdir, "missing", "durations.log")
            config = make_config(num_actions=3, log_path=log_path)

            report = BenchmarkRunner(config, client=client).run_benchmark()

        self.assertTrue(report.completed)
        self.assertEqual(len(client.purge_calls), 1)

    def test_purge_failure_is_reported(self):
        client = FakeRepositoryClient()
        client.purge_objects = Mock(side_effect=RuntimeError("connection reset"))

        report = BenchmarkRunner(make_config(num_actions=3), client=client).run_benchmark()

        self.assertEqual(report.purge_failures, 3)
        self.assertEqual(report.stats.num_results, 3)

    def test_cluster_size_is_informational(self):
        client = FakeRepositoryClient()
        provider = Mock()
        provider.get_cluster_size.side_effect = [3, None]
        config = make_config(num_actions=2, version=FedoraVersion.FCREPO4)

        report = BenchmarkRunner(config, client=client,
                                 cluster_size_provider=provider).run_benchmark()

        self.assertEqual(provider.get_cluster_size.call_count, 2)
        self.assertEqual(report.cluster_size_before, 3)
        self.assertIsNone(report.cluster_size_after)
        self.assertTrue(report.completed)

    def test_cluster_size_failure_does_not_abort(self):
        client = FakeRepositoryClient()
        provider = Mock()
        provider.get_cluster_size.side_effect = RuntimeError("boom")
        config = make_config(num_actions=2, version=FedoraVersion.FCREPO4)

        report = BenchmarkRunner(config, client=client,
                                 cluster_size_provider=provider).run_benchmark()

        self.assertIsNone(report.cluster_size_before)
        self.assertTrue(report.completed)

    def test_no_cluster_query_for_fcrepo3(self):
        runner = BenchmarkRunner(make_config(version=FedoraVersion.FCREPO3),
                                 client=FakeRepositoryClient())
        self.assertIsNone(runner.cluster_size_provider)

    def test_injected_client_is_not_closed(self):
        client = FakeRepositoryClient()
        BenchmarkRunner(make_config(num_actions=1), client=client).run_benchmark()
        self.assertFalse(client.closed)

    def test_results_exported_to_parquet(self):
        client = FakeRepositoryClient()
        with tempfile.TemporaryDirectory() as tmpdir:
            config = BenchmarkConfig(
                action=Action.CREATE, fedora_url="http://localhost:8080/fcrepo",
                version=FedoraVersion.FCREPO3, num_actions=3, size=10, num_threads=1,
                results_dir=tmpdir,
            )
            report = BenchmarkRunner(config, client=client).run_benchmark()

            self.assertIsNotNone(report.results_file)
            self.assertTrue(os.path.exists(report.results_file))
            self.assertIn("benchmark_create_", os.path.basename(report.results_file))

    @patch('cli.benchmark.ParquetPersistence')
    def test_export_failure_still_reports(self, mock_persistence_class):
        for error in (pa.ArrowInvalid("cannot convert column"), ValueError("bad frame")):
            with self.subTest(error=type(error).__name__):
                mock_persistence_class.return_value.save_results.side_effect = error
                client = FakeRepositoryClient()
                config = BenchmarkConfig(
                    action=Action.CREATE, fedora_url="http://localhost:8080/fcrepo",
                    version=FedoraVersion.FCREPO3, num_actions=3, size=10, num_threads=1,
                    results_dir="results",
                )

                report = BenchmarkRunner(config, client=client).run_benchmark()

                self.assertIsNone(report.results_file)
                self.assertTrue(report.completed)
                self.assertEqual(len(client.purge_calls), 1)

    def test_concurrency_bounded_by_thread_count(self):
        client = FakeRepositoryClient(default_delay=0.01)
        config = make_config(action=Action.READ, num_actions=20, size=16, num_threads=3)

        report = BenchmarkRunner(config, client=client).run_benchmark()

        self.assertLessEqual(client.peak_in_flight, 3)
        self.assertGreater(client.peak_in_flight, 0)
        self.assertEqual(report.stats.num_results, 20)

    def test_interrupted_harvest_still_purges(self):
        """Ctrl-C while waiting on the third result stops harvesting but cleans up."""
        client = FakeRepositoryClient()
        runner = BenchmarkRunner(make_config(num_actions=5), client=client)

        original_result = Future.result
        waited = []

        def interrupt_third(future, timeout=None):
            waited.append(future)
            if len(waited) == 3:
                raise KeyboardInterrupt()
            return original_result(future, timeout)

        with patch.object(Future, 'result', interrupt_third):
            report = runner.run_benchmark()

        self.assertTrue(report.interrupted)
        self.assertFalse(report.completed)
        self.assertEqual(report.stats.num_results, 2)
        self.assertEqual(len(client.purge_calls), 1)
        purged_ids, _ = client.purge_calls[0]
        self.assertEqual(purged_ids, client.prepared_ids)
        self.assertEqual(len(purged_ids), 5)


class TestBenchmarkConfig(unittest.TestCase):
    """Test run parameter validation."""

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            make_config(num_actions=0)
        with self.assertRaises(ValueError):
            make_config(num_threads=0)
        with self.assertRaises(ValueError):
            make_config(size=-1)

    def test_zero_size_is_valid(self):
        self.assertEqual(make_config(size=0).size, 0)

    def test_purge_datastreams_flag(self):
        self.assertTrue(make_config(action=Action.CREATE).purge_datastreams)
        self.assertTrue(make_config(action=Action.READ).purge_datastreams)
        self.assertTrue(make_config(action=Action.UPDATE).purge_datastreams)
        self.assertFalse(make_config(action=Action.DELETE).purge_datastreams)

    def test_requires_datastream(self):
        self.assertFalse(Action.CREATE.requires_datastream)
        self.assertTrue(Action.READ.requires_datastream)
        self.assertTrue(Action.UPDATE.requires_datastream)
        self.assertTrue(Action.DELETE.requires_datastream)


if __name__ == '__main__':
    unittest.main()
