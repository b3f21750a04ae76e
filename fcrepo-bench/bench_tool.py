import os
import sys
import logging
import argparse

# Add the current directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from configuration import (
    FEDORA_URL, FEDORA_USER, FEDORA_PASSWORD, DEFAULT_ACTION, DEFAULT_FEDORA_VERSION,
    DEFAULT_NUM_ACTIONS, DEFAULT_SIZE_BYTES, DEFAULT_NUM_THREADS, DEFAULT_LOG_PATH,
    DEFAULT_PLOTS_DIR, PROMETHEUS_PORT
)
from common.types import Action, BenchmarkConfig, FedoraVersion

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class BenchToolCLI:
    """CLI interface for the Fedora repository benchmark."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description='Fedora repository benchmark CLI',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Ingest 100 datastreams of 1 MB into Fedora 4 using 4 threads
  python bench_tool.py run -f http://localhost:8080/fcrepo -a create -n 100 -s 1048576 -t 4

  # Read 1000 datastreams from Fedora 3 and keep the per-object durations
  python bench_tool.py run -v fcrepo3 -f http://localhost:8080/fedora -a read -n 1000 -l durations.log

  # Export results and plot them
  python bench_tool.py run -a update -n 500 --results-dir results
  python bench_tool.py visualize --parquet-file results/benchmark_update_20241201_120000.parquet
            """
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Run command
        run_parser = subparsers.add_parser('run', help='Run a benchmark')
        run_parser.add_argument('-f', '--fedora-url', type=str, default=FEDORA_URL,
                              help=f'Base URL of the Fedora repository (default: {FEDORA_URL})')
        run_parser.add_argument('-a', '--action', choices=[a.value for a in Action], default=DEFAULT_ACTION,
                              help=f'Action to benchmark (default: {DEFAULT_ACTION})')
        run_parser.add_argument('-v', '--version', choices=[v.value for v in FedoraVersion],
                              default=DEFAULT_FEDORA_VERSION,
                              help=f'Fedora version of the repository (default: {DEFAULT_FEDORA_VERSION})')
        run_parser.add_argument('-n', '--num-actions', type=int, default=DEFAULT_NUM_ACTIONS,
                              help=f'Number of objects to run the action against (default: {DEFAULT_NUM_ACTIONS})')
        run_parser.add_argument('-s', '--size', type=int, default=DEFAULT_SIZE_BYTES,
                              help=f'Datastream size in bytes (default: {DEFAULT_SIZE_BYTES})')
        run_parser.add_argument('-t', '--threads', type=int, default=DEFAULT_NUM_THREADS,
                              help=f'Number of worker threads (default: {DEFAULT_NUM_THREADS})')
        run_parser.add_argument('-l', '--log', type=str, default=DEFAULT_LOG_PATH,
                              help=f'File receiving one duration per object, in ms (default: {DEFAULT_LOG_PATH})')
        run_parser.add_argument('-u', '--user', type=str, default=FEDORA_USER,
                              help='User for HTTP basic authentication')
        run_parser.add_argument('-p', '--password', type=str, default=FEDORA_PASSWORD,
                              help='Password for HTTP basic authentication')
        run_parser.add_argument('--results-dir', type=str, default=None,
                              help='Directory for a Parquet export of all results (default: no export)')
        run_parser.add_argument('--prometheus-port', type=int, default=PROMETHEUS_PORT,
                              help=f'Port of the Prometheus exporter, 0 disables it (default: {PROMETHEUS_PORT})')
        run_parser.add_argument('--verbose', action='store_true',
                              help='Log every harvested result')

        # Visualize command
        visualize_parser = subparsers.add_parser('visualize', help='Generate plots from benchmark results')
        visualize_parser.add_argument('--parquet-file', type=str, required=True,
                                    help='Path to the Parquet file containing benchmark results')
        visualize_parser.add_argument('--output-dir', type=str, default=DEFAULT_PLOTS_DIR,
                                    help=f'Output directory for generated plots (default: {DEFAULT_PLOTS_DIR})')

        return parser

    def build_config(self, args) -> BenchmarkConfig:
        """Map parsed arguments of the run command to a BenchmarkConfig."""
        return BenchmarkConfig(
            action=Action.parse(args.action),
            fedora_url=args.fedora_url,
            version=FedoraVersion.parse(args.version),
            num_actions=args.num_actions,
            size=args.size,
            num_threads=args.threads,
            log_path=args.log or None,
            user=args.user,
            password=args.password,
            results_dir=args.results_dir,
            prometheus_port=args.prometheus_port,
        )

    def run_benchmark(self, args):
        """Run the benchmark."""
        from cli.benchmark import BenchmarkRunner, PreparationError

        if args.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        try:
            config = self.build_config(args)
        except ValueError as e:
            logger.error(f"Invalid benchmark parameters: {e}")
            return 1

        try:
            runner = BenchmarkRunner(config)
            report = runner.run_benchmark()
        except PreparationError as e:
            logger.error(f"Benchmark aborted: {e}")
            return 1

        if report.interrupted:
            logger.info("Benchmark interrupted by user")
            return 1
        return 0

    def run_visualize(self, args):
        """Run the visualization phase."""
        from cli.visualiser import BenchmarkVisualizer

        logger.info("=== Visualization Phase ===")

        # Check if parquet file exists
        if not os.path.exists(args.parquet_file):
            logger.error(f"Parquet file not found: {args.parquet_file}")
            return 1

        visualizer = BenchmarkVisualizer(args.parquet_file, args.output_dir)
        plots = visualizer.create_all_plots()

        if plots:
            logger.info(f"Successfully created {len(plots)} plots in {args.output_dir}")
            for plot in plots:
                logger.info(f"  - {plot}")
            return 0
        else:
            logger.error("No plots were created")
            return 1

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            if parsed_args.command == 'run':
                return self.run_benchmark(parsed_args)
            elif parsed_args.command == 'visualize':
                return self.run_visualize(parsed_args)
            else:
                logger.error(f"Unknown command: {parsed_args.command}")
                return 1

        except KeyboardInterrupt:
            logger.info("Operation interrupted by user")
            return 1


def main():
    """Main entry point."""
    cli = BenchToolCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
