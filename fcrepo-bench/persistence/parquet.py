"""
Parquet persistence for benchmark results.
"""

import os
import logging
from typing import Iterable, Optional
from datetime import datetime

import pandas as pd

from persistence.record import BenchToolResult

logger = logging.getLogger(__name__)


class ParquetPersistence:
    """Parquet file persistence for benchmark results.

    Attributes:
        output_dir: Directory where Parquet files will be saved
    """

    def __init__(self, output_dir: str = "results"):
        """Initialize Parquet persistence.

        Args:
            output_dir: Directory for saving Parquet files (default: 'results')
        """
        self.output_dir: str = output_dir

        # Ensure output directory exists
        os.makedirs(output_dir, exist_ok=True)

    @staticmethod
    def to_dataframe(results: Iterable[BenchToolResult], num_threads: int,
                     fedora_version: str) -> pd.DataFrame:
        """Convert results to a DataFrame, one row per object."""
        data = []
        for result in results:
            data.append({
                'object_id': result.object_id,
                'action': result.action,
                'duration_ms': result.duration_ms,
                'bytes': result.size,
                'start_ts': result.start_ts,
                'end_ts': result.end_ts,
                'thread_name': result.thread_name,
                'num_threads': num_threads,
                'fedora_version': fedora_version,
            })
        return pd.DataFrame(data)

    def save_results(self, results: Iterable[BenchToolResult], num_threads: int,
                     fedora_version: str, filename_prefix: str = "benchmark") -> Optional[str]:
        """Save results to a Parquet file.

        Args:
            results: Harvested benchmark results
            num_threads: Worker pool size of the run
            fedora_version: Repository variant of the run
            filename_prefix: Prefix for the generated filename (default: 'benchmark')

        Returns:
            Path to the saved file, or None if there are no results to save
        """
        df = self.to_dataframe(results, num_threads, fedora_version)
        if df.empty:
            return None

        logger.info(f"Saving {len(df)} results to file")

        # Generate filename
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{filename_prefix}_{timestamp}.parquet"
        filepath = os.path.join(self.output_dir, filename)

        # Save to Parquet
        df.to_parquet(filepath, index=False)

        return filepath
