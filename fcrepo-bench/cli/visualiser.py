"""
Visualization orchestrator for Fedora benchmark results.

This module provides a simple interface for creating visualizations from
benchmark results stored in Parquet format.
"""

import pandas as pd
import os
import logging

from visualizations.latency_plots import LatencyPlotter

logger = logging.getLogger(__name__)


class BenchmarkVisualizer:
    """Simple visualizer for benchmark results."""
    
    def __init__(self, parquet_file: str, output_dir: str = "plots"):
        self.parquet_file = parquet_file
        self.output_dir = output_dir
        self.data = None
        
        # Ensure output directory exists
        os.makedirs(output_dir, exist_ok=True)
        
        self._load_data()
        
        if self.data is not None:
            self.latency_plotter = LatencyPlotter(self.data, self.output_dir)
        else:
            self.latency_plotter = None
        
        logger.info(f"Initialized visualizer for {parquet_file}")
    
    def _load_data(self):
        """Load benchmark data from Parquet file."""
        try:
            self.data = pd.read_parquet(self.parquet_file)
            logger.info(f"Loaded {len(self.data)} results from {self.parquet_file}")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load data: {e}")
            self.data = None
    
    def create_all_plots(self):
        """Create all available plots."""
        if self.latency_plotter is None:
            logger.warning("Latency plotter not available")
            return []
        
        plots = [
            self.latency_plotter.create_latency_histogram(),
            self.latency_plotter.create_latency_over_time(),
            self.latency_plotter.create_latency_stats_table(),
        ]
        
        # Filter out None values
        plots = [p for p in plots if p is not None]
        
        logger.info(f"Created {len(plots)} plots and tables in {self.output_dir}")
        return plots
