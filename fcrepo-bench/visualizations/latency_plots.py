"""
Duration visualization plots.
"""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import logging
import os

from .base import BasePlotter

logger = logging.getLogger(__name__)


class LatencyPlotter(BasePlotter):
    """Plotter for per-action duration visualizations."""
    
    def create_latency_histogram(self):
        """Create duration histogram and cumulative distribution plot."""
        if not self.has_data():
            logger.warning("No data available for latency histogram")
            return None
        
        try:
            durations = self.data['duration_ms']
            
            fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(16, 6))
            fig.suptitle(f'Action Duration ({self.get_title_suffix()})', fontsize=16, fontweight='bold')
            
            # 1. Histogram
            ax1.hist(durations, bins=50, alpha=0.7, edgecolor='black', color='skyblue')
            ax1.set_title('Duration Distribution', fontsize=12)
            ax1.set_xlabel('Duration (ms)')
            ax1.set_ylabel('Frequency')
            ax1.grid(True, alpha=0.3)
            
            # 2. CDF plot
            sorted_durations = np.sort(durations)
            y = np.arange(1, len(sorted_durations) + 1) / len(sorted_durations)
            ax2.plot(sorted_durations, y, linewidth=2, color='green')
            ax2.set_title('Cumulative Distribution Function', fontsize=12)
            ax2.set_xlabel('Duration (ms)')
            ax2.set_ylabel('Cumulative Probability')
            ax2.grid(True, alpha=0.3)
            
            stats_text = f"""Statistics:
Total Actions: {len(durations):,}
Mean: {durations.mean():.1f} ms
P50: {durations.quantile(0.5):.1f} ms
P95: {durations.quantile(0.95):.1f} ms
P99: {durations.quantile(0.99):.1f} ms"""
            
            fig.text(0.02, 0.02, stats_text, fontsize=9, verticalalignment='bottom',
                    bbox=dict(boxstyle="round,pad=0.5", facecolor="lightblue", alpha=0.8))
            
            plt.tight_layout()
            
            output_file = os.path.join(self.output_dir, 'latency_histogram.png')
            plt.savefig(output_file, dpi=150, bbox_inches='tight')
            plt.close(fig)
            
            logger.info(f"Created latency histogram: {output_file}")
            return output_file
            
        except (KeyError, ValueError, OSError) as e:
            logger.error(f"Failed to create latency histogram: {e}")
            return None
    
    def create_latency_over_time(self):
        """Plot every action's duration at the time it finished, colored by worker thread."""
        if not self.has_data():
            logger.warning("No data available for latency over time plot")
            return None
        
        try:
            start = self.data['start_ts'].min()
            thread_colors = self.get_thread_colors()
            
            fig = plt.figure(figsize=(12, 8))
            for thread_name, thread_data in self.data.groupby('thread_name'):
                plt.scatter(thread_data['end_ts'] - start, thread_data['duration_ms'],
                           alpha=0.6, s=20, color=thread_colors[thread_name], label=thread_name)
            
            plt.title(f'Action Duration over Time ({self.get_title_suffix()})', fontsize=14)
            plt.xlabel('Time since first action (s)', fontsize=12)
            plt.ylabel('Duration (ms)', fontsize=12)
            plt.grid(True, alpha=0.3)
            if len(thread_colors) <= 20:
                plt.legend(fontsize=8)
            plt.tight_layout()
            
            output_file = os.path.join(self.output_dir, 'latency_over_time.png')
            plt.savefig(output_file, dpi=150, bbox_inches='tight')
            plt.close(fig)
            
            logger.info(f"Created latency over time plot: {output_file}")
            return output_file
            
        except (KeyError, ValueError, OSError) as e:
            logger.error(f"Failed to create latency over time plot: {e}")
            return None
    
    def create_latency_stats_table(self):
        """Per-thread duration statistics, saved as CSV."""
        if not self.has_data():
            return None
        
        table = self.data.groupby('thread_name')['duration_ms'].agg(
            ['count', 'mean', 'min', 'max', 'sum']
        ).reset_index()
        output_file = os.path.join(self.output_dir, 'latency_by_thread.csv')
        table.to_csv(output_file, index=False)
        logger.info(f"Created latency statistics table: {output_file}")
        return output_file
