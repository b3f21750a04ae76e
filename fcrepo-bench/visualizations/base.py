"""
Base classes for plot visualization.
"""

import pandas as pd
import logging

logger = logging.getLogger(__name__)


class BasePlotter:
    """Base class for all plotters with common functionality."""
    
    def __init__(self, data: pd.DataFrame, output_dir: str):
        self.data = data
        self.output_dir = output_dir
    
    def has_data(self) -> bool:
        """Check that there is at least one result to plot."""
        return self.data is not None and len(self.data) > 0
    
    def get_title_suffix(self) -> str:
        """Describe the run the data belongs to, e.g. 'READ, 4 thread(s)'."""
        if not self.has_data():
            return ""
        actions = ", ".join(a.upper() for a in self.data['action'].unique())
        threads = self.data['num_threads'].iloc[0]
        return f"{actions}, {threads} thread(s)"
    
    def get_thread_colors(self):
        """Generate color map for worker threads."""
        import matplotlib.pyplot as plt
        threads = sorted(self.data['thread_name'].unique())
        thread_colors = plt.cm.tab20(range(len(threads)))
        return dict(zip(threads, thread_colors))
