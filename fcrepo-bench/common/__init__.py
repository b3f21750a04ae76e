"""
Common utilities for the Fedora benchmark.
"""

from .types import Action, BenchmarkConfig, FedoraVersion
from .action_worker import ActionWorker

__all__ = ['Action', 'BenchmarkConfig', 'FedoraVersion', 'ActionWorker']
