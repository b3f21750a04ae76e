"""
Run parameters and enumerations shared across the benchmark.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Action(Enum):
    """Lifecycle action benchmarked against every object of a run."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def requires_datastream(self) -> bool:
        """Whether the objects need existing content before the timed phase."""
        return self in (Action.UPDATE, Action.READ, Action.DELETE)

    @classmethod
    def parse(cls, value: str) -> "Action":
        return cls(value.lower())


class FedoraVersion(Enum):
    """Repository variant the benchmark talks to."""

    FCREPO3 = "fcrepo3"
    FCREPO4 = "fcrepo4"

    @classmethod
    def parse(cls, value: str) -> "FedoraVersion":
        return cls(value.lower())


@dataclass(frozen=True)
class BenchmarkConfig:
    """Immutable parameters of a single benchmark run."""

    action: Action
    fedora_url: str
    version: FedoraVersion
    num_actions: int
    size: int
    num_threads: int
    log_path: Optional[str] = None
    user: str = ""
    password: str = ""
    results_dir: Optional[str] = None
    prometheus_port: int = 0

    def __post_init__(self):
        if self.num_actions < 1:
            raise ValueError(f"Number of actions must be positive, got {self.num_actions}")
        if self.num_threads < 1:
            raise ValueError(f"Number of threads must be positive, got {self.num_threads}")
        if self.size < 0:
            raise ValueError(f"Payload size must not be negative, got {self.size}")

    @property
    def purge_datastreams(self) -> bool:
        """Datastreams still exist after the run unless the benchmark deleted them."""
        return self.action != Action.DELETE
