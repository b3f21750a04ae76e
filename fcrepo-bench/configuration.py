"""
Configuration constants for the Fedora repository benchmark.

This module contains all configuration parameters including:
- Repository endpoint and credentials
- Default run parameters (action, object count, payload size, threads)
- HTTP client settings (timeouts, datastream naming, streaming chunk size)
- File size constants and conversion factors
"""

import os
from typing import Optional

# =============================================================================
# REPOSITORY CONFIGURATION
# =============================================================================

# Fedora endpoint and credentials
FEDORA_URL: str = os.getenv("FEDORA_URL", "http://localhost:8080/fcrepo")
FEDORA_USER: str = os.getenv("FEDORA_USER", "")
FEDORA_PASSWORD: str = os.getenv("FEDORA_PASSWORD", "")

# Identifiers used when building resource paths
DATASTREAM_ID: str = "ds1"
FCREPO3_PID_NAMESPACE: str = "bench"

# RDF predicate carrying the node count of a Fedora 4 cluster
CLUSTER_SIZE_PREDICATE: str = "http://fedora.info/definitions/v4/repository#clusterSize"

# =============================================================================
# RUN DEFAULTS
# =============================================================================

DEFAULT_ACTION: str = "create"
DEFAULT_FEDORA_VERSION: str = "fcrepo4"
DEFAULT_NUM_ACTIONS: int = 1
DEFAULT_SIZE_BYTES: int = 1024
DEFAULT_NUM_THREADS: int = 1
DEFAULT_LOG_PATH: str = "durations.log"

PROGRESS_INTERVAL: int = 100  # Log preparation/purge progress every N objects

# =============================================================================
# HTTP CLIENT SETTINGS
# =============================================================================

CONNECT_TIMEOUT_SECONDS: float = 10.0
READ_TIMEOUT_SECONDS: Optional[float] = None  # Remote actions are never timed out

PAYLOAD_CHUNK_SIZE: int = 64 * 1024  # Chunk size for streamed request/response bodies
PAYLOAD_CONTENT_TYPE: str = "application/octet-stream"

# =============================================================================
# FILE SIZE CONSTANTS
# =============================================================================

BYTES_PER_KB: int = 1024
BYTES_PER_MB: int = 1024 * 1024
MILLIS_PER_SECOND: int = 1000
SIZE_UNIT_PREFIXES: str = "KMGTPE"

# =============================================================================
# OUTPUT CONFIGURATION
# =============================================================================

DEFAULT_PLOTS_DIR: str = "plots"

# Prometheus exporter port (0 = disabled)
PROMETHEUS_PORT: int = int(os.getenv("PROMETHEUS_PORT", "0"))
