"""
Cluster size lookup for Fedora 4 repositories.
"""

import re
import logging
from typing import Optional

import requests

from configuration import CLUSTER_SIZE_PREDICATE, CONNECT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

# <subject> <predicate> "literal"...
_TRIPLE_PATTERN = re.compile(r'^<([^>]*)>\s+<([^>]*)>\s+"([^"]*)"')


class ClusterSizeProvider:
    """Reads the node count a Fedora 4 repository reports about itself."""

    def __init__(self, fedora_url: str, auth=None, timeout: float = CONNECT_TIMEOUT_SECONDS):
        self.fedora_url = fedora_url.rstrip("/")
        self.auth = auth
        self.timeout = timeout

    @property
    def repository_url(self) -> str:
        return f"{self.fedora_url}/rest/"

    def get_cluster_size(self) -> Optional[int]:
        """Query the repository root.

        Returns:
            The node count, 0 if the repository does not report one, or None
            if the query failed
        """
        try:
            response = requests.get(
                self.repository_url,
                headers={"Accept": "application/n-triples"},
                auth=self.auth,
                timeout=self.timeout,
            )
            if response.status_code != 200:
                logger.warning(f"Failed to query cluster size: HTTP {response.status_code}")
                return None
            return self._parse_cluster_size(response.text)
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Unable to determine cluster size: {e}")
            return None

    def _parse_cluster_size(self, ntriples: str) -> int:
        """Find the cluster size statement about the repository root."""
        root = self.repository_url.rstrip("/")

        for line in ntriples.splitlines():
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            match = _TRIPLE_PATTERN.match(line)
            if match is None:
                continue

            subject, predicate, literal = match.groups()
            if predicate == CLUSTER_SIZE_PREDICATE and subject.rstrip("/") == root:
                return int(literal)

        return 0
