"""
Factory module for creating repository client instances.
"""

import logging

# Suppress per-request connection logging BEFORE creating any clients
logging.getLogger('urllib3').setLevel(logging.WARNING)
logging.getLogger('requests').setLevel(logging.WARNING)

from systems.base import FedoraRestClient
from systems.fcrepo3 import FCRepo3Client
from systems.fcrepo4 import FCRepo4Client
from common.types import FedoraVersion
from configuration import FEDORA_USER, FEDORA_PASSWORD

logger = logging.getLogger(__name__)


def create_repository_client(version: FedoraVersion, fedora_url: str, user: str = None,
                             password: str = None, pool_size: int = 1) -> FedoraRestClient:
    """Create and return the appropriate repository client for a Fedora version.

    Args:
        version: Repository variant to talk to
        fedora_url: Base URL of the repository web application
        user: HTTP basic auth user (default: FEDORA_USER from the environment)
        password: HTTP basic auth password (default: FEDORA_PASSWORD)
        pool_size: Number of pooled connections, one per worker thread

    Returns:
        Repository client instance (FCRepo3Client or FCRepo4Client)

    Raises:
        ValueError: If the version is not supported
    """
    credentials = {
        "user": user if user is not None else FEDORA_USER,
        "password": password if password is not None else FEDORA_PASSWORD,
    }

    if version == FedoraVersion.FCREPO3:
        return FCRepo3Client(fedora_url, credentials, pool_size=pool_size)

    elif version == FedoraVersion.FCREPO4:
        return FCRepo4Client(fedora_url, credentials, pool_size=pool_size)

    else:
        raise ValueError(f"Unsupported Fedora version: {version}. Must be 'fcrepo3' or 'fcrepo4'.")
