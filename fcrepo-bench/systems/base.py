"""
Base class for Fedora repository REST clients.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple

import requests
from requests.adapters import HTTPAdapter

from configuration import (
    CONNECT_TIMEOUT_SECONDS,
    READ_TIMEOUT_SECONDS,
    PAYLOAD_CHUNK_SIZE,
    PAYLOAD_CONTENT_TYPE,
    PROGRESS_INTERVAL,
)
from common.payload import RandomPayload
from common.types import Action

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """A repository request failed or answered with an unexpected status."""

    def __init__(self, operation: str, url: str, status_code: Optional[int] = None,
                 message: str = ""):
        self.operation = operation
        self.url = url
        self.status_code = status_code
        detail = f"HTTP {status_code}" if status_code is not None else message
        super().__init__(f"{operation} failed for {url}: {detail}")


class FedoraRestClient:
    """REST client for a Fedora repository.

    Subclasses provide the resource layout and the status codes of one
    repository version. All bulk operations run sequentially on the calling
    thread; ``execute`` is called concurrently by the benchmark workers and
    relies on the session's connection pool being sized for them.
    """

    def __init__(self, fedora_url: str, credentials: dict = None, pool_size: int = 1):
        if credentials is None:
            credentials = {}

        self.fedora_url = fedora_url.rstrip("/")
        self.timeout: Tuple[float, Optional[float]] = (CONNECT_TIMEOUT_SECONDS, READ_TIMEOUT_SECONDS)

        self.session = requests.Session()
        user = credentials.get("user")
        if user:
            self.session.auth = (user, credentials.get("password", ""))

        # One pooled connection per worker thread
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max(pool_size, 1))
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        logger.debug(f"Initialized REST client for {self.fedora_url} (pool size {pool_size})")

    # ------------------------------------------------------------------
    # Resource layout, provided by the version specific subclasses
    # ------------------------------------------------------------------

    def object_url(self, object_id: str) -> str:
        raise NotImplementedError

    def datastream_url(self, object_id: str) -> str:
        raise NotImplementedError

    def create_object(self, object_id: str) -> None:
        raise NotImplementedError

    def create_datastream(self, object_id: str, size: int) -> None:
        raise NotImplementedError

    def read_datastream(self, object_id: str) -> int:
        raise NotImplementedError

    def update_datastream(self, object_id: str, size: int) -> None:
        raise NotImplementedError

    def delete_datastream(self, object_id: str) -> None:
        raise NotImplementedError

    def delete_object(self, object_id: str) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _request(self, operation: str, method: str, url: str,
                 expected: Sequence[int], **kwargs) -> requests.Response:
        """Send a request and raise RepositoryError unless the status is expected."""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise RepositoryError(operation, url, message=str(e)) from e

        if response.status_code not in expected:
            response.close()
            raise RepositoryError(operation, url, status_code=response.status_code)
        return response

    def _send_payload(self, operation: str, method: str, url: str, size: int,
                      expected: Sequence[int], params: dict = None) -> None:
        body = RandomPayload(size) if size > 0 else b""
        response = self._request(
            operation, method, url, expected,
            data=body,
            params=params,
            headers={"Content-Type": PAYLOAD_CONTENT_TYPE},
        )
        response.close()

    def _drain(self, operation: str, url: str, expected: Sequence[int]) -> int:
        """GET a resource and consume its body, returning the number of bytes read."""
        response = self._request(operation, "GET", url, expected, stream=True)
        received = 0
        try:
            for chunk in response.iter_content(chunk_size=PAYLOAD_CHUNK_SIZE):
                received += len(chunk)
        except requests.RequestException as e:
            raise RepositoryError(operation, url, message=str(e)) from e
        finally:
            response.close()
        return received

    # ------------------------------------------------------------------
    # Operations used by the benchmark
    # ------------------------------------------------------------------

    def create_objects(self, object_ids: Iterable[str]) -> None:
        """Create an empty object for every id. Raises RepositoryError on the first failure."""
        count = 0
        for object_id in object_ids:
            self.create_object(object_id)
            count += 1
            if count % PROGRESS_INTERVAL == 0:
                logger.debug(f"Created {count} objects")

    def create_datastreams(self, object_ids: Iterable[str], size: int) -> None:
        """Attach a datastream of ``size`` bytes to every object. Raises on the first failure."""
        count = 0
        for object_id in object_ids:
            self.create_datastream(object_id, size)
            count += 1
            if count % PROGRESS_INTERVAL == 0:
                logger.debug(f"Created {count} datastreams")

    def purge_objects(self, object_ids: Iterable[str], purge_datastreams: bool) -> int:
        """Best-effort removal of the benchmark objects.

        Args:
            object_ids: Ids of the objects to remove
            purge_datastreams: Delete each object's datastream before the object

        Returns:
            Number of objects that could not be removed completely
        """
        failures = 0
        for object_id in object_ids:
            try:
                if purge_datastreams:
                    self.delete_datastream(object_id)
                self.delete_object(object_id)
            except RepositoryError as e:
                failures += 1
                logger.warning(f"Unable to purge object {object_id}: {e}")
        if failures:
            logger.warning(f"{failures} object(s) could not be purged")
        return failures

    def execute(self, action: Action, object_id: str, size: int) -> None:
        """Run one benchmark action against one object."""
        if action == Action.CREATE:
            self.create_datastream(object_id, size)
        elif action == Action.READ:
            self.read_datastream(object_id)
        elif action == Action.UPDATE:
            self.update_datastream(object_id, size)
        elif action == Action.DELETE:
            self.delete_datastream(object_id)
        else:
            raise ValueError(f"Unsupported action: {action}")

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
