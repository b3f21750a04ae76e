"""
Fedora 4 repository client implementation.
"""

import logging

from systems.base import FedoraRestClient
from configuration import DATASTREAM_ID

logger = logging.getLogger(__name__)


class FCRepo4Client(FedoraRestClient):
    """Fedora 4 REST API client.

    Deleted resources leave a tombstone behind in Fedora 4, which has to be
    removed as well before the same path can be reused.
    """

    def __init__(self, fedora_url: str, credentials: dict = None, pool_size: int = 1):
        super().__init__(fedora_url, credentials, pool_size)
        logger.info("Initialized Fedora 4 client")

    @property
    def rest_url(self) -> str:
        return f"{self.fedora_url}/rest"

    def object_url(self, object_id: str) -> str:
        return f"{self.rest_url}/objects/{object_id}"

    def datastream_url(self, object_id: str) -> str:
        return f"{self.object_url(object_id)}/{DATASTREAM_ID}"

    def create_object(self, object_id: str) -> None:
        response = self._request("create object", "PUT", self.object_url(object_id), (201,))
        response.close()

    def create_datastream(self, object_id: str, size: int) -> None:
        self._send_payload("create datastream", "PUT", self.datastream_url(object_id), size, (201,))

    def read_datastream(self, object_id: str) -> int:
        return self._drain("read datastream", self.datastream_url(object_id), (200,))

    def update_datastream(self, object_id: str, size: int) -> None:
        self._send_payload("update datastream", "PUT", self.datastream_url(object_id), size, (204,))

    def delete_datastream(self, object_id: str) -> None:
        self._delete_with_tombstone("delete datastream", self.datastream_url(object_id))

    def delete_object(self, object_id: str) -> None:
        self._delete_with_tombstone("delete object", self.object_url(object_id))

    def _delete_with_tombstone(self, operation: str, url: str) -> None:
        response = self._request(operation, "DELETE", url, (204,))
        response.close()
        response = self._request(f"{operation} tombstone", "DELETE", f"{url}/fcr:tombstone", (204,))
        response.close()
