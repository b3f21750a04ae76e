"""
Fedora 3 repository client implementation.
"""

import logging

from systems.base import FedoraRestClient
from configuration import DATASTREAM_ID, FCREPO3_PID_NAMESPACE

logger = logging.getLogger(__name__)


class FCRepo3Client(FedoraRestClient):
    """Fedora 3 REST API client.

    Fedora 3 requires namespaced PIDs, so every benchmark id is mapped to
    ``<namespace>:<id>``. Datastreams are managed content (control group M).
    """

    def __init__(self, fedora_url: str, credentials: dict = None, pool_size: int = 1):
        super().__init__(fedora_url, credentials, pool_size)
        logger.info("Initialized Fedora 3 client")

    def object_url(self, object_id: str) -> str:
        return f"{self.fedora_url}/objects/{FCREPO3_PID_NAMESPACE}:{object_id}"

    def datastream_url(self, object_id: str) -> str:
        return f"{self.object_url(object_id)}/datastreams/{DATASTREAM_ID}"

    def create_object(self, object_id: str) -> None:
        response = self._request("create object", "POST", self.object_url(object_id), (201,))
        response.close()

    def create_datastream(self, object_id: str, size: int) -> None:
        self._send_payload(
            "create datastream", "POST", self.datastream_url(object_id), size, (201,),
            params={"controlGroup": "M", "dsLabel": DATASTREAM_ID},
        )

    def read_datastream(self, object_id: str) -> int:
        return self._drain("read datastream", f"{self.datastream_url(object_id)}/content", (200,))

    def update_datastream(self, object_id: str, size: int) -> None:
        self._send_payload("update datastream", "PUT", self.datastream_url(object_id), size, (200,))

    def delete_datastream(self, object_id: str) -> None:
        response = self._request("delete datastream", "DELETE",
                                 self.datastream_url(object_id), (200, 204))
        response.close()

    def delete_object(self, object_id: str) -> None:
        response = self._request("delete object", "DELETE", self.object_url(object_id), (200, 204))
        response.close()
