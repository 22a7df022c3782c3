"""IPFS lookups: gateway links and cluster info."""
from ..errors import NotFoundError, ProtocolViolationError
from ..models import IPFSClusterInfo, data_object
from ..protocols import IAPIClient
from . import routes
from .api_client import decode_json


class IPFSService:
    """Read-only IPFS queries."""

    def __init__(self, api_client: IAPIClient):
        self._api = api_client

    async def get_link(self, cid: str) -> str:
        """Get (or have the API generate) a gateway link for a CID."""
        payload = decode_json(await self._api.get(routes.ipfs_link(cid)), "IPFS link")
        link = data_object(payload, "IPFS link").get("link")
        if link is not None and not isinstance(link, str):
            raise ProtocolViolationError(
                f"malformed IPFS link: expected string, got {type(link).__name__}"
            )
        if not link:
            raise NotFoundError(f"no IPFS link found for CID {cid}", status=404)
        return link

    async def get_cluster_info(self) -> IPFSClusterInfo:
        raw = await self._api.get(routes.IPFS_CLUSTER_INFO)
        return IPFSClusterInfo.from_dict(decode_json(raw, "IPFS cluster info"))
