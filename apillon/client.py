"""Storage client - coordinates all storage services."""
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import httpx

from .config import ClientConfig
from .models import (
    Bucket,
    BucketContent,
    BucketList,
    DeleteDirectoryResult,
    FileList,
    IPFSClusterInfo,
    StartUploadResult,
    StorageFile,
    UploadFile,
)
from .orchestrator import SessionUploadHandler
from .services.api_client import HTTPAPIClient
from .services.ipfs import IPFSService
from .services.signed_upload import SignedURLUploader
from .services.storage import StorageService


class StorageClient:
    """
    Apillon storage client using injected configuration.

    Usage:
        async with StorageClient(api_key) as client:
            buckets = await client.list_buckets()
            result = await client.upload_files(bucket_uuid, [
                UploadFile("hello.txt", b"hello", path="docs/"),
            ])
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize client.

        Args:
            api_key: API key; falls back to APILLON_API_KEY when omitted
            config: Full configuration (api_key is ignored when given)
            transport: Optional httpx transport, shared by API and signed-URL calls
        """
        self._config = config or ClientConfig.from_env(api_key=api_key)
        self._transport = transport

        # Initialized in __aenter__
        self._api_client: Optional[HTTPAPIClient] = None
        self._uploader: Optional[SignedURLUploader] = None
        self._storage: Optional[StorageService] = None
        self._ipfs: Optional[IPFSService] = None
        self._upload_handler: Optional[SessionUploadHandler] = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self):
        self._api_client = HTTPAPIClient(self._config, self._transport)
        await self._api_client.__aenter__()
        self._uploader = SignedURLUploader(transport=self._transport)
        await self._uploader.__aenter__()

        self._storage = StorageService(self._api_client)
        self._ipfs = IPFSService(self._api_client)
        self._upload_handler = SessionUploadHandler(
            self._api_client, self._uploader, self._config
        )
        return self

    async def __aexit__(self, *args):
        if self._uploader:
            await self._uploader.__aexit__(*args)
        if self._api_client:
            await self._api_client.__aexit__(*args)

    # Buckets, files, directories

    async def create_bucket(self, name: str, description: Optional[str] = None) -> Bucket:
        assert self._storage is not None
        return await self._storage.create_bucket(name, description)

    async def list_buckets(self, name: Optional[str] = None,
                           params: Optional[Mapping[str, str]] = None) -> BucketList:
        assert self._storage is not None
        return await self._storage.list_buckets(name, params)

    async def get_bucket_content(self, bucket_uuid: str,
                                 params: Optional[Mapping[str, str]] = None) -> BucketContent:
        assert self._storage is not None
        return await self._storage.get_bucket_content(bucket_uuid, params)

    async def list_files(self, bucket_uuid: str,
                         params: Optional[Mapping[str, str]] = None) -> FileList:
        assert self._storage is not None
        return await self._storage.list_files(bucket_uuid, params)

    async def get_file_details(self, bucket_uuid: str, file_uuid: str) -> StorageFile:
        assert self._storage is not None
        return await self._storage.get_file_details(bucket_uuid, file_uuid)

    async def delete_file(self, bucket_uuid: str, file_uuid: str) -> Dict[str, Any]:
        assert self._storage is not None
        return await self._storage.delete_file(bucket_uuid, file_uuid)

    async def delete_directory(self, bucket_uuid: str, directory_uuid: str) -> DeleteDirectoryResult:
        assert self._storage is not None
        return await self._storage.delete_directory(bucket_uuid, directory_uuid)

    # IPFS

    async def get_ipfs_link(self, cid: str) -> str:
        assert self._ipfs is not None
        return await self._ipfs.get_link(cid)

    async def get_ipfs_cluster_info(self) -> IPFSClusterInfo:
        assert self._ipfs is not None
        return await self._ipfs.get_cluster_info()

    # Uploads

    def on(self, event_name: str, callback: Callable):
        """Subscribe to upload progress events (see SessionUploadHandler.on)."""
        assert self._upload_handler is not None
        self._upload_handler.on(event_name, callback)

    def off(self, event_name: str, callback: Callable):
        """Unsubscribe a callback registered with on()."""
        assert self._upload_handler is not None
        self._upload_handler.off(event_name, callback)

    async def upload_files(self, bucket_uuid: str, files: Sequence[UploadFile]) -> Dict[str, Any]:
        """Run start session -> upload all -> end session."""
        assert self._upload_handler is not None
        return await self._upload_handler.upload(bucket_uuid, files)

    async def start_upload(self, bucket_uuid: str, files: Sequence[UploadFile]) -> StartUploadResult:
        assert self._upload_handler is not None
        return await self._upload_handler.start_session(bucket_uuid, [f.metadata for f in files])

    async def upload_to_url(self, url: str, content: bytes) -> None:
        assert self._upload_handler is not None
        await self._upload_handler.upload_to_url(url, content)

    async def end_upload(self, bucket_uuid: str, session_uuid: str) -> Dict[str, Any]:
        assert self._upload_handler is not None
        return await self._upload_handler.end_session(bucket_uuid, session_uuid)
