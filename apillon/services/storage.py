"""
Storage Service - Single Responsibility: bucket, file and directory operations.

Thin request/response wrappers over the API client. Errors propagate
unchanged, tagged with the bucket they concern.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from ..errors import (
    DIRECTORY_DELETING,
    DIRECTORY_NOT_FOUND,
    ApillonError,
    ApplicationError,
    DirectoryDeletingError,
    DirectoryNotFoundError,
    InvalidInputError,
)
from ..models import (
    Bucket,
    BucketContent,
    BucketList,
    DeleteDirectoryResult,
    FileList,
    StorageFile,
    data_object,
)
from ..protocols import IAPIClient
from . import routes
from .api_client import decode_json

logger = logging.getLogger(__name__)


def _directory_error(status: Optional[int]) -> Optional[ApplicationError]:
    if status == DIRECTORY_NOT_FOUND:
        return DirectoryNotFoundError("directory does not exist", status=status)
    if status == DIRECTORY_DELETING:
        return DirectoryDeletingError("directory is already marked for deletion", status=status)
    return None


class StorageService:
    """Bucket/file/directory operations for the storage API."""

    def __init__(self, api_client: IAPIClient):
        """
        Initialize storage service.

        Args:
            api_client: Authenticated API client
        """
        self._api = api_client

    async def create_bucket(self, name: str, description: Optional[str] = None) -> Bucket:
        if not name:
            raise InvalidInputError("bucket name cannot be empty")

        body = {"name": name}
        if description:
            body["description"] = description
        payload = decode_json(await self._api.post(routes.BUCKETS, json=body), "create bucket")
        return Bucket.from_dict(data_object(payload, "create bucket"))

    async def list_buckets(
        self,
        name: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> BucketList:
        """List buckets, optionally filtered by name."""
        query = dict(params or {})
        if name:
            query["name"] = name
        payload = decode_json(await self._api.get(routes.BUCKETS, params=query), "list buckets")
        return BucketList.from_dict(payload)

    async def get_bucket_content(
        self,
        bucket_uuid: str,
        params: Optional[Mapping[str, str]] = None,
    ) -> BucketContent:
        """
        List files and directories of a bucket.

        Args:
            bucket_uuid: Bucket identifier
            params: Optional query (directoryUuid, search, page, limit, ...)
        """
        path = routes.bucket_content(bucket_uuid)
        try:
            raw = await self._api.get(path, params=params)
            return BucketContent.from_dict(decode_json(raw, "bucket content"))
        except ApillonError as exc:
            exc.with_context(bucket_uuid=bucket_uuid)
            raise

    async def list_files(
        self,
        bucket_uuid: str,
        params: Optional[Mapping[str, str]] = None,
    ) -> FileList:
        path = routes.bucket_files(bucket_uuid)
        try:
            raw = await self._api.get(path, params=params)
            return FileList.from_dict(decode_json(raw, "list files"))
        except ApillonError as exc:
            exc.with_context(bucket_uuid=bucket_uuid)
            raise

    async def get_file_details(self, bucket_uuid: str, file_uuid: str) -> StorageFile:
        path = routes.bucket_file(bucket_uuid, file_uuid)
        try:
            payload = decode_json(await self._api.get(path), "file details")
            return StorageFile.from_dict(data_object(payload, "file details"))
        except ApillonError as exc:
            exc.with_context(bucket_uuid=bucket_uuid, file_name=file_uuid)
            raise

    async def delete_file(self, bucket_uuid: str, file_uuid: str) -> Dict[str, Any]:
        path = routes.bucket_file(bucket_uuid, file_uuid)
        try:
            return decode_json(await self._api.delete(path), "delete file")
        except ApillonError as exc:
            exc.with_context(bucket_uuid=bucket_uuid, file_name=file_uuid)
            raise

    async def delete_directory(self, bucket_uuid: str, directory_uuid: str) -> DeleteDirectoryResult:
        """
        Delete a directory.

        Raises:
            DirectoryNotFoundError: directory does not exist
            DirectoryDeletingError: directory already marked for deletion
        """
        path = routes.bucket_directory(bucket_uuid, directory_uuid)
        try:
            payload = decode_json(await self._api.delete(path), "delete directory")
        except ApplicationError as exc:
            mapped = _directory_error(exc.status)
            if mapped is None:
                exc.with_context(bucket_uuid=bucket_uuid)
                raise
            raise mapped.with_context(bucket_uuid=bucket_uuid) from exc
        except ApillonError as exc:
            exc.with_context(bucket_uuid=bucket_uuid)
            raise

        result = DeleteDirectoryResult.from_dict(payload)
        mapped = _directory_error(result.status)
        if mapped is not None:
            raise mapped.with_context(bucket_uuid=bucket_uuid)
        logger.debug("Deleted directory %s in bucket %s", directory_uuid, bucket_uuid)
        return result
