"""
Models for the apillon package.

Immutable dataclasses for request payloads and decoded API responses.
Unknown keys are ignored and missing optional keys default, but a body of
the wrong shape raises ProtocolViolationError.
"""
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import ProtocolViolationError


@dataclass(frozen=True)
class FileMetadata:
    """Declared metadata for one file of an upload session."""
    file_name: str
    content_type: Optional[str] = None
    path: Optional[str] = None  # directory inside the bucket

    def to_payload(self, default_content_type: str = "text/plain") -> Dict[str, Any]:
        payload = {
            "fileName": self.file_name,
            "contentType": self.content_type or default_content_type,
        }
        if self.path:
            payload["path"] = self.path
        return payload


@dataclass(frozen=True)
class UploadFile:
    """File to upload: metadata plus raw content."""
    file_name: str
    content: Union[bytes, str]
    content_type: Optional[str] = None
    path: Optional[str] = None

    @property
    def metadata(self) -> FileMetadata:
        return FileMetadata(self.file_name, self.content_type, self.path)

    @property
    def data(self) -> bytes:
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return self.content

    @classmethod
    def from_path(cls, local_path: Union[str, Path], path: Optional[str] = None,
                  file_name: Optional[str] = None) -> "UploadFile":
        """Read a local file; content type is guessed from the extension."""
        local_path = Path(local_path)
        content_type, _ = mimetypes.guess_type(local_path.name)
        return cls(
            file_name=file_name or local_path.name,
            content=local_path.read_bytes(),
            content_type=content_type,
            path=path,
        )


@dataclass(frozen=True)
class Bucket:
    bucket_uuid: str
    name: str
    description: Optional[str] = None
    bucket_type: Optional[int] = None
    size: Optional[int] = None
    max_size: Optional[int] = None
    create_time: Optional[str] = None
    update_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bucket":
        return cls(
            bucket_uuid=data.get("bucketUuid", ""),
            name=data.get("name", ""),
            description=data.get("description"),
            bucket_type=data.get("bucketType"),
            size=data.get("size"),
            max_size=data.get("maxSize"),
            create_time=data.get("createTime"),
            update_time=data.get("updateTime"),
        )


@dataclass(frozen=True)
class StorageFile:
    """File stored in a bucket."""
    file_uuid: str
    name: str
    cid: Optional[str] = None
    content_type: Optional[str] = None
    path: Optional[str] = None
    size: Optional[int] = None
    file_status: Optional[int] = None
    link: Optional[str] = None
    directory_uuid: Optional[str] = None
    create_time: Optional[str] = None
    update_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageFile":
        return cls(
            file_uuid=data.get("fileUuid", ""),
            name=data.get("name", ""),
            cid=data.get("CID") or data.get("cid"),
            content_type=data.get("contentType"),
            path=data.get("path"),
            size=data.get("size"),
            file_status=data.get("fileStatus"),
            link=data.get("link"),
            directory_uuid=data.get("directoryUuid"),
            create_time=data.get("createTime"),
            update_time=data.get("updateTime"),
        )


@dataclass(frozen=True)
class BucketContentItem:
    """Entry of a bucket listing: a file or a directory."""
    uuid: str
    name: str
    type: Optional[int] = None  # 1 = directory, 2 = file
    cid: Optional[str] = None
    content_type: Optional[str] = None
    size: Optional[int] = None
    link: Optional[str] = None
    parent_directory_uuid: Optional[str] = None

    @property
    def is_directory(self) -> bool:
        return self.type == 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BucketContentItem":
        return cls(
            uuid=data.get("uuid", ""),
            name=data.get("name", ""),
            type=data.get("type"),
            cid=data.get("CID") or data.get("cid"),
            content_type=data.get("contentType"),
            size=data.get("size"),
            link=data.get("link"),
            parent_directory_uuid=data.get("parentDirectoryUuid"),
        )


def _object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ProtocolViolationError(
            f"malformed {what}: expected object, got {type(value).__name__}"
        )
    return value


def data_object(payload: Dict[str, Any], what: str) -> Dict[str, Any]:
    """The `data` object of a response envelope."""
    return _object(_object(payload, what).get("data"), f"{what} data")


def _items(payload: Dict[str, Any], what: str) -> List[Dict[str, Any]]:
    items = data_object(payload, what).get("items")
    if items is None:
        return []
    if not isinstance(items, list):
        raise ProtocolViolationError(
            f"malformed {what}: items is {type(items).__name__}, expected list"
        )
    return [_object(item, f"{what} item") for item in items]


def _total(payload: Dict[str, Any]) -> int:
    total = payload["data"].get("total")
    return total if isinstance(total, int) and not isinstance(total, bool) else 0


@dataclass(frozen=True)
class BucketList:
    items: List[Bucket] = field(default_factory=list)
    total: int = 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BucketList":
        return cls([Bucket.from_dict(i) for i in _items(payload, "bucket list")], _total(payload))


@dataclass(frozen=True)
class FileList:
    items: List[StorageFile] = field(default_factory=list)
    total: int = 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "FileList":
        return cls([StorageFile.from_dict(i) for i in _items(payload, "file list")], _total(payload))


@dataclass(frozen=True)
class BucketContent:
    items: List[BucketContentItem] = field(default_factory=list)
    total: int = 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BucketContent":
        return cls(
            [BucketContentItem.from_dict(i) for i in _items(payload, "bucket content")],
            _total(payload),
        )


@dataclass(frozen=True)
class DeleteDirectoryResult:
    status: Optional[int] = None
    success: bool = False

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DeleteDirectoryResult":
        return cls(status=payload.get("status"), success=bool(payload.get("data")))


@dataclass(frozen=True)
class IPFSClusterInfo:
    secret: Optional[str] = None
    project_uuid: Optional[str] = None
    ipfs_gateway: Optional[str] = None
    ipns_gateway: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "IPFSClusterInfo":
        data = data_object(payload, "IPFS cluster info")
        return cls(
            secret=data.get("secret"),
            project_uuid=data.get("projectUuid"),
            ipfs_gateway=data.get("ipfsGateway"),
            ipns_gateway=data.get("ipnsGateway"),
        )


@dataclass(frozen=True)
class SignedFileTarget:
    """One entry of the session-start response."""
    url: str
    file_name: Optional[str] = None
    file_uuid: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SignedFileTarget":
        data = _object(data, "start upload file entry")
        url = data.get("url")
        if url is None:
            url = ""
        if not isinstance(url, str):
            raise ProtocolViolationError(
                f"malformed start upload file entry: url is {type(url).__name__}, expected str"
            )
        return cls(
            url=url,
            file_name=data.get("fileName"),
            file_uuid=data.get("fileUuid"),
            path=data.get("path"),
        )


@dataclass(frozen=True)
class StartUploadResult:
    """Decoded session-start response."""
    session_uuid: str
    files: List[SignedFileTarget] = field(default_factory=list)

    @property
    def urls(self) -> List[str]:
        """Non-empty signed URLs, in response order."""
        return [f.url for f in self.files if f.url]

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "StartUploadResult":
        """
        Parse the session-start response.

        Raises:
            ProtocolViolationError: missing/non-string session UUID, non-list
            files, non-object entries or non-string URLs
        """
        data = data_object(payload, "start upload response")
        session_uuid = data.get("sessionUuid")
        if not isinstance(session_uuid, str) or not session_uuid:
            raise ProtocolViolationError("start upload response has no session UUID")
        files = data.get("files")
        if files is None:
            files = []
        if not isinstance(files, list):
            raise ProtocolViolationError("start upload response has no data.files list")
        return cls(
            session_uuid=session_uuid,
            files=[SignedFileTarget.from_dict(f) for f in files],
        )
