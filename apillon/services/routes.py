"""Route table for the storage API. Identifiers are validated and percent-encoded."""
from urllib.parse import quote

from ..errors import InvalidInputError


def _segment(name: str, value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{name} cannot be empty")
    return quote(value, safe="")


BUCKETS = "/storage/buckets"
IPFS_CLUSTER_INFO = "/storage/ipfs-cluster-info"


def bucket_content(bucket_uuid: str) -> str:
    return f"{BUCKETS}/{_segment('bucket UUID', bucket_uuid)}/content"


def bucket_files(bucket_uuid: str) -> str:
    return f"{BUCKETS}/{_segment('bucket UUID', bucket_uuid)}/files"


def bucket_file(bucket_uuid: str, file_uuid: str) -> str:
    return f"{bucket_files(bucket_uuid)}/{_segment('file UUID', file_uuid)}"


def bucket_directory(bucket_uuid: str, directory_uuid: str) -> str:
    bucket = _segment("bucket UUID", bucket_uuid)
    return f"{BUCKETS}/{bucket}/directories/{_segment('directory UUID', directory_uuid)}"


def upload_start(bucket_uuid: str) -> str:
    return f"{BUCKETS}/{_segment('bucket UUID', bucket_uuid)}/upload"


def upload_end(bucket_uuid: str, session_uuid: str) -> str:
    return f"{upload_start(bucket_uuid)}/{_segment('session UUID', session_uuid)}/end"


def ipfs_link(cid: str) -> str:
    return f"/storage/link-on-ipfs/{_segment('CID', cid)}"
