"""Tests for signed uploads, storage and IPFS services."""
import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from apillon.errors import (
    ApplicationError,
    DirectoryDeletingError,
    DirectoryNotFoundError,
    InvalidInputError,
    NotFoundError,
    ProtocolViolationError,
    TransportError,
    UpstreamUploadError,
)
from apillon.protocols import IAPIClient, ISignedUploader
from apillon.services.ipfs import IPFSService
from apillon.services.signed_upload import SignedURLUploader
from apillon.services.storage import StorageService

from conftest import Recorder


def _payload(data) -> bytes:
    return json.dumps(data).encode()


@pytest.fixture
def mock_api():
    api = Mock()
    api.get = AsyncMock(return_value=_payload({"data": {"items": [], "total": 0}}))
    api.post = AsyncMock(return_value=_payload({"data": {}}))
    api.delete = AsyncMock(return_value=_payload({"status": 200, "data": True}))
    return api


class TestSignedURLUploader:
    def test_implements_protocol(self):
        assert isinstance(SignedURLUploader(), ISignedUploader)

    @pytest.mark.asyncio
    async def test_put_without_credentials(self):
        recorder = Recorder(lambda request: httpx.Response(200))

        async with SignedURLUploader(transport=recorder.transport) as uploader:
            await uploader.put("https://storage.test/signed?sig=abc", b"payload")

        request = recorder.requests[0]
        assert request.method == "PUT"
        assert request.content == b"payload"
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_non_2xx_is_upstream_error(self):
        recorder = Recorder(lambda request: httpx.Response(403, content=b"expired"))

        async with SignedURLUploader(transport=recorder.transport) as uploader:
            with pytest.raises(UpstreamUploadError) as exc_info:
                await uploader.put("https://storage.test/signed", b"payload")

        assert exc_info.value.status == 403
        assert exc_info.value.body == "expired"
        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_network_failure_not_retried(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        recorder = Recorder(handler)
        async with SignedURLUploader(transport=recorder.transport) as uploader:
            with pytest.raises(TransportError):
                await uploader.put("https://storage.test/signed", b"payload")

        assert len(recorder.requests) == 1

    @pytest.mark.asyncio
    async def test_rejects_empty_input(self):
        async with SignedURLUploader(transport=httpx.MockTransport(lambda r: httpx.Response(200))) as uploader:
            with pytest.raises(InvalidInputError):
                await uploader.put("", b"x")
            with pytest.raises(InvalidInputError):
                await uploader.put("https://storage.test/u", b"")


class TestStorageService:
    def test_api_mock_matches_protocol(self, mock_api):
        assert isinstance(mock_api, IAPIClient)

    @pytest.mark.asyncio
    async def test_create_bucket(self, mock_api):
        mock_api.post.return_value = _payload({"data": {"bucketUuid": "b1", "name": "docs"}})
        service = StorageService(mock_api)

        bucket = await service.create_bucket("docs", "documents")

        mock_api.post.assert_awaited_once_with(
            "/storage/buckets", json={"name": "docs", "description": "documents"}
        )
        assert bucket.bucket_uuid == "b1"

    @pytest.mark.asyncio
    async def test_create_bucket_omits_empty_description(self, mock_api):
        await StorageService(mock_api).create_bucket("docs")
        mock_api.post.assert_awaited_once_with("/storage/buckets", json={"name": "docs"})

    @pytest.mark.asyncio
    async def test_create_bucket_requires_name(self, mock_api):
        with pytest.raises(InvalidInputError):
            await StorageService(mock_api).create_bucket("")
        mock_api.post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_buckets_by_name(self, mock_api):
        await StorageService(mock_api).list_buckets("docs")
        mock_api.get.assert_awaited_once_with("/storage/buckets", params={"name": "docs"})

    @pytest.mark.asyncio
    async def test_get_bucket_content(self, mock_api):
        mock_api.get.return_value = _payload(
            {"data": {"items": [{"uuid": "d1", "name": "dir", "type": 1}], "total": 1}}
        )
        content = await StorageService(mock_api).get_bucket_content("b1", {"directoryUuid": "d0"})

        mock_api.get.assert_awaited_once_with(
            "/storage/buckets/b1/content", params={"directoryUuid": "d0"}
        )
        assert content.total == 1
        assert content.items[0].is_directory

    @pytest.mark.asyncio
    async def test_list_files_error_tagged_with_bucket(self, mock_api):
        mock_api.get.side_effect = ApplicationError("forbidden", status=403)

        with pytest.raises(ApplicationError) as exc_info:
            await StorageService(mock_api).list_files("b1")

        assert exc_info.value.bucket_uuid == "b1"
        assert exc_info.value.status == 403

    @pytest.mark.asyncio
    async def test_get_file_details(self, mock_api):
        mock_api.get.return_value = _payload({"data": {"fileUuid": "f1", "name": "a.txt", "size": 3}})

        details = await StorageService(mock_api).get_file_details("b1", "f1")

        mock_api.get.assert_awaited_once_with("/storage/buckets/b1/files/f1")
        assert details.size == 3

    @pytest.mark.asyncio
    async def test_empty_identifiers_short_circuit(self, mock_api):
        service = StorageService(mock_api)
        with pytest.raises(InvalidInputError):
            await service.get_file_details("b1", "")
        with pytest.raises(InvalidInputError):
            await service.delete_file("", "f1")
        mock_api.get.assert_not_awaited()
        mock_api.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_file(self, mock_api):
        result = await StorageService(mock_api).delete_file("b1", "f1")
        mock_api.delete.assert_awaited_once_with("/storage/buckets/b1/files/f1")
        assert result["data"] is True

    @pytest.mark.asyncio
    async def test_delete_directory(self, mock_api):
        result = await StorageService(mock_api).delete_directory("b1", "d1")
        mock_api.delete.assert_awaited_once_with("/storage/buckets/b1/directories/d1")
        assert result.success

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error_cls",
        [(40406003, DirectoryNotFoundError), (40006007, DirectoryDeletingError)],
    )
    async def test_delete_directory_error_envelope(self, mock_api, status, error_cls):
        mock_api.delete.side_effect = ApplicationError("raw", status=status)

        with pytest.raises(error_cls) as exc_info:
            await StorageService(mock_api).delete_directory("b1", "d1")

        assert exc_info.value.status == status
        assert exc_info.value.bucket_uuid == "b1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error_cls",
        [(40406003, DirectoryNotFoundError), (40006007, DirectoryDeletingError)],
    )
    async def test_delete_directory_status_in_body(self, mock_api, status, error_cls):
        mock_api.delete.return_value = _payload({"status": status, "data": False})

        with pytest.raises(error_cls):
            await StorageService(mock_api).delete_directory("b1", "d1")

    @pytest.mark.asyncio
    async def test_delete_directory_other_error_unchanged(self, mock_api):
        original = ApplicationError("server", status=50000001)
        mock_api.delete.side_effect = original

        with pytest.raises(ApplicationError) as exc_info:
            await StorageService(mock_api).delete_directory("b1", "d1")

        assert exc_info.value is original
        assert not isinstance(exc_info.value, (DirectoryNotFoundError, DirectoryDeletingError))


class TestIPFSService:
    @pytest.mark.asyncio
    async def test_get_link(self, mock_api):
        mock_api.get.return_value = _payload({"data": {"link": "https://ipfs.test/ipfs/Qm1"}})

        link = await IPFSService(mock_api).get_link("Qm1")

        mock_api.get.assert_awaited_once_with("/storage/link-on-ipfs/Qm1")
        assert link == "https://ipfs.test/ipfs/Qm1"

    @pytest.mark.asyncio
    async def test_empty_link_is_not_found(self, mock_api):
        mock_api.get.return_value = _payload({"data": {"link": ""}})

        with pytest.raises(NotFoundError, match="Qm1"):
            await IPFSService(mock_api).get_link("Qm1")

    @pytest.mark.asyncio
    async def test_empty_cid(self, mock_api):
        with pytest.raises(InvalidInputError):
            await IPFSService(mock_api).get_link("")

    @pytest.mark.asyncio
    async def test_cluster_info(self, mock_api):
        mock_api.get.return_value = _payload(
            {"data": {"projectUuid": "p1", "ipfsGateway": "https://gw/ipfs/"}}
        )
        info = await IPFSService(mock_api).get_cluster_info()

        mock_api.get.assert_awaited_once_with("/storage/ipfs-cluster-info")
        assert info.project_uuid == "p1"
        assert info.ipfs_gateway == "https://gw/ipfs/"


MALFORMED_LISTINGS = [
    {"data": [1]},
    {"data": []},
    {"data": {"items": ["x"]}},
    {"data": {"items": "x"}},
]


class TestMalformedResponses:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", MALFORMED_LISTINGS)
    async def test_list_buckets(self, mock_api, body):
        mock_api.get.return_value = _payload(body)

        with pytest.raises(ProtocolViolationError):
            await StorageService(mock_api).list_buckets()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", MALFORMED_LISTINGS)
    async def test_list_files(self, mock_api, body):
        mock_api.get.return_value = _payload(body)

        with pytest.raises(ProtocolViolationError) as exc_info:
            await StorageService(mock_api).list_files("b1")

        assert exc_info.value.bucket_uuid == "b1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", MALFORMED_LISTINGS)
    async def test_get_bucket_content(self, mock_api, body):
        mock_api.get.return_value = _payload(body)

        with pytest.raises(ProtocolViolationError) as exc_info:
            await StorageService(mock_api).get_bucket_content("b1")

        assert exc_info.value.bucket_uuid == "b1"

    @pytest.mark.asyncio
    async def test_get_file_details(self, mock_api):
        mock_api.get.return_value = _payload({"data": ["f1"]})

        with pytest.raises(ProtocolViolationError) as exc_info:
            await StorageService(mock_api).get_file_details("b1", "f1")

        assert exc_info.value.bucket_uuid == "b1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"data": [1]}, {"data": []}, {"data": "x"}, {}])
    async def test_get_ipfs_cluster_info(self, mock_api, body):
        mock_api.get.return_value = _payload(body)

        with pytest.raises(ProtocolViolationError):
            await IPFSService(mock_api).get_cluster_info()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"data": []}, {"data": {"link": 7}}])
    async def test_get_link(self, mock_api, body):
        mock_api.get.return_value = _payload(body)

        with pytest.raises(ProtocolViolationError):
            await IPFSService(mock_api).get_link("Qm1")
