"""Unit tests for the storage repository."""

import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError, EndpointConnectionError
from chunk_relay.core.exceptions import StorageError
from chunk_relay.models.upload_session import PartRecord
from chunk_relay.repositories.storage_repo import StorageRepository


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def s3_client():
    return MagicMock()


@pytest.fixture
def repo(s3_client):
    repo = StorageRepository()
    repo.client = s3_client
    repo.bucket_name = "relay-bucket"
    return repo


@pytest.mark.asyncio
async def test_create_multipart_upload(repo, s3_client):
    s3_client.create_multipart_upload.return_value = {"UploadId": "abc"}

    upload_id = await repo.create_multipart_upload("videos/movie.mp4", "video/mp4")

    assert upload_id == "abc"
    s3_client.create_multipart_upload.assert_called_once_with(
        Bucket="relay-bucket", Key="videos/movie.mp4", ContentType="video/mp4"
    )


@pytest.mark.asyncio
async def test_create_multipart_upload_wraps_client_error(repo, s3_client):
    s3_client.create_multipart_upload.side_effect = client_error("AccessDenied", "CreateMultipartUpload")

    with pytest.raises(StorageError, match="AccessDenied"):
        await repo.create_multipart_upload("movie.mp4", "video/mp4")


@pytest.mark.asyncio
async def test_upload_part_returns_etag(repo, s3_client):
    s3_client.upload_part.return_value = {"ETag": '"e1"'}
    upload = repo.resume_multipart_upload("movie.mp4", "abc")

    etag = await upload.upload_part(1, b"data")

    assert etag == '"e1"'
    s3_client.upload_part.assert_called_once_with(
        Bucket="relay-bucket", Key="movie.mp4", UploadId="abc", PartNumber=1, Body=b"data"
    )


@pytest.mark.asyncio
async def test_complete_sorts_parts(repo, s3_client):
    upload = repo.resume_multipart_upload("movie.mp4", "abc")
    parts = [PartRecord(part_number=3, etag="c"), PartRecord(part_number=1, etag="a"), PartRecord(part_number=2, etag="b")]

    await upload.complete(parts)

    kwargs = s3_client.complete_multipart_upload.call_args.kwargs
    assert kwargs["MultipartUpload"] == {
        "Parts": [
            {"PartNumber": 1, "ETag": "a"},
            {"PartNumber": 2, "ETag": "b"},
            {"PartNumber": 3, "ETag": "c"},
        ]
    }
    assert kwargs["UploadId"] == "abc"


@pytest.mark.asyncio
async def test_abort_wraps_connection_error(repo, s3_client):
    s3_client.abort_multipart_upload.side_effect = EndpointConnectionError(endpoint_url="https://s3")
    upload = repo.resume_multipart_upload("movie.mp4", "abc")

    with pytest.raises(StorageError):
        await upload.abort()


@pytest.mark.asyncio
async def test_object_exists(repo, s3_client):
    s3_client.head_object.return_value = {"ContentLength": 10}
    assert await repo.object_exists("movie.mp4") is True


@pytest.mark.asyncio
async def test_object_missing(repo, s3_client):
    s3_client.head_object.side_effect = client_error("404", "HeadObject")
    assert await repo.object_exists("movie.mp4") is False


@pytest.mark.asyncio
async def test_object_exists_propagates_other_errors(repo, s3_client):
    s3_client.head_object.side_effect = client_error("403", "HeadObject")
    with pytest.raises(StorageError):
        await repo.object_exists("movie.mp4")
