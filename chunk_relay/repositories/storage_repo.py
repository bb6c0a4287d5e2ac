"""Storage repository for S3-compatible multipart uploads."""

import asyncio
from functools import partial
from typing import Iterable, Optional
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError
from ..config.storage import get_storage_client, get_bucket_name
from ..core.exceptions import StorageError
from ..models.upload_session import PartRecord


async def _call(func, **kwargs):
    """Run a blocking boto3 call in the default executor."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, partial(func, **kwargs))
    except (BotoCoreError, ClientError) as e:
        raise StorageError(str(e)) from e


class MultipartUpload:
    """Handle on an in-progress multipart upload."""

    def __init__(self, client: BaseClient, bucket: str, key: str, upload_id: str):
        self.client = client
        self.bucket = bucket
        self.key = key
        self.upload_id = upload_id

    async def upload_part(self, part_number: int, data: bytes) -> str:
        """
        Upload one part.
        Args:
            part_number: 1-indexed part number
            data: Part payload
        Returns:
            ETag of the stored part
        """
        response = await _call(
            self.client.upload_part,
            Bucket=self.bucket,
            Key=self.key,
            UploadId=self.upload_id,
            PartNumber=part_number,
            Body=data,
        )
        return response["ETag"]

    async def complete(self, parts: Iterable[PartRecord]) -> dict:
        """Complete multipart upload by combining all parts."""
        multipart_upload = {
            "Parts": [
                {"PartNumber": part.part_number, "ETag": part.etag}
                for part in sorted(parts, key=lambda p: p.part_number)
            ]
        }
        return await _call(
            self.client.complete_multipart_upload,
            Bucket=self.bucket,
            Key=self.key,
            UploadId=self.upload_id,
            MultipartUpload=multipart_upload,
        )

    async def abort(self) -> None:
        """Abort multipart upload and clean up parts."""
        await _call(
            self.client.abort_multipart_upload,
            Bucket=self.bucket,
            Key=self.key,
            UploadId=self.upload_id,
        )


class StorageRepository:
    """Repository for storage operations against the configured provider."""

    def __init__(self, provider: Optional[str] = None):
        self.provider = provider
        self.client: Optional[BaseClient] = None
        self.bucket_name: Optional[str] = None

    def _get_client(self) -> BaseClient:
        """Get or create storage client."""
        if self.client is None:
            self.client = get_storage_client(self.provider)
            self.bucket_name = get_bucket_name(self.provider)
        return self.client

    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        """Initiate multipart upload and return upload_id."""
        client = self._get_client()
        response = await _call(
            client.create_multipart_upload,
            Bucket=self.bucket_name,
            Key=key,
            ContentType=content_type,
        )
        return response["UploadId"]

    def resume_multipart_upload(self, key: str, upload_id: str) -> MultipartUpload:
        """Get a handle on an existing multipart upload."""
        client = self._get_client()
        return MultipartUpload(client, self.bucket_name, key, upload_id)

    async def object_exists(self, key: str) -> bool:
        """Check if an object exists in storage."""
        client = self._get_client()
        try:
            await _call(client.head_object, Bucket=self.bucket_name, Key=key)
            return True
        except StorageError as e:
            cause = e.__cause__
            if isinstance(cause, ClientError) and cause.response.get("Error", {}).get(
                "Code"
            ) in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
