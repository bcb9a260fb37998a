"""
S3-compatible object storage.
Signs direct-to-bucket uploads so media never passes through this service.
"""
import logging
from uuid import UUID, uuid4
from typing import Dict

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.config import (
    STORAGE_ACCESS_KEY_ID,
    STORAGE_ENDPOINT_URL,
    STORAGE_PUBLIC_BASE_URL,
    STORAGE_REGION,
    STORAGE_SECRET_ACCESS_KEY,
    UPLOAD_URL_TTL_SECONDS,
)
from app.uploads.exceptions import StorageUnavailableException

logger = logging.getLogger(__name__)


def get_s3_client():
    """Get configured boto3 client for the object store"""
    return boto3.client(
        "s3",
        endpoint_url=STORAGE_ENDPOINT_URL,
        aws_access_key_id=STORAGE_ACCESS_KEY_ID,
        aws_secret_access_key=STORAGE_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name=STORAGE_REGION,
    )


class ObjectStorage:

    def __init__(self, client=None, public_base_url: str = STORAGE_PUBLIC_BASE_URL,
                 expires_in: int = UPLOAD_URL_TTL_SECONDS):
        self._client = client
        self.public_base_url = public_base_url.rstrip("/")
        self.expires_in = expires_in

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    def create_upload_url(self, bucket: str, user_id: UUID) -> Dict[str, str]:
        """
        Sign a PUT for a fresh object under the user's prefix.

        Returns:
            Dict with upload_url, public_url and file_name (``<user_id>/<uuid4>``)
        """
        file_name = f"{user_id}/{uuid4()}"
        try:
            upload_url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": bucket, "Key": file_name},
                ExpiresIn=self.expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Could not sign upload to {bucket}/{file_name}: {e}")
            raise StorageUnavailableException()

        return {
            "upload_url": upload_url,
            "public_url": f"{self.public_base_url}/{bucket}/{file_name}",
            "file_name": file_name,
        }


object_storage = ObjectStorage()


def get_object_storage() -> ObjectStorage:
    return object_storage
