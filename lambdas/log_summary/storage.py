# lambdas/log_summary/storage.py
import logging
from typing import List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import StorageUnavailable
from .models import AppSettings

logger = logging.getLogger(__name__)


def build_s3_client(settings: AppSettings):
    """Creates the S3 client described by the storage connection string."""
    return boto3.client("s3", **settings.storage_client_kwargs)


def _describe(e: Exception) -> str:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Message", str(e))
    return str(e)


class LogStorage:
    """
    Lists, downloads and uploads objects of one bucket.
    Every boto3 failure surfaces as StorageUnavailable.
    """

    def __init__(self, s3_client, bucket: str):
        self.s3 = s3_client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "LogStorage":
        return cls(build_s3_client(settings), settings.log_bucket)

    def list_names(self, prefix: str) -> List[str]:
        """Returns the names of all objects starting with prefix, in key order."""
        names = []
        try:
            paginator = self.s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                names.extend(item["Key"] for item in page.get("Contents", []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"❌ Could not list s3://{self.bucket}/{prefix}: {_describe(e)}")
            raise StorageUnavailable(f"Listing '{prefix}' failed: {_describe(e)}") from e
        return names

    def download(self, name: str) -> bytes:
        try:
            response = self.s3.get_object(Bucket=self.bucket, Key=name)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"❌ Could not download s3://{self.bucket}/{name}: {_describe(e)}")
            raise StorageUnavailable(f"Downloading '{name}' failed: {_describe(e)}") from e

    def upload(self, name: str, data: bytes, content_type: str = "text/csv") -> None:
        """Writes an object, replacing any existing object of the same name."""
        try:
            self.s3.put_object(Bucket=self.bucket, Key=name, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"❌ Could not upload s3://{self.bucket}/{name}: {_describe(e)}")
            raise StorageUnavailable(f"Uploading '{name}' failed: {_describe(e)}") from e
