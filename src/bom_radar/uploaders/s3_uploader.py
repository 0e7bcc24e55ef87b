# uploaders/s3_uploader.py
import logging
from abc import ABC, abstractmethod
from typing import List
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from ..config import RadarConfig
from ..exceptions import StorageError
from ..models import StoredObject

class ObjectStorage(ABC):
    """Minimal object store interface used by the cache and assemblers"""

    @abstractmethod
    def head(self, key: str) -> bool:
        """Return True if an object exists at key"""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Read an object fully"""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None:
        """Write (or overwrite) an object"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete an object; deleting a missing key is not an error"""

    @abstractmethod
    def list(self, prefix: str, delimiter: str = "/") -> List[StoredObject]:
        """List objects directly under prefix"""

class S3Storage(ObjectStorage):
    """S3 (or S3-compatible, e.g. R2/MinIO) bucket storage"""

    NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}

    def __init__(self, config: RadarConfig, client=None):
        self.config = config
        self.bucket = config.bucket_name
        self.logger = logging.getLogger(__name__)
        self.client = client or boto3.client(
            's3',
            aws_access_key_id=config.aws_access_key,
            aws_secret_access_key=config.aws_secret_key,
            region_name=config.region_name,
            endpoint_url=config.endpoint_url
        )

    def head(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in self.NOT_FOUND_CODES:
                return False
            raise StorageError(f"Failed to check {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to check {key}: {e}") from e

    def get(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except (ClientError, BotoCoreError) as e:
            self.logger.error(f"Error reading {key} from S3: {e}")
            raise StorageError(f"Failed to read {key}: {e}") from e

    def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            self.logger.error(f"Error uploading {key} to S3: {e}")
            raise StorageError(f"Failed to upload {key}: {e}") from e

        self.logger.info(f"Uploaded {key} ({len(data)} bytes)")

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

        self.logger.info(f"Deleted {key}")

    def list(self, prefix: str, delimiter: str = "/") -> List[StoredObject]:
        objects = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix, Delimiter=delimiter):
                for obj in page.get("Contents", []):
                    objects.append(StoredObject(
                        key=obj["Key"],
                        size=obj.get("Size", 0),
                        last_modified=obj.get("LastModified")
                    ))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to list {prefix}: {e}") from e
        return objects
