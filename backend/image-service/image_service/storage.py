from minio import Minio
import structlog
from image_service.config import Settings
from image_service.exceptions import StoreError
import io
from typing import Optional

logger = structlog.get_logger(__name__)


def create_client(settings: Settings) -> Minio:
    """Build the S3 client from settings"""
    return Minio(
        settings.s3_endpoint,
        access_key=settings.aws_access_key_id,
        secret_key=settings.aws_secret_access_key,
        region=settings.aws_region,
        secure=settings.s3_secure
    )


class ObjectStore:
    """Writes image objects into a single bucket"""

    def __init__(self, settings: Settings, client: Optional[Minio] = None):
        self.bucket_name = settings.s3_bucket_name
        self.public_url_base = settings.public_url_base
        self.client = client if client is not None else create_client(settings)

    def public_url(self, key: str) -> str:
        return f"{self.public_url_base}/{key}"

    def check_connection(self) -> bool:
        """Check the bucket is reachable"""
        try:
            exists = self.client.bucket_exists(self.bucket_name)
        except Exception as e:
            logger.error("Object storage connection failed", bucket=self.bucket_name, error=str(e))
            raise StoreError(f"Object storage unavailable: {e}")

        if not exists:
            raise StoreError(f"Bucket {self.bucket_name} does not exist")
        return True

    def put_object(self, key: str, contents: bytes, content_type: str) -> str:
        """Store the object under key and return its public URL"""
        try:
            self.client.put_object(
                bucket_name=self.bucket_name,
                object_name=key,
                data=io.BytesIO(contents),
                length=len(contents),
                content_type=content_type
            )
        except Exception as e:
            logger.error("Failed to store object", bucket=self.bucket_name, key=key, error=str(e))
            raise StoreError(f"Failed to store file: {e}")

        url = self.public_url(key)
        logger.info("Object stored", bucket=self.bucket_name, key=key, size=len(contents))
        return url

    def delete_object(self, key: str):
        try:
            self.client.remove_object(self.bucket_name, key)
        except Exception as e:
            logger.error("Failed to delete object", bucket=self.bucket_name, key=key, error=str(e))
            raise StoreError(f"Failed to delete file: {e}")

        logger.info("Object deleted", bucket=self.bucket_name, key=key)
