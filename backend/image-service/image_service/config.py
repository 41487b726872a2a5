from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Database
    database_url: str = Field("sqlite:///./images.db", env="DATABASE_URL")

    # Object storage (S3 compatible)
    s3_bucket_name: str = Field("images", env="S3_BUCKET_NAME")
    s3_endpoint: str = Field("s3.amazonaws.com", env="S3_ENDPOINT")
    s3_secure: bool = Field(True, env="S3_SECURE")
    s3_public_url_base: Optional[str] = Field(None, env="S3_PUBLIC_URL_BASE")
    aws_region: Optional[str] = Field(None, env="AWS_REGION")
    aws_access_key_id: Optional[str] = Field(None, env="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(None, env="AWS_SECRET_ACCESS_KEY")

    # Upload admission
    max_upload_size: int = Field(10 * 1024 * 1024, env="MAX_UPLOAD_SIZE")  # 10MB
    allowed_mime_types: List[str] = Field(
        ["image/jpeg", "image/png", "image/gif"], env="ALLOWED_MIME_TYPES"
    )

    # API
    api_title: str = "Image Upload Service"
    api_description: str = "Stores uploaded images in S3 and keeps their metadata"
    api_version: str = "1.0.0"
    api_host: str = Field("0.0.0.0", env="API_HOST")
    port: int = Field(3000, env="PORT")

    # Logging
    log_level: str = Field("INFO", env="LOG_LEVEL")

    # Metrics
    metrics_enabled: bool = Field(True, env="METRICS_ENABLED")

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def public_url_base(self) -> str:
        if self.s3_public_url_base:
            return self.s3_public_url_base.rstrip("/")
        return f"https://{self.s3_bucket_name}.s3.amazonaws.com"
