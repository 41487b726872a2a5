from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone


class ImageCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    url: str
    filename: str


class Image(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int = Field(..., serialization_alias="userId")
    url: str
    filename: str
    uploaded_at: datetime = Field(..., serialization_alias="uploadedAt")

    @field_validator("uploaded_at")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive values; they are stored as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ImageUploadResponse(BaseModel):
    message: str
    image: Image


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str


class HealthCheck(BaseModel):
    status: str
    database: str
    storage: str
