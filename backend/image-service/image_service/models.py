from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.sql import func
from datetime import datetime, timezone
from image_service.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Image(Base):
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    url = Column(String(1024), nullable=False)
    filename = Column(String(255), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
