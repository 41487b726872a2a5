from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from typing import List
import structlog
from image_service import models, schemas
from image_service.exceptions import PersistenceError

logger = structlog.get_logger(__name__)


def create_image(db: Session, image: schemas.ImageCreate) -> models.Image:
    db_image = models.Image(
        user_id=image.user_id,
        url=image.url,
        filename=image.filename
    )
    try:
        db.add(db_image)
        db.commit()
        db.refresh(db_image)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Failed to create image record", url=image.url, error=str(e))
        raise PersistenceError(f"Failed to save image metadata: {e}")

    logger.info("Image record created", image_id=db_image.id, user_id=db_image.user_id)
    return db_image


def list_images(db: Session) -> List[models.Image]:
    """All image records, in whatever order the database returns them"""
    try:
        return db.query(models.Image).all()
    except SQLAlchemyError as e:
        logger.error("Failed to list image records", error=str(e))
        raise PersistenceError(f"Failed to retrieve images: {e}")


def ping(db: Session):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise PersistenceError(f"Database unavailable: {e}")
