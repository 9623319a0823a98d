"""Hero carousel images: upload to the hero-images bucket, then record metadata."""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.hero_image import HeroImage
from app.schemas.hero_image import HeroImageForm
from app.services.result import Err, ErrorKind, Ok, Result
from app.services.storage import ObjectStorage, StorageError, storage_key
from app.services.uploads import UploadedFile

logger = logging.getLogger(__name__)

HERO_KEY_PREFIX = "hero-"


def upload_hero_image(
    db: Session,
    storage: ObjectStorage,
    settings: Settings,
    file: UploadedFile | None,
    form: HeroImageForm,
) -> Result:
    """
    Store the file, resolve its public URL and insert an active HeroImage row.
    An insert failure leaves the uploaded object in the bucket (no compensating delete).
    """
    if file is None:
        return Err(ErrorKind.MISSING_INPUT, "No file provided")

    bucket = settings.hero_images_bucket
    try:
        key = storage_key(file.filename, prefix=HERO_KEY_PREFIX)
        try:
            storage.upload(
                bucket,
                key,
                file.data,
                content_type=file.content_type,
                cache_control=f"max-age={settings.hero_cache_control_seconds}",
            )
        except StorageError as e:
            logger.error("Error uploading hero image %s: %s", key, e)
            return Err(ErrorKind.STORAGE, "Failed to upload file")

        image = HeroImage(
            file_name=key,
            file_url=storage.get_public_url(bucket, key),
            title=form.title,
            subtitle=form.subtitle,
            description=form.description,
            display_order=form.display_order,
            show_content=form.show_content,
            is_active=True,
        )
        try:
            db.add(image)
            db.commit()
            db.refresh(image)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Error saving hero image metadata for %s/%s: %s", bucket, key, e)
            return Err(ErrorKind.DATABASE, "Failed to save metadata")
    except Exception:
        logger.exception("Error in hero image upload")
        return Err(ErrorKind.UNEXPECTED, "Internal server error")

    logger.info("Hero image uploaded: %s", image.id)
    return Ok(image)


def list_hero_images(db: Session, active_only: bool = True) -> Result:
    """Carousel order: display_order, then oldest first."""
    try:
        q = db.query(HeroImage)
        if active_only:
            q = q.filter(HeroImage.is_active.is_(True))
        return Ok(q.order_by(HeroImage.display_order.asc(), HeroImage.created_at.asc()).all())
    except SQLAlchemyError as e:
        logger.error("Error loading hero images: %s", e)
        return Err(ErrorKind.DATABASE, "Failed to load hero images")
