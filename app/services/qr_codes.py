"""
QR codes shown on the site. Exactly one may be active; activation and first-upload
activation happen inside a single transaction, backed by the partial unique index
on qr_codes.is_active.
"""
import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings
from app.models.qr_code import QRCode
from app.services.result import Err, ErrorKind, Ok, Result
from app.services.storage import ObjectStorage, StorageError, storage_key
from app.services.uploads import UploadedFile

logger = logging.getLogger(__name__)

MAX_SIZE_MESSAGE = "File size must be less than 5MB"
NOT_IMAGE_MESSAGE = "Please select an image file"


def validate_image(content_type: str | None, size: int, max_bytes: int) -> Err | None:
    """Size / declared type check. Magic bytes are not inspected."""
    if size > max_bytes:
        return Err(ErrorKind.INVALID_INPUT, MAX_SIZE_MESSAGE)
    if not (content_type or "").startswith("image/"):
        return Err(ErrorKind.INVALID_INPUT, NOT_IMAGE_MESSAGE)
    return None


def list_qr_codes(db: Session) -> Result:
    try:
        return Ok(db.query(QRCode).order_by(QRCode.created_at.desc()).all())
    except SQLAlchemyError as e:
        logger.error("Error loading QR codes: %s", e)
        return Err(ErrorKind.DATABASE, "Failed to load QR codes")


def get_qr_code(db: Session, qr_id: str) -> Result:
    try:
        row = db.query(QRCode).filter(QRCode.id == qr_id).first()
    except SQLAlchemyError as e:
        logger.error("Error loading QR code %s: %s", qr_id, e)
        return Err(ErrorKind.DATABASE, "Failed to load QR code")
    if not row:
        return Err(ErrorKind.NOT_FOUND, "QR code not found")
    return Ok(row)


def get_active_qr_code(db: Session) -> Result:
    try:
        row = db.query(QRCode).filter(QRCode.is_active.is_(True)).first()
    except SQLAlchemyError as e:
        logger.error("Error loading active QR code: %s", e)
        return Err(ErrorKind.DATABASE, "Failed to load QR code")
    if not row:
        return Err(ErrorKind.NOT_FOUND, "No active QR code")
    return Ok(row)


def _insert(db: Session, name: str, key: str, url: str) -> QRCode:
    """Insert; the first row ever is active. A concurrent first insert loses the index race and stays inactive."""
    is_first = db.query(QRCode.id).first() is None
    row = QRCode(name=name, file_name=key, image_url=url, is_active=is_first)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        if not is_first:
            raise
        db.rollback()
        row = QRCode(name=name, file_name=key, image_url=url, is_active=False)
        db.add(row)
        db.commit()
    db.refresh(row)
    return row


def create_qr_code(
    db: Session,
    storage: ObjectStorage,
    settings: Settings,
    file: UploadedFile | None,
    name: str | None,
) -> Result:
    """Validate, upload to the qr-codes bucket, insert the row. No compensation if the insert fails."""
    name = (name or "").strip()
    if file is None or not name:
        return Err(ErrorKind.MISSING_INPUT, "Please select a file and enter a name")
    invalid = validate_image(file.content_type, file.size, settings.qr_max_upload_bytes)
    if invalid:
        return invalid

    bucket = settings.qr_codes_bucket
    key = storage_key(file.filename)
    try:
        storage.upload(bucket, key, file.data, content_type=file.content_type, cache_control=None)
    except StorageError as e:
        logger.error("Upload error for QR code %s: %s", key, e)
        return Err(ErrorKind.STORAGE, "Failed to upload image")

    try:
        row = _insert(db, name, key, storage.get_public_url(bucket, key))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error saving QR code %s/%s: %s", bucket, key, e)
        return Err(ErrorKind.DATABASE, "Failed to save QR code")
    logger.info("QR code uploaded: %s (active=%s)", row.id, row.is_active)
    return Ok(row)


def activate_qr_code(db: Session, qr_id: str) -> Result:
    """Make qr_id the only active row, in one transaction."""
    try:
        row = db.query(QRCode).filter(QRCode.id == qr_id).first()
        if not row:
            return Err(ErrorKind.NOT_FOUND, "QR code not found")
        now = datetime.utcnow()
        db.query(QRCode).filter(QRCode.is_active.is_(True), QRCode.id != qr_id).update(
            {QRCode.is_active: False, QRCode.updated_at: now}, synchronize_session=False
        )
        db.query(QRCode).filter(QRCode.id == qr_id).update(
            {QRCode.is_active: True, QRCode.updated_at: now}, synchronize_session=False
        )
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Toggle error for QR code %s: %s", qr_id, e)
        return Err(ErrorKind.DATABASE, "Failed to update QR code status")
    logger.info("QR code activated: %s", qr_id)
    return Ok(row)


def delete_qr_code(db: Session, storage: ObjectStorage, settings: Settings, qr_id: str) -> Result:
    """Delete the row, then its stored object (best effort, failure only logged)."""
    try:
        row = db.query(QRCode).filter(QRCode.id == qr_id).first()
        if not row:
            return Err(ErrorKind.NOT_FOUND, "QR code not found")
        key = row.file_name
        db.delete(row)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Delete error for QR code %s: %s", qr_id, e)
        return Err(ErrorKind.DATABASE, "Failed to delete QR code")
    if key:
        try:
            storage.remove(settings.qr_codes_bucket, key)
        except StorageError as e:
            logger.warning("QR code %s deleted but object %s was not removed: %s", qr_id, key, e)
    logger.info("QR code deleted: %s", qr_id)
    return Ok(qr_id)
