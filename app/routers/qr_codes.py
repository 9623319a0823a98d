"""
QR codes: admin list / upload / activate / delete / download. Only one QR code is active at a time;
the active one is public (GET /active).
"""
from fastapi import APIRouter, Depends, UploadFile, File, Form, status
from fastapi.responses import FileResponse, RedirectResponse
from sqlalchemy.orm import Session
from app.config import Settings, get_settings
from app.database import get_db
from app.models.qr_code import QRCode
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.qr_code import QRCodeResponse
from app.services import qr_codes as service
from app.services.result import error_response
from app.services.storage import LocalObjectStorage, ObjectStorage, get_storage
from app.services.uploads import read_upload

router = APIRouter(prefix="/api/qr-codes", tags=["qr-codes"])

ERRORS = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def _to_response(x: QRCode) -> QRCodeResponse:
    return QRCodeResponse(
        id=x.id,
        name=x.name,
        image_url=x.image_url,
        is_active=x.is_active,
        created_at=x.created_at.isoformat(),
        updated_at=x.updated_at.isoformat(),
    )


def download_filename(name: str) -> str:
    return f"{name}.png"


@router.get("", response_model=list[QRCodeResponse], responses=ERRORS)
def list_qr_codes(db: Session = Depends(get_db)):
    """All QR codes, newest first."""
    result = service.list_qr_codes(db)
    if not result.ok:
        return error_response(result)
    return [_to_response(x) for x in result.value]


@router.get("/active", response_model=QRCodeResponse, responses=ERRORS)
def get_active_qr_code(db: Session = Depends(get_db)):
    """The QR code currently shown on the site (public)."""
    result = service.get_active_qr_code(db)
    if not result.ok:
        return error_response(result)
    return _to_response(result.value)


@router.post("", response_model=QRCodeResponse, status_code=status.HTTP_201_CREATED, responses=ERRORS)
async def upload_qr_code(
    file: UploadFile | None = File(None),
    name: str | None = Form(None),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Form: file (image, max 5 MB), name. The first QR code uploaded becomes active."""
    upload = await read_upload(file)
    result = service.create_qr_code(db, storage, settings, upload, name)
    if not result.ok:
        return error_response(result)
    return _to_response(result.value)


@router.post("/{qr_id}/activate", response_model=QRCodeResponse, responses=ERRORS)
def activate_qr_code(qr_id: str, db: Session = Depends(get_db)):
    """Set this QR code as the only active one."""
    result = service.activate_qr_code(db, qr_id)
    if not result.ok:
        return error_response(result)
    return _to_response(result.value)


@router.delete("/{qr_id}", response_model=MessageResponse, responses=ERRORS)
def delete_qr_code(
    qr_id: str,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    result = service.delete_qr_code(db, storage, settings, qr_id)
    if not result.ok:
        return error_response(result)
    return MessageResponse(message="QR code deleted successfully")


@router.get("/{qr_id}/download", responses=ERRORS)
def download_qr_code(
    qr_id: str,
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Image as attachment "<name>.png". Remote storage redirects to the public URL."""
    result = service.get_qr_code(db, qr_id)
    if not result.ok:
        return error_response(result)
    row = result.value
    if isinstance(storage, LocalObjectStorage) and row.file_name:
        obj = storage.open(settings.qr_codes_bucket, row.file_name)
        if obj:
            return FileResponse(obj.path, filename=download_filename(row.name), media_type=obj.content_type)
    return RedirectResponse(row.image_url)
