"""
Hero carousel images. Admin uploads an image + display metadata; public GET lists the carousel.
"""
from fastapi import APIRouter, Depends, UploadFile, File, Form
from sqlalchemy.orm import Session
from app.config import Settings, get_settings
from app.database import get_db
from app.models.hero_image import HeroImage
from app.schemas.hero_image import HeroImageForm, HeroImageResponse, HeroImageUploadResponse
from app.schemas.common import ErrorResponse
from app.services import hero_images as service
from app.services.result import error_response
from app.services.storage import ObjectStorage, get_storage
from app.services.uploads import read_upload

router = APIRouter(prefix="/api/hero-images", tags=["hero-images"])


def _to_response(x: HeroImage) -> HeroImageResponse:
    return HeroImageResponse(
        id=x.id,
        file_name=x.file_name,
        file_url=x.file_url,
        title=x.title,
        subtitle=x.subtitle,
        description=x.description,
        display_order=x.display_order,
        show_content=x.show_content,
        is_active=x.is_active,
        created_at=x.created_at.isoformat(),
        updated_at=x.updated_at.isoformat(),
    )


@router.get("", response_model=list[HeroImageResponse], responses={500: {"model": ErrorResponse}})
def list_hero_images(active_only: bool = True, db: Session = Depends(get_db)):
    """Carousel images ordered by display_order (public)."""
    result = service.list_hero_images(db, active_only=active_only)
    if not result.ok:
        return error_response(result)
    return [_to_response(x) for x in result.value]


@router.post(
    "/upload",
    response_model=HeroImageUploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_hero_image(
    file: UploadFile | None = File(None),
    title: str | None = Form(None),
    subtitle: str | None = Form(None),
    description: str | None = Form(None),
    display_order: str | None = Form(None),
    show_content: str | None = Form(None),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Form: file (required), title, subtitle, description, display_order (int, default 0),
    show_content ("true" to show the text overlay).
    """
    upload = await read_upload(file)
    form = HeroImageForm.from_form(title, subtitle, description, display_order, show_content)
    result = service.upload_hero_image(db, storage, settings, upload, form)
    if not result.ok:
        return error_response(result)
    return HeroImageUploadResponse(
        success=True,
        image=_to_response(result.value),
        message="Hero image uploaded successfully",
    )
