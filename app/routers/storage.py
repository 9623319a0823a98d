"""Public read path for objects in local storage (the URLs returned by LocalObjectStorage)."""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from app.services.storage import LocalObjectStorage, ObjectStorage, get_storage

router = APIRouter(prefix="/storage", tags=["storage"])


@router.get("/{bucket}/{key:path}")
def get_object(bucket: str, key: str, storage: ObjectStorage = Depends(get_storage)):
    if not isinstance(storage, LocalObjectStorage):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    obj = storage.open(bucket, key)
    if obj is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    headers = {"Cache-Control": obj.cache_control} if obj.cache_control else None
    return FileResponse(obj.path, media_type=obj.content_type, headers=headers)
