"""Upload payload shared by the hero and QR services (decoupled from FastAPI's UploadFile)."""
from dataclasses import dataclass

from fastapi import UploadFile


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


async def read_upload(file: UploadFile | None) -> UploadedFile | None:
    """Read a multipart file field. None when the field is absent or has no filename."""
    if file is None or not file.filename:
        return None
    data = await file.read()
    ct = (file.content_type or "").split(";")[0].strip().lower()
    return UploadedFile(filename=file.filename, content_type=ct or "application/octet-stream", data=data)
