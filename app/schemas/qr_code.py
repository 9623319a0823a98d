from pydantic import BaseModel


class QRCodeResponse(BaseModel):
    id: str
    name: str
    image_url: str
    is_active: bool
    created_at: str
    updated_at: str
