from app.models.hero_image import HeroImage
from app.models.qr_code import QRCode

__all__ = ["HeroImage", "QRCode"]
