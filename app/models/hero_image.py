"""Hero carousel image: stored object in the hero-images bucket + display metadata."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime
from app.database import Base


class HeroImage(Base):
    __tablename__ = "hero_images"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    file_name = Column(String(255), nullable=False, unique=True)  # storage key in the bucket
    file_url = Column(String(1024), nullable=False)  # public URL of the stored object
    title = Column(String(255), nullable=False, default="")
    subtitle = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    display_order = Column(Integer, nullable=False, default=0, index=True)
    show_content = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
