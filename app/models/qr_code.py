"""QR code image for display. At most one row has is_active=True (partial unique index)."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Index, text
from app.database import Base


class QRCode(Base):
    __tablename__ = "qr_codes"
    __table_args__ = (
        Index(
            "ix_qr_codes_single_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    file_name = Column(String(255), nullable=True)  # storage key in the qr-codes bucket
    image_url = Column(String(1024), nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
