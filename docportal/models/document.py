# docportal/models/document.py
import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class DocumentStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_size = Column(Integer, nullable=False, default=0)
    file_type = Column(String(50), nullable=False, default="unknown")
    file_url = Column(String(1024), nullable=True)
    class_level = Column(String(50), nullable=True)
    subject = Column(String(100), nullable=True)
    year = Column(String(10), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    status = Column(
        Enum(DocumentStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DocumentStatus.PENDING,
        index=True
    )
    downloads = Column(Integer, nullable=False, default=0)
    uploaded_by = Column(String(255), nullable=True)
    approved_by = Column(String(255), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)
    folder_id = Column(String(36), ForeignKey("folders.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    folder = relationship("Folder", back_populates="documents")
    download_logs = relationship("DownloadLog", back_populates="document", cascade="all, delete-orphan")
