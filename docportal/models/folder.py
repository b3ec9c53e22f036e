# docportal/models/folder.py
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship

from ..database import Base


class Folder(Base):
    __tablename__ = "folders"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(String(36), ForeignKey("folders.id"), nullable=True, index=True)
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    documents = relationship("Document", back_populates="folder")

    __table_args__ = (
        # One active folder per (parent, name); NULL parent folds into ''
        Index(
            "uq_folders_active_parent_name",
            func.coalesce(parent_id, ""),
            func.lower(name),
            unique=True,
            sqlite_where=deleted_at.is_(None),
            postgresql_where=deleted_at.is_(None),
        ),
    )
