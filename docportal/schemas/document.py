# docportal/schemas/document.py
import enum
from datetime import datetime
from typing import List, Optional, Set

from pydantic import BaseModel, Field, computed_field, field_validator

from .base import BaseSchema, TimestampMixin
from ..models.document import DocumentStatus
from ..utils.files import format_file_size
from ..utils.time import ensure_utc


class DocumentBase(BaseSchema):
    name: str
    description: Optional[str] = None
    class_level: Optional[str] = None
    subject: Optional[str] = None
    year: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    folder_id: Optional[str] = None


class DocumentSubmit(DocumentBase):
    """Metadata handed over by the upload flow once the file is in object storage"""
    name: str = ""
    file_url: Optional[str] = None
    file_size: int = 0
    file_type: Optional[str] = None


class Document(DocumentBase, TimestampMixin):
    id: str
    file_size: int = 0
    file_type: str = "unknown"
    file_url: Optional[str] = None
    status: DocumentStatus = DocumentStatus.PENDING
    downloads: int = 0
    uploaded_by: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    @field_validator("approved_at")
    @classmethod
    def _utc_approved(cls, value):
        return ensure_utc(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_list(cls, value):
        return list(value) if value is not None else []

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    @computed_field
    @property
    def file_size_display(self) -> str:
        return format_file_size(self.file_size)


class RejectRequest(BaseModel):
    reason: Optional[str] = None


class DownloadResult(BaseModel):
    document_id: str
    downloads: int
    file_url: Optional[str] = None


class SortOrder(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    DOWNLOADS = "downloads"
    AZ = "az"


class SearchCriteria(BaseModel):
    text: Optional[str] = None
    class_level: Optional[str] = None
    subject: Optional[str] = None
    year: Optional[str] = None
    tags: Set[str] = Field(default_factory=set)
    status: Optional[DocumentStatus] = None
    folder_id: Optional[str] = None
    uploaded_by: Optional[str] = None
    sort: SortOrder = SortOrder.NEWEST


class Facets(BaseModel):
    class_levels: List[str] = Field(default_factory=list)
    subjects: List[str] = Field(default_factory=list)
    years: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class TrashItem(BaseModel):
    document: Document
    days_remaining: int
    purge_eligible: bool
    expiring_soon: bool
