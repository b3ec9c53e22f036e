# docportal/schemas/folder.py
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import BaseSchema, TimestampMixin


class FolderBase(BaseSchema):
    name: str


class FolderCreate(FolderBase):
    parent_id: Optional[str] = None


class FolderRename(FolderBase):
    pass


class FolderMove(BaseModel):
    parent_id: Optional[str] = None


class Folder(FolderBase, TimestampMixin):
    id: str
    parent_id: Optional[str] = None
    created_by: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


class FolderNode(Folder):
    children: List["FolderNode"] = Field(default_factory=list)


class FolderForest(BaseModel):
    roots: List[FolderNode] = Field(default_factory=list)
    # Folders promoted to roots because their parent chain looped back
    cycle_breaks: List[str] = Field(default_factory=list)


class TemplateEntry(BaseModel):
    name: str
    children: List[str] = Field(default_factory=list)


class TemplateApply(BaseModel):
    """Either a built-in template name or an explicit list of entries"""
    template: Optional[str] = None
    entries: Optional[List[TemplateEntry]] = None


class TemplateResult(BaseModel):
    folders: List[Folder]
    created_count: int
