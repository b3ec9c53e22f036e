# docportal/schemas/analytics.py
from typing import List

from pydantic import BaseModel, Field


class TopDocument(BaseModel):
    id: str
    name: str
    downloads: int


class SubjectDownloads(BaseModel):
    subject: str
    downloads: int


class AnalyticsSummary(BaseModel):
    total_downloads: int = 0
    today: int = 0
    this_week: int = 0
    this_month: int = 0
    top_documents: List[TopDocument] = Field(default_factory=list)
    by_subject: List[SubjectDownloads] = Field(default_factory=list)
