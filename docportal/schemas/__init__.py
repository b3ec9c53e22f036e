# docportal/schemas/__init__.py
from .actor import Actor, Role
from .folder import Folder, FolderCreate, FolderRename, FolderMove, FolderNode, FolderForest
from .folder import TemplateEntry, TemplateApply, TemplateResult
from .document import Document, DocumentSubmit, RejectRequest, DownloadResult
from .document import SearchCriteria, SortOrder, Facets, TrashItem
from .analytics import AnalyticsSummary, TopDocument, SubjectDownloads

__all__ = [
    "Actor", "Role",
    "Folder", "FolderCreate", "FolderRename", "FolderMove", "FolderNode", "FolderForest",
    "TemplateEntry", "TemplateApply", "TemplateResult",
    "Document", "DocumentSubmit", "RejectRequest", "DownloadResult",
    "SearchCriteria", "SortOrder", "Facets", "TrashItem",
    "AnalyticsSummary", "TopDocument", "SubjectDownloads"
]
