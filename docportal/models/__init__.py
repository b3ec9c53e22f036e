# docportal/models/__init__.py
from ..database import Base
from .folder import Folder
from .document import Document, DocumentStatus
from .download_log import DownloadLog

__all__ = [
    "Base",
    "Folder",
    "Document",
    "DocumentStatus",
    "DownloadLog"
]
