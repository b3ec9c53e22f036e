# docportal/core/__init__.py
from .errors import (
    PortalError, ValidationError, DuplicateNameError, NotFoundError,
    InvalidStateError, InvalidParentError, PermissionDeniedError, Result,
)
from .tree import build_tree, folder_path, descendant_ids, reachable_folder_ids
from .folders import (
    create_folder, rename_folder, move_folder, soft_delete_folder, restore_folder,
    apply_template, BUILTIN_TEMPLATES,
)
from .documents import submit, approve, reject, record_download, soft_delete, restore, purge
from .search import search, facets
from .retention import days_remaining, is_purge_eligible, trash_listing
from .analytics import summarize

__all__ = [
    "PortalError", "ValidationError", "DuplicateNameError", "NotFoundError",
    "InvalidStateError", "InvalidParentError", "PermissionDeniedError", "Result",
    "build_tree", "folder_path", "descendant_ids", "reachable_folder_ids",
    "create_folder", "rename_folder", "move_folder", "soft_delete_folder", "restore_folder",
    "apply_template", "BUILTIN_TEMPLATES",
    "submit", "approve", "reject", "record_download", "soft_delete", "restore", "purge",
    "search", "facets",
    "days_remaining", "is_purge_eligible", "trash_listing",
    "summarize",
]
