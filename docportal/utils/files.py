# docportal/utils/files.py
from pathlib import PurePosixPath
from typing import Optional


def format_file_size(size_bytes: int) -> str:
    """Render a byte count the way the upload dialog shows it (B / KB / MB)"""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def file_type_from_name(filename: Optional[str]) -> str:
    """Lower-cased extension without the dot, or 'unknown'"""
    if not filename:
        return "unknown"
    suffix = PurePosixPath(filename).suffix
    return suffix[1:].lower() if suffix else "unknown"
