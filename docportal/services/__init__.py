# docportal/services/__init__.py
from .folder_service import folder_service
from .document_service import document_service

__all__ = ["folder_service", "document_service"]
