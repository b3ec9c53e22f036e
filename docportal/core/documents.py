# docportal/core/documents.py
"""Document lifecycle state machine.

    pending --approve--> approved
    pending --reject---> rejected
    any     --soft_delete--> trashed (status kept)
    trashed --restore--> previous status
    trashed --purge----> removed

Operations take a snapshot mapping of id -> Document and return the record as
it should be persisted. The store applies approve/reject as an UPDATE guarded
by ``status = 'pending'`` so concurrent reviewers cannot both win.
"""
from datetime import datetime
from typing import Callable, Iterable, List, Mapping, Optional
from uuid import uuid4

from .errors import InvalidStateError, NotFoundError, Result, ValidationError
from ..config import settings
from ..models.document import DocumentStatus
from ..schemas.actor import Actor
from ..schemas.document import Document, DocumentSubmit
from ..schemas.folder import Folder
from ..utils.files import file_type_from_name
from ..utils.time import utcnow


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def normalize_tags(tags: Iterable[str]) -> List[str]:
    result = []
    seen = set()
    for tag in tags or []:
        tag = (tag or "").strip()
        if tag and tag.casefold() not in seen:
            seen.add(tag.casefold())
            result.append(tag)
    return result


def _validate_submission(metadata: DocumentSubmit,
                         folders: Optional[Iterable[Folder]]) -> List[ValidationError]:
    errors = []
    if _blank(metadata.name):
        errors.append(ValidationError("Document name is required", field="name"))
    if _blank(metadata.file_url):
        errors.append(ValidationError("An uploaded file reference is required", field="file_url"))
    if _blank(metadata.class_level):
        errors.append(ValidationError("Class level is required", field="class_level"))
    elif metadata.class_level not in settings.CLASS_LEVELS:
        errors.append(ValidationError(
            f"Unknown class level '{metadata.class_level}'", field="class_level"
        ))
    if _blank(metadata.subject):
        errors.append(ValidationError("Subject is required", field="subject"))
    elif metadata.subject not in settings.SUBJECTS:
        errors.append(ValidationError(
            f"Unknown subject '{metadata.subject}'", field="subject"
        ))
    if metadata.file_size < 0:
        errors.append(ValidationError("File size cannot be negative", field="file_size"))
    if metadata.folder_id is not None and folders is not None:
        if not any(f.id == metadata.folder_id and f.deleted_at is None for f in folders):
            errors.append(ValidationError(
                "Target folder does not exist", field="folder_id", folder_id=metadata.folder_id
            ))
    return errors


def submit(metadata: DocumentSubmit, actor: Actor,
           folders: Optional[Iterable[Folder]] = None,
           now: Optional[datetime] = None,
           id_factory: Callable[[], str] = lambda: str(uuid4())) -> Result[Document]:
    if folders is not None:
        folders = list(folders)
    errors = _validate_submission(metadata, folders)
    if errors:
        # Report the first problem, keep the rest for the caller
        first = errors[0]
        first.details["errors"] = [e.to_dict() for e in errors]
        return Result.failure(first)

    now = now or utcnow()
    return Result.success(Document(
        id=id_factory(),
        name=metadata.name.strip(),
        description=(metadata.description or "").strip() or None,
        file_size=metadata.file_size,
        file_type=metadata.file_type or file_type_from_name(metadata.file_url),
        file_url=metadata.file_url.strip(),
        class_level=metadata.class_level,
        subject=metadata.subject,
        year=(metadata.year or "").strip() or None,
        tags=normalize_tags(metadata.tags),
        folder_id=metadata.folder_id,
        status=DocumentStatus.PENDING,
        downloads=0,
        uploaded_by=actor.id,
        created_at=now,
        updated_at=now,
    ))


def _lookup(documents: Mapping[str, Document], document_id: str) -> Result[Document]:
    document = documents.get(document_id)
    if document is None:
        return Result.failure(NotFoundError("Document not found", document_id=document_id))
    return Result.success(document)


def _reviewable(documents: Mapping[str, Document], document_id: str) -> Result[Document]:
    found = _lookup(documents, document_id)
    if not found.ok:
        return found
    document = found.value
    if document.is_trashed:
        return Result.failure(InvalidStateError(
            "Document is in the trash", document_id=document_id
        ))
    if document.status != DocumentStatus.PENDING:
        return Result.failure(InvalidStateError(
            f"Document is already {document.status.value}",
            document_id=document_id, status=document.status.value
        ))
    return found


def approve(documents: Mapping[str, Document], document_id: str, reviewer: Actor,
            now: Optional[datetime] = None) -> Result[Document]:
    found = _reviewable(documents, document_id)
    if not found.ok:
        return found
    now = now or utcnow()
    return Result.success(found.value.model_copy(update={
        "status": DocumentStatus.APPROVED,
        "approved_by": reviewer.id,
        "approved_at": now,
        "rejection_reason": None,
        "updated_at": now,
    }))


def reject(documents: Mapping[str, Document], document_id: str, reviewer: Actor,
           reason: Optional[str] = None, now: Optional[datetime] = None) -> Result[Document]:
    found = _reviewable(documents, document_id)
    if not found.ok:
        return found
    now = now or utcnow()
    return Result.success(found.value.model_copy(update={
        "status": DocumentStatus.REJECTED,
        "approved_by": reviewer.id,
        "approved_at": now,
        "rejection_reason": None if _blank(reason) else reason.strip(),
        "updated_at": now,
    }))


def record_download(documents: Mapping[str, Document], document_id: str) -> Result[int]:
    """New download count; moderation status does not matter, the trash does"""
    found = _lookup(documents, document_id)
    if not found.ok:
        return found
    if found.value.is_trashed:
        return Result.failure(InvalidStateError(
            "Cannot download a document in the trash", document_id=document_id
        ))
    return Result.success(found.value.downloads + 1)


def soft_delete(documents: Mapping[str, Document], document_id: str, actor: Actor,
                now: Optional[datetime] = None) -> Result[Document]:
    found = _lookup(documents, document_id)
    if not found.ok or found.value.is_trashed:
        # Trashing twice keeps the original retention clock
        return found
    now = now or utcnow()
    return Result.success(found.value.model_copy(update={"deleted_at": now, "updated_at": now}))


def restore(documents: Mapping[str, Document], document_id: str, actor: Actor,
            now: Optional[datetime] = None) -> Result[Document]:
    found = _lookup(documents, document_id)
    if not found.ok or not found.value.is_trashed:
        return found
    return Result.success(found.value.model_copy(update={
        "deleted_at": None, "updated_at": now or utcnow()
    }))


def purge(documents: Mapping[str, Document], document_id: str, actor: Actor) -> Result[None]:
    found = _lookup(documents, document_id)
    if not found.ok:
        return Result.failure(found.error)
    if not found.value.is_trashed:
        return Result.failure(InvalidStateError(
            "Move the document to the trash before deleting it permanently",
            document_id=document_id
        ))
    return Result.success(None)
