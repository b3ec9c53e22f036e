# docportal/services/document_service.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from ..config import settings
from ..core import documents as lifecycle
from ..core.analytics import summarize
from ..core.errors import InvalidStateError, NotFoundError, Result
from ..core.retention import trash_listing
from ..core.search import facets, search
from ..core.tree import reachable_folder_ids
from ..models.document import Document as DocumentModel, DocumentStatus
from ..models.download_log import DownloadLog
from ..schemas.actor import Actor
from ..schemas.analytics import AnalyticsSummary
from ..schemas.document import (
    Document, DocumentSubmit, DownloadResult, Facets, SearchCriteria, TrashItem,
)
from ..utils.logging import service_logger
from ..utils.time import utcnow
from .access import require_dos, require_owner_or_dos
from .folder_service import FolderService


def _to_row(document: Document) -> DocumentModel:
    return DocumentModel(**document.model_dump(exclude={"file_size_display"}))


class DocumentService:
    """Runs the document lifecycle against the database.

    Every write is a conditional statement keyed on the state the lifecycle
    rules expected, so a concurrent change shows up as a zero row count and is
    reported with the same typed error the rules would have produced.
    """

    @staticmethod
    def load(db: Session, document_id: str) -> dict:
        row = db.query(DocumentModel).filter(DocumentModel.id == document_id).first()
        return {row.id: Document.model_validate(row)} if row else {}

    @staticmethod
    def snapshot(db: Session, trashed: Optional[bool] = None) -> List[Document]:
        query = db.query(DocumentModel)
        if trashed is True:
            query = query.filter(DocumentModel.deleted_at.is_not(None))
        elif trashed is False:
            query = query.filter(DocumentModel.deleted_at.is_(None))
        return [Document.model_validate(row) for row in query.all()]

    @staticmethod
    def _visible_to_public(db: Session, documents: List[Document]) -> List[Document]:
        # Filter-on-read cascade: documents under a soft-deleted folder disappear
        folders = FolderService.snapshot(db)
        known = {f.id for f in folders}
        reachable = reachable_folder_ids(folders)
        return [
            d for d in documents
            if d.folder_id is None or d.folder_id in reachable or d.folder_id not in known
        ]

    @staticmethod
    def get(db: Session, document_id: str, actor: Optional[Actor] = None) -> Result[Document]:
        document = DocumentService.load(db, document_id).get(document_id)
        if document is None or document.is_trashed:
            return Result.failure(NotFoundError("Document not found", document_id=document_id))
        if actor is None:
            public = DocumentService._visible_to_public(db, [document])
            if not public or document.status != DocumentStatus.APPROVED:
                return Result.failure(NotFoundError("Document not found", document_id=document_id))
        return Result.success(document)

    @staticmethod
    def submit(db: Session, metadata: DocumentSubmit, actor: Actor) -> Result[Document]:
        folders = FolderService.snapshot(db) if metadata.folder_id else None
        result = lifecycle.submit(metadata, actor, folders)
        if not result.ok:
            service_logger.info("Document submission rejected", extra={
                "actor_id": actor.id, "error": result.error.to_dict()
            })
            return result

        db.add(_to_row(result.value))
        db.commit()
        service_logger.info("Document submitted for approval", extra={
            "document_id": result.value.id, "actor_id": actor.id, "folder_id": metadata.folder_id
        })
        return result

    @staticmethod
    def apply_review(db: Session, reviewed: Document) -> Result[Document]:
        """Persist an approve/reject outcome only if the row is still pending"""
        stmt = (
            update(DocumentModel)
            .where(
                DocumentModel.id == reviewed.id,
                DocumentModel.status == DocumentStatus.PENDING,
                DocumentModel.deleted_at.is_(None),
            )
            .values(
                status=reviewed.status,
                approved_by=reviewed.approved_by,
                approved_at=reviewed.approved_at,
                rejection_reason=reviewed.rejection_reason,
                updated_at=reviewed.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if db.execute(stmt).rowcount == 0:
            db.rollback()
            service_logger.warning("Review lost to a concurrent change", extra={
                "document_id": reviewed.id, "status": reviewed.status.value
            })
            return Result.failure(InvalidStateError(
                "Document is no longer pending review", document_id=reviewed.id
            ))
        db.commit()
        return Result.success(reviewed)

    @staticmethod
    def approve(db: Session, document_id: str, reviewer: Actor) -> Result[Document]:
        denied = require_dos(reviewer, "approve documents")
        if denied:
            return Result.failure(denied)

        result = lifecycle.approve(DocumentService.load(db, document_id), document_id, reviewer)
        if not result.ok:
            return result
        service_logger.info("Approving document", extra={
            "document_id": document_id, "reviewer_id": reviewer.id
        })
        return DocumentService.apply_review(db, result.value)

    @staticmethod
    def reject(db: Session, document_id: str, reviewer: Actor, reason: Optional[str] = None) -> Result[Document]:
        denied = require_dos(reviewer, "reject documents")
        if denied:
            return Result.failure(denied)

        result = lifecycle.reject(DocumentService.load(db, document_id), document_id, reviewer, reason)
        if not result.ok:
            return result
        service_logger.info("Rejecting document", extra={
            "document_id": document_id, "reviewer_id": reviewer.id,
            "has_reason": result.value.rejection_reason is not None
        })
        return DocumentService.apply_review(db, result.value)

    @staticmethod
    def record_download(db: Session, document_id: str, now: Optional[datetime] = None) -> Result[DownloadResult]:
        """Count one download; the count and file reference are read in the same transaction"""
        result = lifecycle.record_download(DocumentService.load(db, document_id), document_id)
        if not result.ok:
            return result

        # Atomic increment; never read-modify-write
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.id == document_id, DocumentModel.deleted_at.is_(None))
            .values(downloads=DocumentModel.downloads + 1)
            .execution_options(synchronize_session=False)
        )
        if db.execute(stmt).rowcount == 0:
            db.rollback()
            return Result.failure(InvalidStateError(
                "Document was removed while downloading", document_id=document_id
            ))
        db.add(DownloadLog(document_id=document_id, downloaded_at=now or utcnow()))
        db.flush()
        row = db.execute(
            select(DocumentModel.downloads, DocumentModel.file_url).where(DocumentModel.id == document_id)
        ).one()
        db.commit()
        return Result.success(DownloadResult(
            document_id=document_id, downloads=row.downloads, file_url=row.file_url
        ))

    @staticmethod
    def soft_delete(db: Session, document_id: str, actor: Actor) -> Result[Document]:
        documents = DocumentService.load(db, document_id)
        if document_id in documents:
            denied = require_owner_or_dos(actor, documents[document_id].uploaded_by, "delete this document")
            if denied:
                return Result.failure(denied)

        result = lifecycle.soft_delete(documents, document_id, actor)
        if not result.ok or documents[document_id].is_trashed:
            return result

        stmt = (
            update(DocumentModel)
            .where(DocumentModel.id == document_id, DocumentModel.deleted_at.is_(None))
            .values(deleted_at=result.value.deleted_at, updated_at=result.value.updated_at)
            .execution_options(synchronize_session=False)
        )
        if db.execute(stmt).rowcount == 0:
            # Someone else trashed it first; same outcome
            db.rollback()
            return Result.success(DocumentService.load(db, document_id).get(document_id))
        db.commit()
        service_logger.info("Document moved to trash", extra={
            "document_id": document_id, "actor_id": actor.id
        })
        return result

    @staticmethod
    def restore(db: Session, document_id: str, actor: Actor) -> Result[Document]:
        documents = DocumentService.load(db, document_id)
        if document_id in documents:
            denied = require_owner_or_dos(actor, documents[document_id].uploaded_by, "restore this document")
            if denied:
                return Result.failure(denied)

        result = lifecycle.restore(documents, document_id, actor)
        if not result.ok or not documents[document_id].is_trashed:
            return result

        stmt = (
            update(DocumentModel)
            .where(DocumentModel.id == document_id, DocumentModel.deleted_at.is_not(None))
            .values(deleted_at=None, updated_at=result.value.updated_at)
            .execution_options(synchronize_session=False)
        )
        if db.execute(stmt).rowcount == 0:
            db.rollback()
            restored = DocumentService.load(db, document_id).get(document_id)
            if restored is None:
                return Result.failure(NotFoundError("Document not found", document_id=document_id))
            return Result.success(restored)
        db.commit()
        service_logger.info("Document restored from trash", extra={
            "document_id": document_id, "actor_id": actor.id, "status": result.value.status.value
        })
        return result

    @staticmethod
    def purge(db: Session, document_id: str, actor: Actor) -> Result[None]:
        denied = require_dos(actor, "permanently delete documents")
        if denied:
            return Result.failure(denied)

        result = lifecycle.purge(DocumentService.load(db, document_id), document_id, actor)
        if not result.ok:
            return result

        db.execute(delete(DownloadLog).where(DownloadLog.document_id == document_id))
        stmt = (
            delete(DocumentModel)
            .where(DocumentModel.id == document_id, DocumentModel.deleted_at.is_not(None))
            .execution_options(synchronize_session=False)
        )
        if db.execute(stmt).rowcount == 0:
            db.rollback()
            return Result.failure(InvalidStateError(
                "Document was restored before it could be deleted", document_id=document_id
            ))
        db.commit()
        service_logger.info("Document permanently deleted", extra={
            "document_id": document_id, "actor_id": actor.id
        })
        return result

    @staticmethod
    def public_search(db: Session, criteria: SearchCriteria) -> List[Document]:
        documents = DocumentService._visible_to_public(db, DocumentService.snapshot(db, trashed=False))
        return search(documents, criteria, public=True)

    @staticmethod
    def admin_listing(db: Session, criteria: SearchCriteria) -> List[Document]:
        return search(DocumentService.snapshot(db, trashed=False), criteria)

    @staticmethod
    def facets(db: Session) -> Facets:
        return facets(DocumentService._visible_to_public(db, DocumentService.snapshot(db, trashed=False)))

    @staticmethod
    def trash(db: Session, actor: Actor, now: Optional[datetime] = None) -> Result[List[TrashItem]]:
        denied = require_dos(actor, "view the trash")
        if denied:
            return Result.failure(denied)
        return Result.success(trash_listing(
            DocumentService.snapshot(db, trashed=True),
            retention_days=settings.RETENTION_DAYS,
            warning_days=settings.EXPIRY_WARNING_DAYS,
            now=now,
        ))

    @staticmethod
    def analytics(db: Session, actor: Actor, now: Optional[datetime] = None) -> Result[AnalyticsSummary]:
        denied = require_dos(actor, "view analytics")
        if denied:
            return Result.failure(denied)
        stamps = [row[0] for row in db.query(DownloadLog.downloaded_at).all()]
        return Result.success(summarize(
            DocumentService.snapshot(db, trashed=False), stamps,
            now=now, top=settings.TOP_DOCUMENTS_LIMIT,
        ))


document_service = DocumentService()
