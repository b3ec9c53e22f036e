# docportal/api/documents.py
import time
from typing import List, Optional, Set

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.document import DocumentStatus
from ..schemas.actor import Actor
from ..schemas.document import (
    Document, DocumentSubmit, DownloadResult, RejectRequest, SearchCriteria, SortOrder,
)
from ..services.document_service import document_service
from ..utils.logging import api_logger
from .deps import get_actor, get_optional_actor, unwrap_or_raise

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("", response_model=Document)
async def submit_document(
        document: DocumentSubmit,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Submitting document", extra={
        "document_name": document.name,
        "folder_id": document.folder_id,
        "actor_id": actor.id
    })

    try:
        start_time = time.time()
        created = unwrap_or_raise(document_service.submit(db, document, actor))

        api_logger.info("Successfully submitted document", extra={
            "document_id": created.id,
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return created

    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error submitting document", extra={
            "document_name": document.name,
            "error": str(e)
        })
        db.rollback()
        raise


@router.get("", response_model=List[Document])
async def list_documents(
        text: Optional[str] = None,
        class_level: Optional[str] = None,
        subject: Optional[str] = None,
        year: Optional[str] = None,
        tags: Set[str] = Query(default=set()),
        status: Optional[DocumentStatus] = None,
        folder_id: Optional[str] = None,
        uploaded_by: Optional[str] = None,
        sort: SortOrder = SortOrder.NEWEST,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    """Staff listing: every live status, narrowed by ``status`` if given"""
    criteria = SearchCriteria(
        text=text, class_level=class_level, subject=subject, year=year, tags=tags,
        status=status, folder_id=folder_id, uploaded_by=uploaded_by, sort=sort,
    )
    api_logger.info("Listing documents", extra={
        "actor_id": actor.id,
        "criteria": criteria.model_dump(mode="json", exclude_defaults=True)
    })

    try:
        start_time = time.time()
        documents = document_service.admin_listing(db, criteria)

        api_logger.info("Successfully listed documents", extra={
            "document_count": len(documents),
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return documents

    except Exception as e:
        api_logger.error("Error listing documents", extra={"error": str(e)})
        raise


@router.get("/{document_id}", response_model=Document)
async def get_document(
        document_id: str,
        actor: Optional[Actor] = Depends(get_optional_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Retrieving document", extra={"document_id": document_id})
    return unwrap_or_raise(document_service.get(db, document_id, actor))


@router.post("/{document_id}/approve", response_model=Document)
async def approve_document(
        document_id: str,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Approving document", extra={"document_id": document_id, "reviewer_id": actor.id})

    try:
        return unwrap_or_raise(document_service.approve(db, document_id, actor))
    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error approving document", extra={"document_id": document_id, "error": str(e)})
        db.rollback()
        raise


@router.post("/{document_id}/reject", response_model=Document)
async def reject_document(
        document_id: str,
        body: Optional[RejectRequest] = None,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    reason = body.reason if body else None
    api_logger.info("Rejecting document", extra={"document_id": document_id, "reviewer_id": actor.id})

    try:
        return unwrap_or_raise(document_service.reject(db, document_id, actor, reason))
    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error rejecting document", extra={"document_id": document_id, "error": str(e)})
        db.rollback()
        raise


@router.post("/{document_id}/download", response_model=DownloadResult)
async def record_download(document_id: str, db: Session = Depends(get_db)):
    api_logger.info("Recording download", extra={"document_id": document_id})

    try:
        return unwrap_or_raise(document_service.record_download(db, document_id))
    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error recording download", extra={"document_id": document_id, "error": str(e)})
        db.rollback()
        raise


@router.delete("/{document_id}")
async def delete_document(
        document_id: str,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Moving document to trash", extra={"document_id": document_id, "actor_id": actor.id})

    try:
        unwrap_or_raise(document_service.soft_delete(db, document_id, actor))
        api_logger.info(f"Successfully trashed document {document_id}")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        api_logger.error(f"Failed to delete document: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
