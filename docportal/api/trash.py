# docportal/api/trash.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.actor import Actor
from ..schemas.document import Document, TrashItem
from ..services.document_service import document_service
from ..utils.logging import api_logger
from .deps import get_actor, unwrap_or_raise

router = APIRouter(prefix="/api/trash", tags=["trash"])


@router.get("", response_model=List[TrashItem])
async def list_trash(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    api_logger.info("Listing trash", extra={"actor_id": actor.id})
    items = unwrap_or_raise(document_service.trash(db, actor))
    api_logger.info("Trash listed", extra={
        "item_count": len(items),
        "purge_eligible": sum(1 for item in items if item.purge_eligible)
    })
    return items


@router.post("/{document_id}/restore", response_model=Document)
async def restore_document(
        document_id: str,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Restoring document", extra={"document_id": document_id, "actor_id": actor.id})

    try:
        return unwrap_or_raise(document_service.restore(db, document_id, actor))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        api_logger.error(f"Failed to restore document: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/{document_id}")
async def purge_document(
        document_id: str,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Permanently deleting document", extra={"document_id": document_id, "actor_id": actor.id})

    try:
        unwrap_or_raise(document_service.purge(db, document_id, actor))
        api_logger.info(f"Successfully purged document {document_id}")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        api_logger.error(f"Failed to purge document: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
