# docportal/api/folders.py
import time
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.errors import Result, ValidationError
from ..core.folders import BUILTIN_TEMPLATES
from ..database import get_db
from ..schemas.actor import Actor
from ..schemas.folder import (
    Folder, FolderCreate, FolderForest, FolderMove, FolderRename,
    TemplateApply, TemplateEntry, TemplateResult,
)
from ..services.folder_service import folder_service
from ..utils.logging import api_logger
from .deps import get_actor, unwrap_or_raise

router = APIRouter(prefix="/api/folders", tags=["folders"])


@router.get("/tree", response_model=FolderForest)
async def get_folder_tree(db: Session = Depends(get_db)):
    api_logger.info("Building folder tree", extra={"operation": "get_folder_tree"})

    try:
        start_time = time.time()
        forest = folder_service.tree(db)

        execution_time = time.time() - start_time
        api_logger.info("Folder tree built", extra={
            "root_count": len(forest.roots),
            "cycle_breaks": forest.cycle_breaks,
            "execution_time_ms": round(execution_time * 1000, 2)
        })
        return forest

    except Exception as e:
        api_logger.error("Error building folder tree", extra={"error": str(e)})
        raise


@router.get("/templates", response_model=Dict[str, List[TemplateEntry]])
async def list_templates():
    return BUILTIN_TEMPLATES


@router.post("/templates/apply", response_model=TemplateResult)
async def apply_template(
        payload: TemplateApply,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Applying folder template", extra={
        "template": payload.template,
        "custom_entries": len(payload.entries or []),
        "actor_id": actor.id
    })

    if payload.entries is not None:
        entries = payload.entries
    elif payload.template in BUILTIN_TEMPLATES:
        entries = BUILTIN_TEMPLATES[payload.template]
    else:
        unwrap_or_raise(Result.failure(ValidationError(
            "Unknown template", template=payload.template
        )))

    try:
        start_time = time.time()
        before = {f.id for f in folder_service.snapshot(db)}
        folders = unwrap_or_raise(folder_service.apply_template(db, entries, actor))
        created = sum(1 for f in folders if f.id not in before)

        api_logger.info("Folder template applied", extra={
            "resolved": len(folders),
            "created": created,
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return TemplateResult(folders=folders, created_count=created)

    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error applying folder template", extra={"error": str(e)})
        db.rollback()
        raise


@router.get("/{folder_id}/path", response_model=List[Folder])
async def get_folder_path(folder_id: str, db: Session = Depends(get_db)):
    api_logger.debug("Resolving folder path", extra={"folder_id": folder_id})
    return unwrap_or_raise(folder_service.path(db, folder_id))


@router.post("", response_model=Folder)
async def create_folder(
        folder: FolderCreate,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Creating folder", extra={
        "folder_name": folder.name,
        "parent_id": folder.parent_id,
        "actor_id": actor.id
    })

    try:
        start_time = time.time()
        created = unwrap_or_raise(folder_service.create(db, folder.name, folder.parent_id, actor))

        api_logger.info("Successfully created folder", extra={
            "folder_id": created.id,
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return created

    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error creating folder", extra={
            "folder_name": folder.name,
            "error": str(e)
        })
        db.rollback()
        raise


@router.put("/{folder_id}", response_model=Folder)
async def rename_folder(
        folder_id: str,
        folder: FolderRename,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Renaming folder", extra={"folder_id": folder_id, "new_name": folder.name})

    try:
        return unwrap_or_raise(folder_service.rename(db, folder_id, folder.name, actor))
    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error renaming folder", extra={"folder_id": folder_id, "error": str(e)})
        db.rollback()
        raise


@router.post("/{folder_id}/move", response_model=Folder)
async def move_folder(
        folder_id: str,
        move: FolderMove,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Moving folder", extra={"folder_id": folder_id, "parent_id": move.parent_id})

    try:
        return unwrap_or_raise(folder_service.move(db, folder_id, move.parent_id, actor))
    except HTTPException:
        raise
    except Exception as e:
        api_logger.error("Error moving folder", extra={"folder_id": folder_id, "error": str(e)})
        db.rollback()
        raise


@router.delete("/{folder_id}")
async def delete_folder(
        folder_id: str,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Deleting folder", extra={"folder_id": folder_id, "actor_id": actor.id})

    try:
        unwrap_or_raise(folder_service.soft_delete(db, folder_id, actor))
        api_logger.info(f"Successfully moved folder {folder_id} to trash")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        api_logger.error(f"Failed to delete folder: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/{folder_id}/restore", response_model=Folder)
async def restore_folder(
        folder_id: str,
        actor: Actor = Depends(get_actor),
        db: Session = Depends(get_db)
):
    api_logger.info("Restoring folder", extra={"folder_id": folder_id, "actor_id": actor.id})

    try:
        return unwrap_or_raise(folder_service.restore(db, folder_id, actor))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        api_logger.error(f"Failed to restore folder: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
