# docportal/services/folder_service.py
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core import folders as lifecycle
from ..core.errors import DuplicateNameError, InvalidParentError, NotFoundError, Result
from ..core.tree import build_tree, folder_path, reachable_folder_ids
from ..models.folder import Folder as FolderModel
from ..schemas.actor import Actor
from ..schemas.folder import Folder, FolderForest, TemplateEntry
from ..utils.logging import service_logger
from .access import require_dos


def _to_row(folder: Folder) -> FolderModel:
    return FolderModel(
        id=folder.id,
        name=folder.name,
        parent_id=folder.parent_id,
        created_by=folder.created_by,
        created_at=folder.created_at,
        updated_at=folder.updated_at,
        deleted_at=folder.deleted_at,
    )


class FolderService:
    """Loads folder snapshots, runs the lifecycle rules and persists the outcome"""

    @staticmethod
    def snapshot(db: Session) -> List[Folder]:
        rows = db.query(FolderModel).order_by(FolderModel.created_at, FolderModel.id).all()
        return [Folder.model_validate(row) for row in rows]

    @staticmethod
    def visible(db: Session) -> List[Folder]:
        """Active folders with no soft-deleted ancestor"""
        folders = FolderService.snapshot(db)
        reachable = reachable_folder_ids(folders)
        return [f for f in folders if f.id in reachable]

    @staticmethod
    def tree(db: Session) -> FolderForest:
        return build_tree(FolderService.visible(db))

    @staticmethod
    def path(db: Session, folder_id: str) -> Result[List[Folder]]:
        folders = FolderService.visible(db)
        chain = folder_path(folders, folder_id)
        if not chain:
            return Result.failure(NotFoundError("Folder not found", folder_id=folder_id))
        return Result.success(chain)

    @staticmethod
    def _duplicate(folder: Folder) -> Result[Folder]:
        return Result.failure(DuplicateNameError(
            f"A folder named '{folder.name}' already exists here",
            name=folder.name, parent_id=folder.parent_id
        ))

    @staticmethod
    def _guarded_update(db: Session, folder: Folder, values: dict, active: Optional[bool] = True) -> Result[Folder]:
        stmt = update(FolderModel).where(FolderModel.id == folder.id)
        if active is True:
            stmt = stmt.where(FolderModel.deleted_at.is_(None))
        elif active is False:
            stmt = stmt.where(FolderModel.deleted_at.is_not(None))
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        try:
            rowcount = db.execute(stmt).rowcount
            if rowcount == 0:
                db.rollback()
                return Result.failure(NotFoundError("Folder not found", folder_id=folder.id))
            db.commit()
        except IntegrityError:
            db.rollback()
            return FolderService._duplicate(folder)
        return Result.success(folder)

    @staticmethod
    def _check_parent(db: Session, folder_id: str, parent_id: Optional[str]) -> Optional[InvalidParentError]:
        """Re-read the stored ancestors of parent_id inside the open transaction"""
        seen = set()
        current = parent_id
        while current is not None and current not in seen:
            if current == folder_id:
                return InvalidParentError(
                    "A folder cannot be moved inside itself",
                    folder_id=folder_id, parent_id=parent_id
                )
            seen.add(current)
            row = db.execute(
                select(FolderModel.parent_id, FolderModel.deleted_at)
                .where(FolderModel.id == current)
                .with_for_update()
            ).first()
            if row is None or (current == parent_id and row.deleted_at is not None):
                return InvalidParentError("Parent folder does not exist", parent_id=parent_id)
            current = row.parent_id
        return None

    @staticmethod
    def persist_new(db: Session, folder: Folder) -> Result[Folder]:
        """Insert a folder built by the lifecycle rules if its parent is still active"""
        try:
            db.add(_to_row(folder))
            db.flush()
            blocked = FolderService._check_parent(db, folder.id, folder.parent_id)
            if blocked:
                db.rollback()
                service_logger.info("Folder parent disappeared before insert", extra={
                    "folder_id": folder.id, "parent_id": folder.parent_id
                })
                return Result.failure(blocked)
            db.commit()
        except IntegrityError:
            db.rollback()
            return FolderService._duplicate(folder)
        return Result.success(folder)

    @staticmethod
    def apply_move(db: Session, moved: Folder, expected_parent_id: Optional[str]) -> Result[Folder]:
        """Reparent only if the folder still sits where the move was decided from"""
        stmt = update(FolderModel).where(
            FolderModel.id == moved.id,
            FolderModel.deleted_at.is_(None),
        )
        if expected_parent_id is None:
            stmt = stmt.where(FolderModel.parent_id.is_(None))
        else:
            stmt = stmt.where(FolderModel.parent_id == expected_parent_id)
        stmt = stmt.values(
            parent_id=moved.parent_id, updated_at=moved.updated_at
        ).execution_options(synchronize_session=False)

        try:
            if db.execute(stmt).rowcount == 0:
                db.rollback()
                still_active = db.execute(
                    select(FolderModel.id).where(FolderModel.id == moved.id, FolderModel.deleted_at.is_(None))
                ).first()
                if still_active is None:
                    return Result.failure(NotFoundError("Folder not found", folder_id=moved.id))
                return Result.failure(InvalidParentError(
                    "Folder was moved by someone else; reload and try again",
                    folder_id=moved.id, parent_id=moved.parent_id
                ))

            # The new parent chain is read after our own update, so a crossing move shows up as a loop
            blocked = FolderService._check_parent(db, moved.id, moved.parent_id)
            if blocked:
                db.rollback()
                service_logger.warning("Move refused, parent chain changed", extra={
                    "folder_id": moved.id, "parent_id": moved.parent_id, "error": blocked.message
                })
                return Result.failure(blocked)
            db.commit()
        except IntegrityError:
            db.rollback()
            return FolderService._duplicate(moved)
        return Result.success(moved)

    @staticmethod
    def create(db: Session, name: str, parent_id: Optional[str], actor: Actor) -> Result[Folder]:
        denied = require_dos(actor, "create folders")
        if denied:
            return Result.failure(denied)

        result = lifecycle.create_folder(FolderService.snapshot(db), name, parent_id, actor)
        if not result.ok:
            service_logger.info("Folder creation rejected", extra={
                "name": name, "parent_id": parent_id, "error": result.error.code
            })
            return result

        persisted = FolderService.persist_new(db, result.value)
        if not persisted.ok:
            return persisted

        service_logger.info("Folder created", extra={
            "folder_id": result.value.id, "parent_id": parent_id, "actor_id": actor.id
        })
        return result

    @staticmethod
    def rename(db: Session, folder_id: str, new_name: str, actor: Actor) -> Result[Folder]:
        denied = require_dos(actor, "rename folders")
        if denied:
            return Result.failure(denied)

        snapshot = FolderService.snapshot(db)
        result = lifecycle.rename_folder(snapshot, folder_id, new_name, actor)
        if not result.ok:
            return result
        current = next(f for f in snapshot if f.id == folder_id)
        if result.value.name == current.name:
            return result

        service_logger.info("Renaming folder", extra={
            "folder_id": folder_id, "old_name": current.name, "new_name": result.value.name
        })
        return FolderService._guarded_update(db, result.value, {
            "name": result.value.name, "updated_at": result.value.updated_at
        })

    @staticmethod
    def move(db: Session, folder_id: str, new_parent_id: Optional[str], actor: Actor) -> Result[Folder]:
        denied = require_dos(actor, "move folders")
        if denied:
            return Result.failure(denied)

        snapshot = FolderService.snapshot(db)
        result = lifecycle.move_folder(snapshot, folder_id, new_parent_id, actor)
        if not result.ok:
            return result
        current = next(f for f in snapshot if f.id == folder_id)
        if result.value.parent_id == current.parent_id:
            return result

        service_logger.info("Moving folder", extra={
            "folder_id": folder_id, "from_parent": current.parent_id, "to_parent": new_parent_id
        })
        return FolderService.apply_move(db, result.value, current.parent_id)

    @staticmethod
    def soft_delete(db: Session, folder_id: str, actor: Actor) -> Result[Folder]:
        denied = require_dos(actor, "delete folders")
        if denied:
            return Result.failure(denied)

        result = lifecycle.soft_delete_folder(FolderService.snapshot(db), folder_id, actor)
        if not result.ok:
            return result

        service_logger.info("Soft-deleting folder", extra={"folder_id": folder_id, "actor_id": actor.id})
        return FolderService._guarded_update(db, result.value, {
            "deleted_at": result.value.deleted_at, "updated_at": result.value.updated_at
        })

    @staticmethod
    def restore(db: Session, folder_id: str, actor: Actor) -> Result[Folder]:
        denied = require_dos(actor, "restore folders")
        if denied:
            return Result.failure(denied)

        snapshot = FolderService.snapshot(db)
        result = lifecycle.restore_folder(snapshot, folder_id, actor)
        if not result.ok:
            return result
        current = next(f for f in snapshot if f.id == folder_id)
        if current.deleted_at is None:
            return result

        service_logger.info("Restoring folder", extra={"folder_id": folder_id, "actor_id": actor.id})
        return FolderService._guarded_update(db, result.value, {
            "deleted_at": None, "updated_at": result.value.updated_at
        }, active=False)

    @staticmethod
    def apply_template(db: Session, entries: List[TemplateEntry], actor: Actor) -> Result[List[Folder]]:
        denied = require_dos(actor, "apply folder templates")
        if denied:
            return Result.failure([denied])

        snapshot = FolderService.snapshot(db)
        known = {f.id for f in snapshot}
        result = lifecycle.apply_template(snapshot, entries, actor)
        if not result.ok:
            service_logger.info("Template rejected", extra={
                "error_count": len(result.errors)
            })
            return result

        created = [f for f in result.value if f.id not in known]
        try:
            # Parents precede their children in the resolved list
            for folder in created:
                db.add(_to_row(folder))
                db.flush()
                blocked = FolderService._check_parent(db, folder.id, folder.parent_id)
                if blocked:
                    db.rollback()
                    return Result.failure([blocked])
            db.commit()
        except IntegrityError:
            db.rollback()
            return Result.failure([DuplicateNameError(
                "Folders changed while the template was being applied; try again"
            )])

        service_logger.info("Template applied", extra={
            "resolved": len(result.value), "created": len(created), "actor_id": actor.id
        })
        return result


folder_service = FolderService()
