# docportal/core/folders.py
"""Folder lifecycle: create, rename, move, soft-delete, restore and templates.

Every function takes the current folder snapshot and returns a Result holding
the folder record(s) as they should be persisted. Nothing is mutated in place.
"""
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
from uuid import uuid4

from .errors import (
    DuplicateNameError, InvalidParentError, NotFoundError, Result, ValidationError,
)
from .tree import descendant_ids
from ..schemas.actor import Actor
from ..schemas.folder import Folder, TemplateEntry
from ..utils.time import utcnow

IdFactory = Callable[[], str]


def _new_id() -> str:
    return str(uuid4())


def _clean_name(name: Optional[str]) -> str:
    return (name or "").strip()


def _active(folders: Iterable[Folder]) -> Dict[str, Folder]:
    return {f.id: f for f in folders if f.deleted_at is None}


def find_sibling(folders: Iterable[Folder], name: str, parent_id: Optional[str],
                 exclude_id: Optional[str] = None) -> Optional[Folder]:
    """Active folder under parent_id whose name matches case-insensitively"""
    wanted = name.casefold()
    for f in folders:
        if (f.deleted_at is None and f.parent_id == parent_id
                and f.id != exclude_id and f.name.casefold() == wanted):
            return f
    return None


def create_folder(folders: Iterable[Folder], name: str, parent_id: Optional[str],
                  actor: Actor, now: Optional[datetime] = None,
                  id_factory: IdFactory = _new_id) -> Result[Folder]:
    folders = list(folders)
    name = _clean_name(name)
    if not name:
        return Result.failure(ValidationError("Folder name is required", field="name"))

    if parent_id is not None and parent_id not in _active(folders):
        return Result.failure(InvalidParentError(
            "Parent folder does not exist", parent_id=parent_id
        ))

    existing = find_sibling(folders, name, parent_id)
    if existing is not None:
        return Result.failure(DuplicateNameError(
            f"A folder named '{existing.name}' already exists here",
            name=name, parent_id=parent_id, existing_id=existing.id
        ))

    now = now or utcnow()
    return Result.success(Folder(
        id=id_factory(),
        name=name,
        parent_id=parent_id,
        created_by=actor.id,
        created_at=now,
        updated_at=now,
    ))


def rename_folder(folders: Iterable[Folder], folder_id: str, new_name: str,
                  actor: Actor, now: Optional[datetime] = None) -> Result[Folder]:
    folders = list(folders)
    folder = _active(folders).get(folder_id)
    if folder is None:
        return Result.failure(NotFoundError("Folder not found", folder_id=folder_id))

    new_name = _clean_name(new_name)
    if not new_name:
        return Result.failure(ValidationError("Folder name is required", field="name"))
    if new_name == folder.name:
        return Result.success(folder)

    clash = find_sibling(folders, new_name, folder.parent_id, exclude_id=folder.id)
    if clash is not None:
        return Result.failure(DuplicateNameError(
            f"A folder named '{clash.name}' already exists here",
            name=new_name, parent_id=folder.parent_id, existing_id=clash.id
        ))

    return Result.success(folder.model_copy(update={
        "name": new_name, "updated_at": now or utcnow()
    }))


def move_folder(folders: Iterable[Folder], folder_id: str, new_parent_id: Optional[str],
                actor: Actor, now: Optional[datetime] = None) -> Result[Folder]:
    folders = list(folders)
    active = _active(folders)
    folder = active.get(folder_id)
    if folder is None:
        return Result.failure(NotFoundError("Folder not found", folder_id=folder_id))
    if new_parent_id == folder.parent_id:
        return Result.success(folder)

    if new_parent_id is not None:
        if new_parent_id not in active:
            return Result.failure(InvalidParentError(
                "Parent folder does not exist", parent_id=new_parent_id
            ))
        if new_parent_id == folder_id or new_parent_id in descendant_ids(folders, folder_id):
            return Result.failure(InvalidParentError(
                "A folder cannot be moved inside itself",
                folder_id=folder_id, parent_id=new_parent_id
            ))

    clash = find_sibling(folders, folder.name, new_parent_id, exclude_id=folder.id)
    if clash is not None:
        return Result.failure(DuplicateNameError(
            f"A folder named '{clash.name}' already exists there",
            name=folder.name, parent_id=new_parent_id, existing_id=clash.id
        ))

    return Result.success(folder.model_copy(update={
        "parent_id": new_parent_id, "updated_at": now or utcnow()
    }))


def soft_delete_folder(folders: Iterable[Folder], folder_id: str, actor: Actor,
                       now: Optional[datetime] = None) -> Result[Folder]:
    # Children and documents keep deleted_at unset; they drop out of the tree on read
    folder = _active(folders).get(folder_id)
    if folder is None:
        return Result.failure(NotFoundError("Folder not found", folder_id=folder_id))
    now = now or utcnow()
    return Result.success(folder.model_copy(update={"deleted_at": now, "updated_at": now}))


def restore_folder(folders: Iterable[Folder], folder_id: str, actor: Actor,
                   now: Optional[datetime] = None) -> Result[Folder]:
    folders = list(folders)
    folder = next((f for f in folders if f.id == folder_id), None)
    if folder is None:
        return Result.failure(NotFoundError("Folder not found", folder_id=folder_id))
    if folder.deleted_at is None:
        return Result.success(folder)

    clash = find_sibling(folders, folder.name, folder.parent_id, exclude_id=folder.id)
    if clash is not None:
        return Result.failure(DuplicateNameError(
            f"A folder named '{clash.name}' already exists here",
            name=folder.name, parent_id=folder.parent_id, existing_id=clash.id
        ))

    return Result.success(folder.model_copy(update={
        "deleted_at": None, "updated_at": now or utcnow()
    }))


def apply_template(folders: Iterable[Folder], template: List[TemplateEntry], actor: Actor,
                   now: Optional[datetime] = None,
                   id_factory: IdFactory = _new_id) -> Result[List[Folder]]:
    """Reuse or create every folder the template names.

    The value lists the resolved folders in template order, reused and new
    alike; callers persist the ones whose id was not in their snapshot. Any
    invalid entry fails the whole application.
    """
    errors = []
    for index, entry in enumerate(template):
        if not _clean_name(entry.name):
            errors.append(ValidationError("Template folder name is required", entry=index))
        for child in entry.children:
            if not _clean_name(child):
                errors.append(ValidationError(
                    "Template subfolder name is required", entry=index, parent=entry.name
                ))
    if errors:
        return Result.failure(errors)

    now = now or utcnow()
    working = list(folders)
    resolved = []
    seen = set()

    def ensure(name: str, parent_id: Optional[str]) -> Folder:
        existing = find_sibling(working, name, parent_id)
        if existing is None:
            existing = create_folder(working, name, parent_id, actor, now, id_factory).unwrap()
            working.append(existing)
        if existing.id not in seen:
            seen.add(existing.id)
            resolved.append(existing)
        return existing

    for entry in template:
        top = ensure(_clean_name(entry.name), None)
        for child in entry.children:
            ensure(_clean_name(child), top.id)

    return Result.success(resolved)


BUILTIN_TEMPLATES: Dict[str, List[TemplateEntry]] = {
    "secondary-school": [
        TemplateEntry(name="Past Papers", children=["2024", "2023"]),
        TemplateEntry(name="Notes & Study Materials",
                      children=["S1", "S2", "S3", "S4", "S5", "S6"]),
        TemplateEntry(name="National Examinations", children=["2024", "2023", "2022"]),
        TemplateEntry(name="Mock Examinations"),
        TemplateEntry(name="Revision Materials"),
    ],
    "class-levels": [
        TemplateEntry(name=level) for level in ["S1", "S2", "S3", "S4", "S5", "S6"]
    ],
}
