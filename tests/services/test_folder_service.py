# tests/services/test_folder_service.py
import pytest
from sqlalchemy.exc import IntegrityError

from docportal.core import folders as lifecycle
from docportal.core.errors import (
    DuplicateNameError, InvalidParentError, NotFoundError, PermissionDeniedError,
)
from docportal.core.folders import BUILTIN_TEMPLATES
from docportal.models import Folder as FolderModel
from docportal.services.folder_service import folder_service


def test_create_and_tree(db_session, dos):
    """Test created folders come back nested from the store"""
    root = folder_service.create(db_session, "Past Papers", None, dos).unwrap()
    folder_service.create(db_session, "2024", root.id, dos).unwrap()

    forest = folder_service.tree(db_session)
    assert [n.name for n in forest.roots] == ["Past Papers"]
    assert [c.name for c in forest.roots[0].children] == ["2024"]


def test_create_duplicate(db_session, dos, sample_folder):
    result = folder_service.create(db_session, "PHYSICS", None, dos)
    assert isinstance(result.error, DuplicateNameError)
    assert db_session.query(FolderModel).count() == 1


def test_teacher_cannot_manage_folders(db_session, teacher, sample_folder):
    assert isinstance(folder_service.create(db_session, "X", None, teacher).error, PermissionDeniedError)
    assert isinstance(folder_service.soft_delete(db_session, sample_folder.id, teacher).error, PermissionDeniedError)
    assert isinstance(folder_service.apply_template(db_session, [], teacher).error[0], PermissionDeniedError)


def test_unique_index_backs_the_name_rule(db_session, store, make_folder, sample_folder):
    """Test the database itself refuses a second active sibling with the same name"""
    db_session.add(FolderModel(**make_folder("dup", "physics").model_dump()))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    # A soft-deleted sibling does not count
    store(make_folder("old", "physics", deleted=True))


def test_rename_move_delete_restore(db_session, dos):
    exams = folder_service.create(db_session, "Exams", None, dos).unwrap()
    notes = folder_service.create(db_session, "Notes", None, dos).unwrap()

    renamed = folder_service.rename(db_session, notes.id, "Study Notes", dos).unwrap()
    assert renamed.name == "Study Notes"

    moved = folder_service.move(db_session, notes.id, exams.id, dos).unwrap()
    assert moved.parent_id == exams.id
    assert [f.id for f in folder_service.path(db_session, notes.id).unwrap()] == [exams.id, notes.id]

    folder_service.soft_delete(db_session, exams.id, dos).unwrap()
    # the child is hidden with its parent but keeps its own state
    assert folder_service.tree(db_session).roots == []
    assert isinstance(folder_service.path(db_session, notes.id).error, NotFoundError)
    db_session.expire_all()
    assert db_session.get(FolderModel, notes.id).deleted_at is None

    folder_service.restore(db_session, exams.id, dos).unwrap()
    assert [n.id for n in folder_service.tree(db_session).roots] == [exams.id]


def test_restore_blocked_by_new_sibling(db_session, dos, sample_folder):
    folder_service.soft_delete(db_session, sample_folder.id, dos).unwrap()
    folder_service.create(db_session, "Physics", None, dos).unwrap()

    result = folder_service.restore(db_session, sample_folder.id, dos)
    assert isinstance(result.error, DuplicateNameError)


def test_apply_template_is_idempotent(db_session, dos):
    """Test the second application finds everything and creates nothing"""
    template = BUILTIN_TEMPLATES["secondary-school"]

    first = folder_service.apply_template(db_session, template, dos).unwrap()
    count = db_session.query(FolderModel).count()
    assert count == len(first) == 16

    second = folder_service.apply_template(db_session, template, dos).unwrap()
    assert [f.id for f in second] == [f.id for f in first]
    assert db_session.query(FolderModel).count() == count


def test_crossing_moves_cannot_form_a_cycle(db_session, dos):
    """Test two moves decided from the same snapshot cannot loop A and B into each other"""
    a = folder_service.create(db_session, "A", None, dos).unwrap()
    b = folder_service.create(db_session, "B", None, dos).unwrap()

    snapshot = folder_service.snapshot(db_session)
    a_under_b = lifecycle.move_folder(snapshot, a.id, b.id, dos).unwrap()
    b_under_a = lifecycle.move_folder(snapshot, b.id, a.id, dos).unwrap()

    first = folder_service.apply_move(db_session, a_under_b, None)
    second = folder_service.apply_move(db_session, b_under_a, None)

    assert first.ok
    assert isinstance(second.error, InvalidParentError)
    parents = {f.id: f.parent_id for f in folder_service.snapshot(db_session)}
    assert parents == {a.id: b.id, b.id: None}

    forest = folder_service.tree(db_session)
    assert forest.cycle_breaks == []
    assert [n.id for n in forest.roots] == [b.id]


def test_stale_move_is_refused(db_session, dos):
    """Test a move decided before someone else moved the folder does not overwrite it"""
    a = folder_service.create(db_session, "A", None, dos).unwrap()
    b = folder_service.create(db_session, "B", None, dos).unwrap()
    c = folder_service.create(db_session, "C", None, dos).unwrap()

    snapshot = folder_service.snapshot(db_session)
    to_b = lifecycle.move_folder(snapshot, c.id, b.id, dos).unwrap()
    to_a = lifecycle.move_folder(snapshot, c.id, a.id, dos).unwrap()

    assert folder_service.apply_move(db_session, to_b, None).ok
    assert isinstance(folder_service.apply_move(db_session, to_a, None).error, InvalidParentError)
    assert folder_service.path(db_session, c.id).unwrap()[0].id == b.id


def test_create_under_parent_deleted_meanwhile(db_session, dos, sample_folder):
    """Test a folder is not inserted under a parent trashed after the snapshot was taken"""
    snapshot = folder_service.snapshot(db_session)
    child = lifecycle.create_folder(snapshot, "Mechanics", sample_folder.id, dos).unwrap()

    folder_service.soft_delete(db_session, sample_folder.id, dos).unwrap()

    result = folder_service.persist_new(db_session, child)
    assert isinstance(result.error, InvalidParentError)
    assert db_session.query(FolderModel).filter_by(id=child.id).count() == 0
