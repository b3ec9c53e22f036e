# tests/core/test_folder_lifecycle.py
import itertools

import pytest

from docportal.core.errors import (
    DuplicateNameError, InvalidParentError, NotFoundError, ValidationError,
)
from docportal.core.folders import (
    BUILTIN_TEMPLATES, apply_template, create_folder, move_folder, rename_folder,
    restore_folder, soft_delete_folder,
)
from docportal.schemas.folder import TemplateEntry


@pytest.fixture
def ids():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


def test_create_folder(dos, ids):
    """Test a root folder is created with the actor recorded"""
    result = create_folder([], "  Past Papers ", None, dos, id_factory=ids)

    assert result.ok
    assert result.value.id == "new-1"
    assert result.value.name == "Past Papers"
    assert result.value.parent_id is None
    assert result.value.created_by == dos.id


def test_create_folder_duplicate_is_case_insensitive(dos, make_folder):
    """Test "notes" clashes with an existing "Notes" under the same parent"""
    folders = [make_folder("n", "Notes")]
    result = create_folder(folders, "notes", None, dos)

    assert not result.ok
    assert isinstance(result.error, DuplicateNameError)
    assert result.error.details["existing_id"] == "n"


def test_create_folder_same_name_other_parent(dos, make_folder, ids):
    folders = [make_folder("p1", "2024"), make_folder("p", "Past Papers")]
    assert create_folder(folders, "2024", "p", dos, id_factory=ids).ok


def test_create_folder_reuses_deleted_name(dos, make_folder):
    folders = [make_folder("old", "Notes", deleted=True)]
    assert create_folder(folders, "Notes", None, dos).ok


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_folder_requires_name(dos, name):
    result = create_folder([], name, None, dos)
    assert isinstance(result.error, ValidationError)


def test_create_folder_rejects_missing_or_deleted_parent(dos, make_folder):
    folders = [make_folder("gone", "Gone", deleted=True)]
    assert isinstance(create_folder(folders, "X", "nope", dos).error, InvalidParentError)
    assert isinstance(create_folder(folders, "X", "gone", dos).error, InvalidParentError)


def test_rename_folder(dos, make_folder):
    folders = [make_folder("a", "Notes"), make_folder("b", "Past Papers")]

    renamed = rename_folder(folders, "a", "Study Notes", dos).unwrap()
    assert renamed.name == "Study Notes"
    assert renamed.id == "a"

    # Case-only change of its own name is allowed
    assert rename_folder(folders, "a", "NOTES", dos).unwrap().name == "NOTES"

    assert isinstance(rename_folder(folders, "a", "past papers", dos).error, DuplicateNameError)
    assert isinstance(rename_folder(folders, "a", " ", dos).error, ValidationError)
    assert isinstance(rename_folder(folders, "zzz", "X", dos).error, NotFoundError)


def test_move_folder(dos, make_folder):
    folders = [
        make_folder("root", "Root"),
        make_folder("child", "Child", parent_id="root"),
        make_folder("grandchild", "Grandchild", parent_id="child"),
        make_folder("other", "Other"),
    ]

    moved = move_folder(folders, "child", "other", dos).unwrap()
    assert moved.parent_id == "other"

    assert move_folder(folders, "child", None, dos).unwrap().parent_id is None


def test_move_folder_refuses_cycles(dos, make_folder):
    """Test a folder cannot move under itself or its own descendants"""
    folders = [
        make_folder("root", "Root"),
        make_folder("child", "Child", parent_id="root"),
        make_folder("grandchild", "Grandchild", parent_id="child"),
    ]
    assert isinstance(move_folder(folders, "root", "root", dos).error, InvalidParentError)
    assert isinstance(move_folder(folders, "root", "grandchild", dos).error, InvalidParentError)
    assert isinstance(move_folder(folders, "root", "missing", dos).error, InvalidParentError)


def test_move_folder_name_clash(dos, make_folder):
    folders = [
        make_folder("a", "Notes"),
        make_folder("b", "Target"),
        make_folder("c", "NOTES", parent_id="b"),
    ]
    assert isinstance(move_folder(folders, "a", "b", dos).error, DuplicateNameError)


def test_soft_delete_and_restore(dos, make_folder):
    folders = [make_folder("a", "Notes")]

    deleted = soft_delete_folder(folders, "a", dos).unwrap()
    assert deleted.deleted_at is not None
    assert isinstance(soft_delete_folder([deleted], "a", dos).error, NotFoundError)

    restored = restore_folder([deleted], "a", dos).unwrap()
    assert restored.deleted_at is None


def test_restore_folder_name_taken(dos, make_folder):
    """Test restoring is refused once an active sibling took the name"""
    folders = [
        make_folder("old", "Notes", deleted=True),
        make_folder("new", "notes"),
    ]
    result = restore_folder(folders, "old", dos)
    assert isinstance(result.error, DuplicateNameError)


def test_apply_template_creates_then_reuses(dos, ids):
    """Test applying the same template twice creates nothing the second time"""
    template = BUILTIN_TEMPLATES["secondary-school"]

    first = apply_template([], template, dos, id_factory=ids).unwrap()
    assert len(first) == 5 + 2 + 6 + 3
    top_level = [f for f in first if f.parent_id is None]
    assert [f.name for f in top_level] == [
        "Past Papers", "Notes & Study Materials", "National Examinations",
        "Mock Examinations", "Revision Materials",
    ]

    second = apply_template(first, template, dos, id_factory=ids).unwrap()
    assert [f.id for f in second] == [f.id for f in first]


def test_apply_template_reuses_existing_case_insensitively(dos, make_folder, ids):
    existing = [make_folder("pp", "past papers")]
    template = [TemplateEntry(name="Past Papers", children=["2024"])]

    resolved = apply_template(existing, template, dos, id_factory=ids).unwrap()

    assert resolved[0].id == "pp"
    assert resolved[1].parent_id == "pp"
    assert resolved[1].id == "new-1"


def test_apply_template_is_all_or_nothing(dos, ids):
    """Test every invalid entry is reported and nothing is resolved"""
    template = [
        TemplateEntry(name="Good", children=["ok", " "]),
        TemplateEntry(name=""),
    ]
    result = apply_template([], template, dos, id_factory=ids)

    assert not result.ok
    assert len(result.errors) == 2
    assert all(isinstance(e, ValidationError) for e in result.errors)
    with pytest.raises(ValidationError):
        result.unwrap()


def test_apply_template_dedupes_repeated_entries(dos, ids):
    template = [TemplateEntry(name="S1"), TemplateEntry(name="s1")]
    resolved = apply_template([], template, dos, id_factory=ids).unwrap()
    assert [f.name for f in resolved] == ["S1"]
