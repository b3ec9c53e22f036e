# tests/core/test_tree.py
from docportal.core.tree import build_tree, descendant_ids, folder_path, reachable_folder_ids


def _names(nodes):
    return [n.name for n in nodes]


def test_build_tree_nests_and_sorts(make_folder):
    """Test children hang under their parents, ordered case-insensitively"""
    folders = [
        make_folder("b", "notes"),
        make_folder("a", "Past Papers"),
        make_folder("a2", "2024", parent_id="a"),
        make_folder("a1", "2023", parent_id="a"),
    ]
    forest = build_tree(folders)

    assert _names(forest.roots) == ["notes", "Past Papers"]
    papers = forest.roots[1]
    assert _names(papers.children) == ["2023", "2024"]
    assert forest.cycle_breaks == []


def test_build_tree_ties_on_created_at(make_folder):
    folders = [
        make_folder("late", "Exams", minutes=10),
        make_folder("early", "exams", minutes=1),
    ]
    forest = build_tree(folders)
    assert [n.id for n in forest.roots] == ["early", "late"]


def test_build_tree_skips_deleted_and_promotes_orphans(make_folder):
    """Test deleted folders are omitted and missing parents make roots"""
    folders = [
        make_folder("gone", "Old", deleted=True),
        make_folder("child", "Child of old", parent_id="gone"),
        make_folder("orphan", "Orphan", parent_id="never-existed"),
    ]
    forest = build_tree(folders)

    ids = [n.id for n in forest.roots]
    assert "gone" not in ids
    assert set(ids) == {"child", "orphan"}


def test_build_tree_breaks_cycles(make_folder):
    """Test a parent loop terminates and every member is still shown once"""
    folders = [
        make_folder("x", "X", parent_id="z"),
        make_folder("y", "Y", parent_id="x"),
        make_folder("z", "Z", parent_id="y"),
        make_folder("loner", "Self", parent_id="loner"),
    ]
    forest = build_tree(folders)

    assert forest.cycle_breaks == ["x", "loner"]
    assert [n.id for n in forest.roots] == ["loner", "x"]
    x = forest.roots[1]
    assert [c.id for c in x.children] == ["y"]
    assert [c.id for c in x.children[0].children] == ["z"]
    assert x.children[0].children[0].children == []


def test_build_tree_empty():
    forest = build_tree([])
    assert forest.roots == []
    assert forest.cycle_breaks == []


def test_folder_path(make_folder):
    folders = [
        make_folder("root", "Past Papers"),
        make_folder("mid", "2024", parent_id="root"),
        make_folder("leaf", "Physics", parent_id="mid"),
    ]
    assert [f.id for f in folder_path(folders, "leaf")] == ["root", "mid", "leaf"]
    assert folder_path(folders, "missing") == []


def test_folder_path_survives_cycles(make_folder):
    folders = [
        make_folder("a", "A", parent_id="b"),
        make_folder("b", "B", parent_id="a"),
    ]
    assert [f.id for f in folder_path(folders, "a")] == ["b", "a"]


def test_descendant_ids(make_folder):
    folders = [
        make_folder("root", "Root"),
        make_folder("c1", "One", parent_id="root"),
        make_folder("c2", "Two", parent_id="c1"),
        make_folder("other", "Other"),
    ]
    assert descendant_ids(folders, "root") == {"c1", "c2"}
    assert descendant_ids(folders, "c2") == set()


def test_reachable_folder_ids(make_folder):
    """Test anything below a soft-deleted folder is unreachable"""
    folders = [
        make_folder("root", "Root"),
        make_folder("trashed", "Trashed", parent_id="root", deleted=True),
        make_folder("under", "Under", parent_id="trashed"),
        make_folder("deeper", "Deeper", parent_id="under"),
        make_folder("sibling", "Sibling", parent_id="root"),
        make_folder("orphan", "Orphan", parent_id="never-existed"),
    ]
    assert reachable_folder_ids(folders) == {"root", "sibling", "orphan"}
