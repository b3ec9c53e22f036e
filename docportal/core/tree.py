# docportal/core/tree.py
"""Folder hierarchy helpers over flat parent-pointer snapshots."""
from typing import Dict, Iterable, List, Optional, Set

from ..schemas.folder import Folder, FolderForest, FolderNode
from ..utils.logging import core_logger

_VISITING = 1
_DONE = 2


def _sort_key(folder: Folder):
    return (folder.name.casefold(), folder.created_at, folder.id)


def _break_cycles(order: List[str], parents: Dict[str, Optional[str]]) -> List[str]:
    """Cut every parent cycle in place; returns the ids promoted to roots"""
    position = {fid: i for i, fid in enumerate(order)}
    state: Dict[str, int] = {}
    breaks = []

    for start in order:
        path = []
        current = start
        while current is not None and current not in state:
            state[current] = _VISITING
            path.append(current)
            current = parents[current]

        if current is not None and state[current] == _VISITING:
            cycle = path[path.index(current):]
            breaker = min(cycle, key=position.__getitem__)
            parents[breaker] = None
            breaks.append(breaker)

        for fid in path:
            state[fid] = _DONE

    return breaks


def build_tree(folders: Iterable[Folder]) -> FolderForest:
    active = [f for f in folders if f.deleted_at is None]
    nodes: Dict[str, FolderNode] = {}
    order = []
    for folder in active:
        if folder.id in nodes:
            continue
        nodes[folder.id] = FolderNode(**folder.model_dump(exclude={"children"}), children=[])
        order.append(folder.id)

    # Missing or deleted parents make the folder a root
    parents = {
        fid: (node.parent_id if node.parent_id in nodes else None)
        for fid, node in nodes.items()
    }
    cycle_breaks = _break_cycles(order, parents)
    if cycle_breaks:
        core_logger.warning("Folder parent cycle detected, promoting folders to roots", extra={
            "folder_ids": cycle_breaks
        })

    roots = []
    for fid in order:
        parent = parents[fid]
        if parent is None:
            roots.append(nodes[fid])
        else:
            nodes[parent].children.append(nodes[fid])

    roots.sort(key=_sort_key)
    for node in nodes.values():
        node.children.sort(key=_sort_key)

    return FolderForest(roots=roots, cycle_breaks=cycle_breaks)


def folder_path(folders: Iterable[Folder], folder_id: str) -> List[Folder]:
    """Breadcrumb chain from the top-most active ancestor down to folder_id"""
    by_id = {f.id: f for f in folders if f.deleted_at is None}
    path = []
    seen: Set[str] = set()
    current = by_id.get(folder_id)
    while current is not None and current.id not in seen:
        seen.add(current.id)
        path.append(current)
        current = by_id.get(current.parent_id) if current.parent_id else None
    path.reverse()
    return path


def descendant_ids(folders: Iterable[Folder], folder_id: str) -> Set[str]:
    children: Dict[str, List[str]] = {}
    for f in folders:
        if f.deleted_at is None and f.parent_id:
            children.setdefault(f.parent_id, []).append(f.id)

    found: Set[str] = set()
    stack = list(children.get(folder_id, []))
    while stack:
        fid = stack.pop()
        if fid in found or fid == folder_id:
            continue
        found.add(fid)
        stack.extend(children.get(fid, []))
    return found


def reachable_folder_ids(folders: Iterable[Folder]) -> Set[str]:
    """Active folders with no soft-deleted folder anywhere above them.

    A parent id that never existed counts as a root, matching build_tree.
    """
    by_id = {f.id: f for f in folders}
    verdict: Dict[str, bool] = {}

    for fid, folder in by_id.items():
        if folder.deleted_at is not None:
            verdict[fid] = False
            continue
        chain = []
        current = folder
        reachable = True
        while True:
            if current.id in verdict:
                reachable = verdict[current.id]
                break
            if current.id in chain:
                # cycle of active folders; build_tree keeps them visible
                break
            chain.append(current.id)
            parent = by_id.get(current.parent_id) if current.parent_id else None
            if parent is None:
                break
            if parent.deleted_at is not None:
                reachable = False
                break
            current = parent
        for cid in chain:
            verdict[cid] = reachable

    return {fid for fid, ok in verdict.items() if ok}
