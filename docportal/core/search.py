# docportal/core/search.py
from typing import Iterable, List, Optional

from ..models.document import DocumentStatus
from ..schemas.document import Document, Facets, SearchCriteria, SortOrder


def _matches_text(document: Document, needle: str) -> bool:
    haystack = [document.name, document.description, document.subject, *document.tags]
    return any(value and needle in value.casefold() for value in haystack)


def matches(document: Document, criteria: SearchCriteria, public: bool = False) -> bool:
    if document.deleted_at is not None:
        return False
    if public and document.status != DocumentStatus.APPROVED:
        return False
    if not public and criteria.status is not None and document.status != criteria.status:
        return False

    text = (criteria.text or "").strip().casefold()
    if text and not _matches_text(document, text):
        return False
    if criteria.class_level and document.class_level != criteria.class_level:
        return False
    if criteria.subject and document.subject != criteria.subject:
        return False
    if criteria.year and document.year != criteria.year:
        return False
    if criteria.tags:
        wanted = {tag.casefold() for tag in criteria.tags}
        if wanted.isdisjoint(tag.casefold() for tag in document.tags):
            return False
    if criteria.folder_id and document.folder_id != criteria.folder_id:
        return False
    if criteria.uploaded_by and document.uploaded_by != criteria.uploaded_by:
        return False
    return True


def sort_documents(documents: Iterable[Document], order: SortOrder = SortOrder.NEWEST) -> List[Document]:
    # Stable sorts: apply the tie-break first, the primary key last
    ordered = sorted(documents, key=lambda d: d.id)
    if order == SortOrder.OLDEST:
        ordered.sort(key=lambda d: d.created_at)
    elif order == SortOrder.DOWNLOADS:
        ordered.sort(key=lambda d: d.name.casefold())
        ordered.sort(key=lambda d: d.downloads, reverse=True)
    elif order == SortOrder.AZ:
        ordered.sort(key=lambda d: d.name.casefold())
    else:
        ordered.sort(key=lambda d: d.created_at, reverse=True)
    return ordered


def search(documents: Iterable[Document], criteria: Optional[SearchCriteria] = None,
           public: bool = False) -> List[Document]:
    """Filter and order documents.

    Trashed documents never match. The public surface only sees approved
    documents whatever ``criteria.status`` says; the admin listing sees every
    live status and may narrow it with ``criteria.status``.
    """
    criteria = criteria or SearchCriteria()
    found = [d for d in documents if matches(d, criteria, public)]
    return sort_documents(found, criteria.sort)


def facets(documents: Iterable[Document]) -> Facets:
    visible = [
        d for d in documents
        if d.deleted_at is None and d.status == DocumentStatus.APPROVED
    ]
    tags = {}
    for d in visible:
        for tag in d.tags:
            tags.setdefault(tag.casefold(), tag)
    return Facets(
        class_levels=sorted({d.class_level for d in visible if d.class_level}),
        subjects=sorted({d.subject for d in visible if d.subject}, key=str.casefold),
        years=sorted({d.year for d in visible if d.year}, reverse=True),
        tags=sorted(tags.values(), key=str.casefold),
    )
