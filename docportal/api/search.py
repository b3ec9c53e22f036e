# docportal/api/search.py
import time
from typing import List, Optional, Set

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.document import Document, Facets, SearchCriteria, SortOrder
from ..services.document_service import document_service
from ..utils.logging import api_logger

router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("", response_model=List[Document])
async def search_documents(
        text: Optional[str] = None,
        class_level: Optional[str] = None,
        subject: Optional[str] = None,
        year: Optional[str] = None,
        tags: Set[str] = Query(default=set()),
        folder_id: Optional[str] = None,
        sort: SortOrder = SortOrder.NEWEST,
        db: Session = Depends(get_db)
):
    """Public search over approved, live documents"""
    criteria = SearchCriteria(
        text=text, class_level=class_level, subject=subject, year=year,
        tags=tags, folder_id=folder_id, sort=sort,
    )
    api_logger.info("Searching documents", extra={
        "criteria": criteria.model_dump(mode="json", exclude_defaults=True)
    })

    try:
        start_time = time.time()
        results = document_service.public_search(db, criteria)

        api_logger.info("Search completed", extra={
            "result_count": len(results),
            "execution_time_ms": round((time.time() - start_time) * 1000, 2)
        })
        return results

    except Exception as e:
        api_logger.error("Error searching documents", extra={"error": str(e)})
        raise


@router.get("/facets", response_model=Facets)
async def search_facets(db: Session = Depends(get_db)):
    return document_service.facets(db)
