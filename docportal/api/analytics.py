# docportal/api/analytics.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.actor import Actor
from ..schemas.analytics import AnalyticsSummary
from ..services.document_service import document_service
from ..utils.logging import api_logger
from .deps import get_actor, unwrap_or_raise

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsSummary)
async def get_analytics(actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    api_logger.info("Computing download analytics", extra={"actor_id": actor.id})
    return unwrap_or_raise(document_service.analytics(db, actor))
