# docportal/services/access.py
from typing import Optional

from ..core.errors import PermissionDeniedError
from ..schemas.actor import Actor
from ..utils.logging import service_logger


def require_dos(actor: Actor, action: str) -> Optional[PermissionDeniedError]:
    """Director-of-studies only actions; returns the error instead of raising"""
    if actor.is_dos:
        return None
    service_logger.warning("Permission denied", extra={
        "actor_id": actor.id, "role": actor.role.value, "action": action
    })
    return PermissionDeniedError(
        f"Only the director of studies may {action}", action=action
    )


def require_owner_or_dos(actor: Actor, owner_id: Optional[str], action: str) -> Optional[PermissionDeniedError]:
    if actor.is_dos or (owner_id is not None and owner_id == actor.id):
        return None
    service_logger.warning("Permission denied", extra={
        "actor_id": actor.id, "role": actor.role.value, "action": action, "owner_id": owner_id
    })
    return PermissionDeniedError(
        f"Only the uploader or the director of studies may {action}", action=action
    )
