# docportal/api/deps.py
from typing import Optional

from fastapi import Header, HTTPException

from ..core.errors import (
    DuplicateNameError, InvalidParentError, InvalidStateError, NotFoundError,
    PermissionDeniedError, PortalError, Result, ValidationError,
)
from ..schemas.actor import Actor, Role
from ..utils.logging import api_logger

ERROR_STATUS = {
    ValidationError: 400,
    InvalidParentError: 400,
    PermissionDeniedError: 403,
    NotFoundError: 404,
    DuplicateNameError: 409,
    InvalidStateError: 409,
}


def status_for(error: PortalError) -> int:
    for kind, status_code in ERROR_STATUS.items():
        if isinstance(error, kind):
            return status_code
    return 500


def unwrap_or_raise(result: Result):
    """Return the value or turn the carried error(s) into an HTTPException"""
    if result.ok:
        return result.value

    errors = result.errors
    status_code = status_for(errors[0])
    api_logger.info("Operation refused", extra={
        "status_code": status_code,
        "errors": [e.to_dict() for e in errors]
    })
    if isinstance(result.error, list):
        detail = [e.to_dict() for e in errors]
    else:
        detail = errors[0].to_dict()
    raise HTTPException(status_code=status_code, detail=detail)


def _parse_actor(actor_id: Optional[str], actor_role: Optional[str]) -> Optional[Actor]:
    if not actor_id or not actor_role:
        return None
    try:
        role = Role(actor_role.lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role '{actor_role}'")
    return Actor(id=actor_id, role=role)


async def get_optional_actor(
        x_actor_id: Optional[str] = Header(default=None),
        x_actor_role: Optional[str] = Header(default=None),
) -> Optional[Actor]:
    """Staff identity forwarded by the identity provider, if any"""
    return _parse_actor(x_actor_id, x_actor_role)


async def get_actor(
        x_actor_id: Optional[str] = Header(default=None),
        x_actor_role: Optional[str] = Header(default=None),
) -> Actor:
    actor = _parse_actor(x_actor_id, x_actor_role)
    if actor is None:
        raise HTTPException(status_code=401, detail="Staff authentication required")
    return actor
