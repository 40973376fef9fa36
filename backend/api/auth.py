"""
Caller identity for the API.

Token verification happens upstream (gateway); requests reach this service
with the authenticated identity in headers. Endpoints depend on get_caller().
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException

from config.settings import DRIVER_ROLE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: Optional[str] = None
    vehicle_id: Optional[str] = None

    @property
    def is_driver(self) -> bool:
        return self.role == DRIVER_ROLE


async def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_vehicle_id: Optional[str] = Header(None)
) -> Caller:
    """Build the caller identity from request headers; 401 without a user id."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing caller identity")

    return Caller(user_id=x_user_id, role=x_user_role, vehicle_id=x_vehicle_id or None)


def require_vehicle(caller: Caller) -> str:
    """Get the caller's vehicle id; 400 when no vehicle is associated."""
    if not caller.vehicle_id:
        raise HTTPException(status_code=400, detail="No vehicle is associated with this user")
    return caller.vehicle_id
