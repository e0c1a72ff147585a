# backend/homefix/api/dependencies/auth.py
"""
Actor resolution.

Authentication happens at the gateway, which forwards the verified user id
and role in ``X-User-Id`` and ``X-User-Role``.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from ...core.actor import Actor
from ...core.enums import RoleName

logger = logging.getLogger(__name__)


def get_current_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing identity headers",
        )
    try:
        role = RoleName(x_user_role.strip().upper())
    except ValueError:
        logger.warning("Rejected unknown role header %r", x_user_role)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown role",
        )
    return Actor(user_id=x_user_id.strip(), role=role)


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return actor


def require_technician(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_technician:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Technician access required"
        )
    return actor


def require_customer(actor: Actor = Depends(get_current_actor)) -> Actor:
    if not actor.is_customer:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Customer access required")
    return actor
