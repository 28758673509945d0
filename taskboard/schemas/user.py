"""Schemas for users"""
from typing import Optional

from taskboard.schemas.common import CamelModel


class UserSummary(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None


class Principal(CamelModel):
    """Identity attached to a request by the auth layer."""

    user_id: str
    email: str
