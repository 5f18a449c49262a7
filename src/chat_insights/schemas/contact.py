"""Contact-related Pydantic schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ContactNameOut(BaseModel):
    """Directory lookup result; ``name`` is null for unknown numbers."""

    phone: str = Field(..., description="Phone number used as the session id")
    name: str | None = None
