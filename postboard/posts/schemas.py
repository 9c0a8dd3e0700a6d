"""
Post record, shared by the API body and the `posts` table row.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Post(BaseModel):
    name: str
    icon: str
    content: str
    media: str | None = None
    # Assigned by the store on insert; any client value is ignored.
    created_at: datetime | None = None
