"""
User record, shared by the API body and the `users` table row.
"""

from __future__ import annotations

from pydantic import BaseModel


class User(BaseModel):
    email: str
    first_name: str
    last_name: str
    username: str
