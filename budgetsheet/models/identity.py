from __future__ import annotations

from pydantic import BaseModel


class Identity(BaseModel):
    """Caller resolved from the bearer token presented on the request."""

    email: str
    name: str
    access_token: str
