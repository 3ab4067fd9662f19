# app/dependencies.py
"""Shared FastAPI dependencies."""

from typing import Optional
from fastapi import Header


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Caller identity as set by the upstream auth layer (X-User-Id header).
    None when the request carries no identity; services decide if that is an error.
    """
    return x_user_id or None
