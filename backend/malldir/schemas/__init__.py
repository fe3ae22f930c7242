"""Convenience exports for application schemas."""

from __future__ import annotations

from .account import AccountSchema, AccountUpdateSchema
from .auth import LoginSchema, RegisterSchema, SessionResponseSchema, StatusResponseSchema
from .common import MetaSchema, PaginationQuerySchema, SortQuerySchema

__all__ = [
    "AccountSchema",
    "AccountUpdateSchema",
    "LoginSchema",
    "RegisterSchema",
    "SessionResponseSchema",
    "StatusResponseSchema",
    "PaginationQuerySchema",
    "SortQuerySchema",
    "MetaSchema",
]
