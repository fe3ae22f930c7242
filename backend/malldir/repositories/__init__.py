"""Repository package exposing persistence-layer access."""

from __future__ import annotations

from malldir.repositories.account import AccountRepository
from malldir.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
)

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "apply_sorting",
    "AccountRepository",
]
