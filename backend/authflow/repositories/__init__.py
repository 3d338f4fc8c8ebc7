"""Repository package exposing persistence-layer access for the models."""

from __future__ import annotations

from authflow.repositories.base import BaseRepository
from authflow.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
