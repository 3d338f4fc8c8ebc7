"""Service layer public API.

Re-exports
----------
- Base primitives (from ``authflow.services._shared.base``)
    * :class:`BaseService`

- Session manager (from ``authflow.services.auth``)
    * :class:`SessionManager`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`RefreshIn`,
      :class:`LogoutIn`, :class:`UserPublicOut`, :class:`LoginOut`,
      :class:`TokenPairOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth.dto import (
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserPublicOut,
)
from .auth.service import SessionManager

__all__ = [
    "BaseService",
    "SessionManager",
    "RegisterIn",
    "LoginIn",
    "RefreshIn",
    "LogoutIn",
    "UserPublicOut",
    "LoginOut",
    "TokenPairOut",
]
