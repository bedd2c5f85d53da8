# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional


class TexAdminError(RuntimeError):
    pass


class ValidationError(TexAdminError):
    """Local edit validation failed (never reaches the network)."""


class FetchError(TexAdminError):
    """Enumeration, metadata read or metadata write failed."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
