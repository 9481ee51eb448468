"""Shared utilities for the chat backend.

This package contains reusable utilities that are shared across
multiple route files to reduce code duplication.
"""

from app.utils.auth import token_required, VALID_ROLES
from app.utils.error_logging import log_error

__all__ = [
    'token_required',
    'VALID_ROLES',
    'log_error',
]
