"""Shared constants for the application."""

from app.constants.languages import (
    SUPPORTED_LANGUAGES,
    AUTO_DETECT,
    is_valid_language,
    is_valid_source_language,
)

__all__ = [
    'SUPPORTED_LANGUAGES',
    'AUTO_DETECT',
    'is_valid_language',
    'is_valid_source_language',
]
