"""Consumers of the chat backend's HTTP API."""

from app.client.translation_retry import (
    TranslationRetryController,
    TranslationState,
    backoff_delay,
)

__all__ = ['TranslationRetryController', 'TranslationState', 'backoff_delay']
