"""Database models for the chat translation subsystem."""

from .message import Message
from .translation import Translation, TranslationPreference

__all__ = ['Message', 'Translation', 'TranslationPreference']
