"""Persistent translation cache backed by the translations table.

Uniqueness of (message_id, source_language, target_language) is enforced
by the database constraint. store_cached_translation() just inserts and
lets the losing writer of a race see DUPLICATE_TRANSLATION.
"""
import logging
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app import db
from app.constants import is_valid_language
from app.models import Translation

logger = logging.getLogger(__name__)


class CacheErrorKind:
    INVALID_INPUT = 'INVALID_INPUT'
    DATABASE_ERROR = 'DATABASE_ERROR'
    DUPLICATE_TRANSLATION = 'DUPLICATE_TRANSLATION'


class CacheError(Exception):
    """A cache-layer failure. Never fatal to a translation request."""
    
    def __init__(self, message: str, kind: str):
        super().__init__(message)
        self.message = message
        self.kind = kind


def _validate_key(message_id, source_language, target_language):
    if not isinstance(message_id, str) or not message_id.strip():
        raise CacheError('Message ID is required', CacheErrorKind.INVALID_INPUT)
    if not is_valid_language(source_language):
        raise CacheError('Invalid source language', CacheErrorKind.INVALID_INPUT)
    if not is_valid_language(target_language):
        raise CacheError('Invalid target language', CacheErrorKind.INVALID_INPUT)


def _is_unique_violation(error: IntegrityError) -> bool:
    """Tell a unique-key clash apart from e.g. a foreign key violation."""
    # PostgreSQL unique_violation
    if getattr(error.orig, 'pgcode', None) == '23505':
        return True
    detail = str(error.orig).lower()
    return 'unique' in detail or 'duplicate' in detail


def lookup_cached_translation(message_id: str, source_language: str, target_language: str) -> Translation | None:
    """Return the cached translation for the key, or None on a miss."""
    _validate_key(message_id, source_language, target_language)
    
    try:
        return Translation.query.filter_by(
            message_id=message_id,
            source_language=source_language,
            target_language=target_language
        ).one_or_none()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise CacheError(f'Failed to lookup cached translation: {e}', CacheErrorKind.DATABASE_ERROR) from e


def store_cached_translation(message_id: str, source_language: str, target_language: str,
                             translated_text: str) -> Translation:
    """
    Insert a translation into the cache.
    
    Raises:
        CacheError: DUPLICATE_TRANSLATION if a row for the key already exists
            (another request won the race), DATABASE_ERROR for any other store
            fault, INVALID_INPUT for malformed arguments.
    """
    _validate_key(message_id, source_language, target_language)
    if not isinstance(translated_text, str) or not translated_text.strip():
        raise CacheError('Translated text is required', CacheErrorKind.INVALID_INPUT)
    
    entry = Translation(
        message_id=message_id,
        source_language=source_language,
        target_language=target_language,
        translated_text=translated_text
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if _is_unique_violation(e):
            raise CacheError('Translation already exists in cache', CacheErrorKind.DUPLICATE_TRANSLATION) from e
        raise CacheError(f'Failed to store translation in cache: {e}', CacheErrorKind.DATABASE_ERROR) from e
    except SQLAlchemyError as e:
        db.session.rollback()
        raise CacheError(f'Failed to store translation in cache: {e}', CacheErrorKind.DATABASE_ERROR) from e
    
    logger.debug(f"[CACHE] Stored {message_id} {source_language}->{target_language}")
    return entry


def list_cached_translations(message_id: str, target_language: str = None) -> list[Translation]:
    """All cached translations of a message, newest first."""
    query = Translation.query.filter_by(message_id=message_id)
    if target_language:
        query = query.filter_by(target_language=target_language)
    
    try:
        return query.order_by(Translation.created_at.desc()).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise CacheError(f'Failed to list cached translations: {e}', CacheErrorKind.DATABASE_ERROR) from e
