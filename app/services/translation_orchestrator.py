"""Message translation workflow.

translate_message() walks a request through

    RECEIVED -> VALIDATED -> LANGUAGE_RESOLVED -> CACHE_CHECKED
        -> CACHE_HIT
        -> PROVIDER_CALLED -> CACHE_STORE_ATTEMPTED -> DONE
    (any step) -> FAILED

Expected failures come back as a TranslationFailure value rather than an
exception. Cache faults are logged and absorbed: whether a request succeeds
depends only on the translation provider.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime

from app import db
from app.constants import SUPPORTED_LANGUAGES, AUTO_DETECT, is_valid_language, is_valid_source_language
from app.models import Message, TranslationPreference
from app.services.language_detection import detect_language
from app.services.translation import translate_text, TranslationError
from app.services.translation_cache import (
    CacheError,
    lookup_cached_translation,
    store_cached_translation,
)
from app.utils.error_logging import log_error

logger = logging.getLogger(__name__)

INVALID_REQUEST = 'INVALID_REQUEST'
MESSAGE_NOT_FOUND = 'MESSAGE_NOT_FOUND'

_LANGUAGE_LIST = ', '.join(SUPPORTED_LANGUAGES)


@dataclass
class TranslationFailure:
    status: int
    code: str
    message: str
    details: dict | None = None
    
    def to_dict(self) -> dict:
        body = {'error': self.message, 'code': self.code}
        if self.details:
            body['details'] = self.details
        return body


@dataclass
class TranslationOutcome:
    translation: dict | None = None
    failure: TranslationFailure | None = None
    # Every state the request passed through, for logging and tests
    states: list = field(default_factory=list)
    
    @property
    def ok(self) -> bool:
        return self.failure is None


def validate_translation_request(payload) -> dict:
    """Return a field -> error message map; empty when the request is valid."""
    payload = payload if isinstance(payload, dict) else {}
    errors = {}
    
    message_id = payload.get('messageId')
    if not isinstance(message_id, str) or not message_id.strip():
        errors['messageId'] = 'Message ID is required'
    
    if not is_valid_language(payload.get('targetLanguage')):
        errors['targetLanguage'] = f'Target language must be one of: {_LANGUAGE_LIST}'
    
    source_language = payload.get('sourceLanguage')
    if source_language and not is_valid_source_language(source_language):
        errors['sourceLanguage'] = f'Source language must be one of: {_LANGUAGE_LIST}, auto'
    
    return errors


def _fetch_message_text(message_id: str):
    """Return (found, text) for a message from the message store."""
    message = db.session.get(Message, message_id)
    if message is None or message.deleted:
        return False, None
    return True, message.text


def translate_message(message_id, target_language, source_language=AUTO_DETECT,
                      user_role=None, context=None) -> TranslationOutcome:
    """
    Translate one chat message, reusing a cached translation when possible.
    
    Args:
        message_id: ID of the message to translate
        target_language: Concrete target code
        source_language: Concrete source code or 'auto' (default)
        user_role: Requesting user, for log context only
        context: Extra log context (e.g. endpoint)
    
    Returns:
        TranslationOutcome with either .translation (messageId, sourceLanguage,
        targetLanguage, translatedText, originalText, cached) or .failure
    """
    outcome = TranslationOutcome(states=['RECEIVED'])
    log_context = dict(context or {}, message_id=message_id, user=user_role)
    
    def fail(status, code, message, details=None):
        outcome.states.append('FAILED')
        outcome.failure = TranslationFailure(status, code, message, details)
        return outcome
    
    if not source_language:
        source_language = AUTO_DETECT
    
    errors = validate_translation_request({
        'messageId': message_id,
        'targetLanguage': target_language,
        'sourceLanguage': source_language,
    })
    if errors:
        return fail(400, INVALID_REQUEST, 'Validation failed', errors)
    outcome.states.append('VALIDATED')
    
    found, original_text = _fetch_message_text(message_id)
    if not found:
        return fail(404, MESSAGE_NOT_FOUND, 'Message not found')
    if not isinstance(original_text, str) or not original_text.strip():
        return fail(400, INVALID_REQUEST, 'Message has no text to translate')
    
    if source_language == AUTO_DETECT:
        source_language = detect_language(original_text)
        logger.debug(f"[TRANSLATE] Detected {source_language} for message {message_id}")
    outcome.states.append('LANGUAGE_RESOLVED')
    
    if source_language == target_language:
        return fail(400, INVALID_REQUEST, 'Source and target languages cannot be the same')
    
    # A broken cache must not block translation; treat faults as a miss
    cached = None
    try:
        cached = lookup_cached_translation(message_id, source_language, target_language)
    except CacheError as e:
        log_error(e, dict(log_context, operation='cache_lookup'))
    outcome.states.append('CACHE_CHECKED')
    
    if cached is not None:
        outcome.states.append('CACHE_HIT')
        outcome.translation = {
            'messageId': message_id,
            'sourceLanguage': cached.source_language,
            'targetLanguage': cached.target_language,
            'translatedText': cached.translated_text,
            'originalText': original_text,
            'cached': True
        }
        return outcome
    
    try:
        translated_text = translate_text(original_text, source_language, target_language)
    except TranslationError as e:
        log_error(e, dict(log_context, operation='api_call'))
        return fail(e.http_status, e.kind, e.message)
    outcome.states.append('PROVIDER_CALLED')
    
    # The translation already succeeded; failing to cache it is not an error
    try:
        store_cached_translation(message_id, source_language, target_language, translated_text)
    except CacheError as e:
        log_error(e, dict(log_context, operation='cache_storage'))
    outcome.states.append('CACHE_STORE_ATTEMPTED')
    
    outcome.states.append('DONE')
    outcome.translation = {
        'messageId': message_id,
        'sourceLanguage': source_language,
        'targetLanguage': target_language,
        'translatedText': translated_text,
        'originalText': original_text,
        'cached': False
    }
    return outcome


# ============ Display preferences ============

def validate_preference_request(payload) -> dict:
    """Return a field -> error message map for a preference update."""
    payload = payload if isinstance(payload, dict) else {}
    errors = {}
    
    message_id = payload.get('messageId')
    if not isinstance(message_id, str) or not message_id.strip():
        errors['messageId'] = 'Message ID is required'
    
    if not isinstance(payload.get('showOriginal'), bool):
        errors['showOriginal'] = 'showOriginal must be a boolean'
    
    target_language = payload.get('targetLanguage')
    if target_language and not is_valid_language(target_language):
        errors['targetLanguage'] = f'Target language must be one of: {_LANGUAGE_LIST}'
    
    return errors


def get_preference(user_role: str, message_id: str) -> dict:
    """Stored preference for a viewer and message, or the default display."""
    preference = TranslationPreference.query.filter_by(
        user_role=user_role,
        message_id=message_id
    ).one_or_none()
    
    if preference is None:
        return {'messageId': message_id, 'showOriginal': True, 'targetLanguage': None}
    return preference.to_dict()


def _upsert_insert(dialect_name):
    if dialect_name == 'postgresql':
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect_name == 'sqlite':
        from sqlalchemy.dialects.sqlite import insert
        return insert
    return None


def set_preference(user_role: str, message_id: str, show_original: bool,
                   target_language: str = None) -> dict:
    """
    Insert or replace the preference keyed by (user_role, message_id).
    
    Uses INSERT .. ON CONFLICT DO UPDATE where the database supports it, so
    concurrent toggles for the same key never produce two rows.
    """
    now = datetime.utcnow()
    values = {
        'user_role': user_role,
        'message_id': message_id,
        'show_original': show_original,
        'target_language': target_language or None,
        'updated_at': now,
    }
    
    insert = _upsert_insert(db.session.get_bind().dialect.name)
    try:
        if insert is not None:
            table = TranslationPreference.__table__
            stmt = insert(table).values(created_at=now, **values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.user_role, table.c.message_id],
                set_={
                    'show_original': stmt.excluded.show_original,
                    'target_language': stmt.excluded.target_language,
                    'updated_at': stmt.excluded.updated_at,
                }
            )
            db.session.execute(stmt)
        else:
            preference = TranslationPreference.query.filter_by(
                user_role=user_role,
                message_id=message_id
            ).one_or_none()
            if preference is None:
                preference = TranslationPreference(user_role=user_role, message_id=message_id)
                db.session.add(preference)
            preference.show_original = show_original
            preference.target_language = values['target_language']
            preference.updated_at = now
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    
    return {
        'messageId': message_id,
        'showOriginal': show_original,
        'targetLanguage': values['target_language']
    }
