"""MyMemory translation API client.

Every way the upstream call can fail is folded into one of five
TranslationError kinds, so callers never deal with raw HTTP or
transport errors.

API documentation: https://mymemory.translated.net/doc/spec.php
"""
import os
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError

import requests

from app.constants import SUPPORTED_LANGUAGES, is_valid_language

logger = logging.getLogger(__name__)

# Configuration
TRANSLATION_API_URL = os.environ.get('TRANSLATION_API_URL', 'https://api.mymemory.translated.net/get')
TRANSLATION_TIMEOUT_SECONDS = float(os.environ.get('TRANSLATION_TIMEOUT_SECONDS', 10))
# Optional contact address; MyMemory grants a larger daily quota when set
TRANSLATION_API_EMAIL = os.environ.get('TRANSLATION_API_EMAIL', '')

# Upstream calls run here; translate_text() stops waiting at the overall deadline
_upstream_pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix='mymemory')


class TranslationErrorKind:
    INVALID_INPUT = 'INVALID_INPUT'
    RATE_LIMIT = 'RATE_LIMIT'
    SERVICE_UNAVAILABLE = 'SERVICE_UNAVAILABLE'
    NETWORK_ERROR = 'NETWORK_ERROR'
    INVALID_RESPONSE = 'INVALID_RESPONSE'


class TranslationError(Exception):
    """A translation failure tagged with its kind and the HTTP status to report."""
    
    def __init__(self, message: str, kind: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.http_status = http_status
    
    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'message': self.message,
            'httpStatus': self.http_status
        }
    
    def __repr__(self):
        return f'<TranslationError {self.kind} ({self.http_status}): {self.message}>'


def _fail(message: str, kind: str, http_status: int):
    logger.warning(f"[TRANSLATE] {kind} ({http_status}): {message}")
    raise TranslationError(message, kind, http_status)


def _validate_input(text, source_language, target_language):
    if not isinstance(text, str) or not text.strip():
        _fail('Text to translate is required', TranslationErrorKind.INVALID_INPUT, 400)
    
    allowed = ', '.join(SUPPORTED_LANGUAGES)
    if not is_valid_language(source_language):
        _fail(f'Invalid source language. Must be one of: {allowed}', TranslationErrorKind.INVALID_INPUT, 400)
    if not is_valid_language(target_language):
        _fail(f'Invalid target language. Must be one of: {allowed}', TranslationErrorKind.INVALID_INPUT, 400)


def _check_status(status_code: int):
    """Map a non-2xx upstream status onto the error taxonomy."""
    if status_code in (403, 429):
        _fail('Translation rate limit exceeded. Please try again later.', TranslationErrorKind.RATE_LIMIT, 429)
    
    if status_code == 400:
        _fail('Invalid translation request. Please check language codes.', TranslationErrorKind.INVALID_INPUT, 400)
    
    if status_code >= 500:
        _fail('Translation service is temporarily unavailable.', TranslationErrorKind.SERVICE_UNAVAILABLE, 503)
    
    _fail(f'Translation API returned error: {status_code}', TranslationErrorKind.SERVICE_UNAVAILABLE, 503)


def _extract_translation(data) -> str:
    """Pull the translated text out of a parsed MyMemory response body."""
    if not isinstance(data, dict):
        _fail('Invalid response format from translation API', TranslationErrorKind.INVALID_RESPONSE, 500)
    
    # MyMemory signals an exhausted daily quota with a 200 response
    if data.get('quotaFinished') is True:
        _fail('Translation rate limit exceeded. Please try again later.', TranslationErrorKind.RATE_LIMIT, 429)
    
    response_data = data.get('responseData')
    translated = response_data.get('translatedText') if isinstance(response_data, dict) else None
    if not isinstance(translated, str):
        _fail('Translation API did not return translated text', TranslationErrorKind.INVALID_RESPONSE, 500)
    
    translated = translated.strip()
    if not translated:
        _fail('Translation API returned empty text', TranslationErrorKind.INVALID_RESPONSE, 500)
    
    return translated


def _close_abandoned(future):
    """Release the connection of a call that finished after its deadline."""
    if future.cancelled() or future.exception() is not None:
        return
    logger.debug("[TRANSLATE] Discarding response that arrived after the deadline")
    future.result().close()


def translate_text(text: str, source_language: str, target_language: str) -> str:
    """
    Translate text with the MyMemory API.
    
    Args:
        text: Text to translate
        source_language: Concrete source code (en, zh-CN, zh-TW), never 'auto'
        target_language: Concrete target code (en, zh-CN, zh-TW)
    
    Returns:
        The translated text, trimmed
    
    Raises:
        TranslationError: kind is one of INVALID_INPUT, RATE_LIMIT,
            SERVICE_UNAVAILABLE, NETWORK_ERROR, INVALID_RESPONSE. The whole
            call is bounded by TRANSLATION_TIMEOUT_SECONDS; past it the error
            is NETWORK_ERROR "timed out".
    """
    _validate_input(text, source_language, target_language)
    
    params = {
        'q': text,
        'langpair': f'{source_language}|{target_language}',
    }
    if TRANSLATION_API_EMAIL:
        params['de'] = TRANSLATION_API_EMAIL
    
    # The requests timeout bounds connect and each socket read; the future
    # bounds the whole call, so a slow-drip upstream cannot hold the caller.
    future = _upstream_pool.submit(
        requests.get,
        TRANSLATION_API_URL,
        params=params,
        headers={'Accept': 'application/json'},
        timeout=TRANSLATION_TIMEOUT_SECONDS
    )
    try:
        response = future.result(timeout=TRANSLATION_TIMEOUT_SECONDS)
    except FutureTimeoutError:
        future.cancel()
        future.add_done_callback(_close_abandoned)
        _fail('Translation request timed out. Please try again.', TranslationErrorKind.NETWORK_ERROR, 503)
    except requests.Timeout:
        _fail('Translation request timed out. Please try again.', TranslationErrorKind.NETWORK_ERROR, 503)
    except requests.RequestException as e:
        logger.debug(f"[TRANSLATE] Transport error: {type(e).__name__}: {e}")
        _fail('Network error. Please check your connection.', TranslationErrorKind.NETWORK_ERROR, 503)
    
    if not 200 <= response.status_code < 300:
        _check_status(response.status_code)
    
    try:
        data = response.json()
    except ValueError:
        _fail('Failed to parse translation API response', TranslationErrorKind.INVALID_RESPONSE, 500)
    
    return _extract_translation(data)
