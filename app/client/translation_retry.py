"""Per-message translation state with bounded exponential-backoff retries.

One controller belongs to one message translation widget:

    IDLE -> LOADING -> SUCCESS | ERROR
    ERROR -> LOADING only through retry()

retry() refuses after max_retries attempts with a terminal MAX_RETRIES
error, so a failing message never loops forever.
"""
import logging
import time
import requests

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
REQUEST_TIMEOUT_SECONDS = 15


class TranslationState:
    IDLE = 'IDLE'
    LOADING = 'LOADING'
    SUCCESS = 'SUCCESS'
    ERROR = 'ERROR'


def backoff_delay(attempt: int) -> float:
    """Seconds to wait before retry number attempt + 1: 1, 2, 4, ..."""
    return float(2 ** attempt)


def _classify_response(response) -> dict:
    """Turn an error response from the translation endpoint into {message, code}."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        data = {}
    
    status = response.status_code
    if status == 429:
        return {'message': 'Translation rate limit exceeded. Please try again later.', 'code': 'RATE_LIMIT'}
    if status == 503:
        return {'message': 'Translation service is temporarily unavailable.', 'code': 'SERVICE_UNAVAILABLE'}
    if status == 404:
        return {'message': 'Message not found.', 'code': 'NOT_FOUND'}
    if status == 400:
        return {'message': data.get('error') or 'Invalid translation request.', 'code': 'INVALID_REQUEST'}
    if data.get('error'):
        return {'message': data['error'], 'code': data.get('code') or 'TRANSLATION_FAILED'}
    return {'message': 'Translation failed. Please try again.', 'code': 'TRANSLATION_FAILED'}


class TranslationRetryController:
    """
    Calls POST /api/translations for one message and tracks the result.
    
    Args:
        message_id: Message this widget translates
        base_url: Backend root, e.g. 'https://chat.example.com'
        token: Bearer token sent with each request (optional)
        session: requests.Session to reuse (optional)
        sleep: Called with the backoff delay in seconds; defaults to time.sleep
        max_retries: Number of retry() calls allowed before MAX_RETRIES
    
    Usage:
        controller = TranslationRetryController(message_id, base_url, token=token)
        if controller.translate('zh-CN') is None:
            controller.retry('zh-CN')
    """
    
    def __init__(self, message_id, base_url, token=None, session=None,
                 sleep=time.sleep, max_retries=MAX_RETRIES):
        self.message_id = message_id
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.session = session or requests.Session()
        self.sleep = sleep
        self.max_retries = max_retries
        self.reset()
    
    @property
    def loading(self) -> bool:
        return self.state == TranslationState.LOADING
    
    def _headers(self):
        headers = {'Content-Type': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers
    
    def _set_error(self, message, code):
        self.error = {'message': message, 'code': code}
        self.state = TranslationState.ERROR
    
    def translate(self, target_language, source_language='auto'):
        """
        Translate the message into target_language.
        
        Refused while a request is in flight or after a failure; once in
        ERROR only retry() (or reset()/clear_error()) moves the widget on.
        
        Returns:
            The translation dict on success, None on any failure (see .error)
        """
        # Overlapping calls on one widget are dropped, not queued
        if self.state == TranslationState.LOADING:
            logger.debug(f"[TRANSLATE] Request for {self.message_id} already in flight")
            return None
        if self.state == TranslationState.ERROR:
            logger.debug(f"[TRANSLATE] {self.message_id} is in ERROR; waiting for retry()")
            return None
        
        return self._request(target_language, source_language)
    
    def _request(self, target_language, source_language):
        if not self.message_id:
            self._set_error('Message ID is required', 'INVALID_REQUEST')
            return None
        if not target_language:
            self._set_error('Target language is required', 'INVALID_REQUEST')
            return None
        
        self.state = TranslationState.LOADING
        self.error = None
        
        try:
            response = self.session.post(
                f'{self.base_url}/api/translations',
                json={
                    'messageId': self.message_id,
                    'targetLanguage': target_language,
                    'sourceLanguage': source_language
                },
                headers=self._headers(),
                timeout=REQUEST_TIMEOUT_SECONDS
            )
        except requests.RequestException as e:
            logger.warning(f"[TRANSLATE] No response for {self.message_id}: {e}")
            self._set_error('Network error. Please check your connection.', 'NETWORK_ERROR')
            return None
        
        if not response.ok:
            failure = _classify_response(response)
            self._set_error(failure['message'], failure['code'])
            return None
        
        try:
            data = response.json()
        except ValueError:
            data = None
        
        if not isinstance(data, dict) or not data.get('success'):
            message = data.get('error') if isinstance(data, dict) else None
            self._set_error(message or 'Translation failed. Please try again.', 'TRANSLATION_FAILED')
            return None
        
        self.translation = data['translation']
        self.retry_count = 0
        self.state = TranslationState.SUCCESS
        return self.translation
    
    def retry(self, target_language, source_language='auto'):
        """
        Retry after a failure, waiting 1s, 2s, 4s before successive attempts.
        
        Returns:
            The translation dict, or None if the attempt failed or the retry
            budget is exhausted (error code MAX_RETRIES).
        """
        if self.state == TranslationState.LOADING:
            logger.debug(f"[TRANSLATE] Request for {self.message_id} already in flight")
            return None
        if self.retry_count >= self.max_retries:
            self._set_error('Maximum retry attempts reached. Please try again later.', 'MAX_RETRIES')
            return None
        
        delay = backoff_delay(self.retry_count)
        self.retry_count += 1
        logger.info(f"[TRANSLATE] Retry {self.retry_count}/{self.max_retries} for {self.message_id} in {delay:.0f}s")
        self.sleep(delay)
        
        return self._request(target_language, source_language)
    
    def clear_error(self):
        self.error = None
        if self.state == TranslationState.ERROR:
            self.state = TranslationState.SUCCESS if self.translation else TranslationState.IDLE
    
    def reset(self):
        """Back to IDLE, e.g. when the widget is torn down or the target changes."""
        self.state = TranslationState.IDLE
        self.error = None
        self.translation = None
        self.retry_count = 0
