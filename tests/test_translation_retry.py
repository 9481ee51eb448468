"""Tests for the client-side translation retry controller."""
from unittest.mock import Mock, patch

import pytest
import requests

from app.client import TranslationRetryController, TranslationState, backoff_delay

TRANSLATION = {
    'messageId': 'msg-1',
    'sourceLanguage': 'en',
    'targetLanguage': 'zh-CN',
    'translatedText': '你好世界',
    'originalText': 'Hello world',
    'cached': False
}


def _response(status_code, body=None):
    response = Mock(status_code=status_code, ok=200 <= status_code < 300)
    response.json.return_value = body
    return response


def _controller(*responses, message_id='msg-1', **kwargs):
    session = Mock()
    session.post.side_effect = list(responses)
    sleep = Mock()
    controller = TranslationRetryController(
        message_id, 'https://chat.example.com/', token='tkn', session=session, sleep=sleep, **kwargs
    )
    return controller, session, sleep


class TestBackoff:

    def test_delay_doubles_per_attempt(self):
        assert [backoff_delay(n) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]


class TestTranslate:

    def test_starts_idle(self):
        controller, _, _ = _controller()
        assert controller.state == TranslationState.IDLE
        assert controller.loading is False
        assert controller.error is None
        assert controller.translation is None
        assert controller.retry_count == 0

    def test_success_stores_result(self):
        controller, session, _ = _controller(_response(200, {'success': True, 'translation': TRANSLATION}))

        assert controller.translate('zh-CN') == TRANSLATION
        assert controller.state == TranslationState.SUCCESS
        assert controller.translation == TRANSLATION
        assert controller.error is None

        args, kwargs = session.post.call_args
        assert args[0] == 'https://chat.example.com/api/translations'
        assert kwargs['json'] == {'messageId': 'msg-1', 'targetLanguage': 'zh-CN', 'sourceLanguage': 'auto'}
        assert kwargs['headers']['Authorization'] == 'Bearer tkn'

    def test_guards_skip_network(self):
        controller, session, _ = _controller(message_id='')
        assert controller.translate('zh-CN') is None
        assert controller.error['message'] == 'Message ID is required'

        controller, session, _ = _controller()
        assert controller.translate('') is None
        assert controller.error['message'] == 'Target language is required'
        session.post.assert_not_called()

    @pytest.mark.parametrize('status,body,code', [
        (429, {'error': 'x', 'code': 'RATE_LIMIT'}, 'RATE_LIMIT'),
        (503, {'error': 'x', 'code': 'NETWORK_ERROR'}, 'SERVICE_UNAVAILABLE'),
        (404, {'error': 'Message not found', 'code': 'MESSAGE_NOT_FOUND'}, 'NOT_FOUND'),
        (400, {'error': 'Source and target languages cannot be the same'}, 'INVALID_REQUEST'),
        (500, {'error': 'Translation failed. Please try again.', 'code': 'TRANSLATION_FAILED'}, 'TRANSLATION_FAILED'),
        (500, {'error': 'bad upstream data', 'code': 'INVALID_RESPONSE'}, 'INVALID_RESPONSE'),
        (502, None, 'TRANSLATION_FAILED'),
    ])
    def test_failures_are_classified(self, status, body, code):
        controller, _, _ = _controller(_response(status, body))

        assert controller.translate('zh-CN') is None
        assert controller.state == TranslationState.ERROR
        assert controller.error['code'] == code
        assert controller.error['message']

    def test_bad_request_keeps_server_message(self):
        controller, _, _ = _controller(_response(400, {'error': 'Source and target languages cannot be the same'}))
        controller.translate('en')
        assert controller.error['message'] == 'Source and target languages cannot be the same'

    @pytest.mark.parametrize('exc', [requests.ConnectionError('down'), requests.Timeout('slow')])
    def test_no_response_is_network_error(self, exc):
        controller, _, _ = _controller(exc)
        controller.translate('zh-CN')
        assert controller.error == {'message': 'Network error. Please check your connection.', 'code': 'NETWORK_ERROR'}

    def test_overlapping_call_is_dropped(self):
        controller, session, _ = _controller()
        controller.state = TranslationState.LOADING
        assert controller.translate('zh-CN') is None
        assert controller.retry('zh-CN') is None
        session.post.assert_not_called()

    def test_translate_after_failure_makes_no_request(self):
        controller, session, sleep = _controller(_response(503, {}))

        controller.translate('zh-CN')
        assert controller.translate('zh-CN') is None

        assert session.post.call_count == 1
        assert controller.state == TranslationState.ERROR
        assert controller.error['code'] == 'SERVICE_UNAVAILABLE'
        assert controller.retry_count == 0
        sleep.assert_not_called()

    def test_translate_allowed_again_after_clear_error(self):
        ok = _response(200, {'success': True, 'translation': TRANSLATION})
        controller, session, _ = _controller(_response(503, {}), ok)

        controller.translate('zh-CN')
        controller.clear_error()
        assert controller.state == TranslationState.IDLE
        assert controller.translate('zh-CN') == TRANSLATION
        assert session.post.call_count == 2


class TestRetry:

    def test_three_failed_retries_exhaust_budget(self):
        failures = [_response(503, {}) for _ in range(4)]
        controller, session, sleep = _controller(*failures)

        controller.translate('zh-CN')
        for _ in range(3):
            assert controller.retry('zh-CN') is None
            assert controller.error['code'] == 'SERVICE_UNAVAILABLE'

        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 4.0]
        assert controller.retry_count == 3

        assert controller.retry('zh-CN') is None
        assert controller.error['code'] == 'MAX_RETRIES'
        assert controller.state == TranslationState.ERROR
        assert session.post.call_count == 4
        assert sleep.call_count == 3

    def test_success_resets_attempt_counter(self):
        ok = _response(200, {'success': True, 'translation': TRANSLATION})
        controller, _, sleep = _controller(_response(429, {}), _response(429, {}), ok)

        controller.translate('zh-CN')
        controller.retry('zh-CN')
        assert controller.retry_count == 1
        assert controller.retry('zh-CN') == TRANSLATION
        assert controller.retry_count == 0
        assert controller.state == TranslationState.SUCCESS
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_custom_budget(self):
        controller, session, _ = _controller(_response(503, {}), max_retries=0)
        assert controller.retry('zh-CN') is None
        assert controller.error['code'] == 'MAX_RETRIES'
        session.post.assert_not_called()


class TestReset:

    def test_reset_returns_to_idle(self):
        controller, _, _ = _controller(_response(503, {}), _response(503, {}))
        controller.translate('zh-CN')
        controller.retry('zh-CN')

        controller.reset()
        assert controller.state == TranslationState.IDLE
        assert controller.error is None
        assert controller.translation is None
        assert controller.retry_count == 0

    def test_clear_error_keeps_previous_translation(self):
        ok = _response(200, {'success': True, 'translation': TRANSLATION})
        controller, _, _ = _controller(ok, _response(429, {}))
        controller.translate('zh-CN')
        controller.translate('zh-TW')

        controller.clear_error()
        assert controller.error is None
        assert controller.translation == TRANSLATION
        assert controller.state == TranslationState.SUCCESS


class _FlaskSession:
    """Routes controller requests into the Flask test client."""

    def __init__(self, client):
        self.client = client

    def post(self, url, json=None, headers=None, timeout=None):
        path = url.split('chat.test', 1)[1]
        resp = self.client.post(path, json=json, headers=headers)
        response = Mock(status_code=resp.status_code, ok=resp.status_code < 400)
        response.json.return_value = resp.get_json()
        return response


def test_controller_against_live_app(client, english_message, token_factory, mymemory_response):
    controller = TranslationRetryController(
        english_message, 'http://chat.test', token=token_factory('B'),
        session=_FlaskSession(client), sleep=Mock()
    )
    with patch('app.services.translation.requests.get',
               side_effect=[mymemory_response(429, {}), mymemory_response(translated='你好世界')]):
        assert controller.translate('zh-CN') is None
        assert controller.error['code'] == 'RATE_LIMIT'

        result = controller.retry('zh-CN')

    assert result['translatedText'] == '你好世界'
    assert result['cached'] is False
    assert controller.state == TranslationState.SUCCESS
