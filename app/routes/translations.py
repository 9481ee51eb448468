"""Translation routes: translate messages, list cached translations, display preferences."""

from flask import Blueprint, request, jsonify
from sqlalchemy.exc import SQLAlchemyError
from app.constants import SUPPORTED_LANGUAGES, AUTO_DETECT, is_valid_language
from app.services.translation_cache import CacheError, list_cached_translations
from app.services.translation_orchestrator import (
    translate_message,
    validate_translation_request,
    validate_preference_request,
    get_preference,
    set_preference,
)
from app.utils import token_required, log_error

translations_bp = Blueprint('translations', __name__)


def _json_body():
    """Request JSON as a dict; anything else counts as an empty payload."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@translations_bp.route('', methods=['POST'])
@token_required
def create_translation(current_user_role):
    """Translate a message.
    
    Body:
        - messageId: ID of the message to translate (required)
        - targetLanguage: en, zh-CN or zh-TW (required)
        - sourceLanguage: en, zh-CN, zh-TW or auto (default auto)
    """
    endpoint = 'POST /api/translations'
    data = _json_body()
    try:
        errors = validate_translation_request(data)
        if errors:
            return jsonify({
                'error': 'Validation failed',
                'code': 'INVALID_REQUEST',
                'details': errors
            }), 400
        
        outcome = translate_message(
            data['messageId'],
            data['targetLanguage'],
            data.get('sourceLanguage') or AUTO_DETECT,
            user_role=current_user_role,
            context={'endpoint': endpoint}
        )
        
        if not outcome.ok:
            return jsonify(outcome.failure.to_dict()), outcome.failure.status
        
        return jsonify({
            'success': True,
            'translation': outcome.translation
        }), 200
    except Exception as e:
        log_error(e, {
            'endpoint': endpoint,
            'message_id': data.get('messageId'),
            'user': current_user_role
        })
        return jsonify({
            'error': 'Translation failed. Please try again.',
            'code': 'TRANSLATION_FAILED'
        }), 500


@translations_bp.route('/<message_id>', methods=['GET'])
@token_required
def get_translations(current_user_role, message_id):
    """Get cached translations for a message, newest first.
    
    Query params:
        - targetLanguage: Only return translations into this language
    """
    endpoint = 'GET /api/translations/:messageId'
    try:
        if not message_id.strip():
            return jsonify({
                'error': 'Message ID is required',
                'code': 'INVALID_REQUEST'
            }), 400
        
        target_language = request.args.get('targetLanguage')
        if target_language and not is_valid_language(target_language):
            return jsonify({
                'error': f"Target language must be one of: {', '.join(SUPPORTED_LANGUAGES)}",
                'code': 'INVALID_REQUEST'
            }), 400
        
        try:
            translations = list_cached_translations(message_id, target_language)
        except CacheError as e:
            log_error(e, {'endpoint': endpoint, 'message_id': message_id, 'user': current_user_role})
            return jsonify({
                'error': 'Failed to retrieve translations',
                'code': 'DATABASE_ERROR'
            }), 500
        
        return jsonify({
            'translations': [t.to_dict() for t in translations]
        }), 200
    except Exception as e:
        log_error(e, {'endpoint': endpoint, 'message_id': message_id, 'user': current_user_role})
        return jsonify({
            'error': 'Failed to retrieve translations. Please try again.',
            'code': 'TRANSLATION_FAILED'
        }), 500


@translations_bp.route('/preferences', methods=['POST'])
@token_required
def save_preference(current_user_role):
    """Save or update whether the caller sees the original of a message."""
    endpoint = 'POST /api/translations/preferences'
    data = _json_body()
    
    errors = validate_preference_request(data)
    if errors:
        # Report the first problem as the headline, like the other endpoints
        return jsonify({
            'error': next(iter(errors.values())),
            'code': 'INVALID_REQUEST',
            'details': errors
        }), 400
    
    try:
        preference = set_preference(
            current_user_role,
            data['messageId'],
            data['showOriginal'],
            data.get('targetLanguage')
        )
    except SQLAlchemyError as e:
        log_error(e, {
            'endpoint': endpoint,
            'message_id': data.get('messageId'),
            'operation': 'preference_upsert',
            'user': current_user_role
        })
        return jsonify({
            'error': 'Failed to save translation preference',
            'code': 'DATABASE_ERROR'
        }), 500
    except Exception as e:
        log_error(e, {
            'endpoint': endpoint,
            'message_id': data.get('messageId'),
            'user': current_user_role
        })
        return jsonify({
            'error': 'Failed to save translation preference. Please try again.',
            'code': 'PREFERENCE_SAVE_FAILED'
        }), 500
    
    return jsonify({
        'success': True,
        'preference': preference
    }), 200


@translations_bp.route('/preferences', methods=['GET'])
def preferences_method_not_allowed():
    """Keep GET /preferences from being read as a message ID."""
    response = jsonify({
        'error': 'Use GET /api/translations/preferences/<messageId> to read a preference',
        'code': 'METHOD_NOT_ALLOWED'
    })
    response.headers['Allow'] = 'POST'
    return response, 405


@translations_bp.route('/preferences/<message_id>', methods=['GET'])
@token_required
def read_preference(current_user_role, message_id):
    """Get the caller's display preference for a message."""
    try:
        return jsonify({
            'preference': get_preference(current_user_role, message_id)
        }), 200
    except Exception as e:
        log_error(e, {
            'endpoint': 'GET /api/translations/preferences/:messageId',
            'message_id': message_id,
            'user': current_user_role
        })
        return jsonify({
            'error': 'Failed to load translation preference',
            'code': 'DATABASE_ERROR'
        }), 500
