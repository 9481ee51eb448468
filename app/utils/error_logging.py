"""Structured error logging shared by the translation routes."""

import logging
from datetime import datetime

logger = logging.getLogger('app.translation')


def log_error(error: Exception, context: dict):
    """
    Log an error together with the request context it happened in.
    
    Args:
        error: The exception (or tagged error) being reported
        context: Keys such as endpoint, message_id, operation, user
    
    Usage:
        log_error(e, {
            'endpoint': 'POST /api/translations',
            'message_id': message_id,
            'operation': 'cache_lookup',
            'user': current_user_role
        })
    """
    record = {
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'error': {
            'name': type(error).__name__,
            'message': str(error),
            'kind': getattr(error, 'kind', None),
        },
        'context': {k: v for k, v in context.items() if v is not None},
    }
    logger.error(f"[Translation Error] {record}", extra={'translation_error': record})
    return record
