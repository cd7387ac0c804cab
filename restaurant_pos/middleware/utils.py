import time
import functools
from flask import g, has_request_context, request
from .logging_config import get_logger

logger = get_logger(__name__)

SENSITIVE_KEYS = {
    'password', 'token', 'secret', 'authorization', 'auth', 'credential',
    'api_key', 'access_token', 'refresh_token', 'jwt', 'session', 'cookie'
}


def _request_id():
    return getattr(g, 'request_id', None) if has_request_context() else None


def log_function_call(func):
    """Decorator to log function calls with timing"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        name = f"{func.__module__}.{func.__name__}"

        logger.debug(
            f"Function called: {name}",
            extra={
                'event': 'function_entry',
                'function': name,
                'request_id': _request_id()
            }
        )

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            execution_time = time.time() - start_time
            logger.error(
                f"Function failed: {name} after {execution_time:.3f}s",
                extra={
                    'event': 'function_error',
                    'function': name,
                    'execution_time': execution_time,
                    'exception': str(e),
                    'request_id': _request_id()
                }
            )
            raise

        execution_time = time.time() - start_time
        logger.debug(
            f"Function completed: {name} in {execution_time:.3f}s",
            extra={
                'event': 'function_exit',
                'function': name,
                'execution_time': execution_time,
                'request_id': _request_id()
            }
        )
        return result

    return wrapper


def get_request_summary():
    """Get a summary of the current request for logging"""
    if not has_request_context():
        return None

    return {
        'method': request.method,
        'url': request.url,
        'path': request.path,
        'endpoint': request.endpoint,
        'remote_addr': request.remote_addr,
        'user_agent': request.headers.get('User-Agent'),
        'request_id': _request_id()
    }


def sanitize_data(data, sensitive_keys=None):
    """Sanitize data by removing sensitive information"""
    if sensitive_keys is None:
        sensitive_keys = SENSITIVE_KEYS

    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        key_lower = str(key).lower()
        if any(sensitive in key_lower for sensitive in sensitive_keys):
            sanitized[key] = '***REDACTED***'
        elif isinstance(value, dict):
            sanitized[key] = sanitize_data(value, sensitive_keys)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_data(item, sensitive_keys) if isinstance(
                    item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized
