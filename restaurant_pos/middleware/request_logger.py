import logging
import time
from flask import request, g, current_app
from datetime import datetime
import uuid

from .utils import sanitize_data

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = {
    'authorization', 'cookie', 'x-api-key', 'x-auth-token',
    'x-access-token', 'x-refresh-token'
}


def _request_id_from(header):
    """Echo a client request id only when it is a well-formed UUID."""
    if header:
        try:
            return str(uuid.UUID(header))
        except ValueError:
            logger.warning("Ignoring malformed X-Request-ID header", extra={'event': 'request_id_rejected'})
    return str(uuid.uuid4())


class RequestLoggerMiddleware:
    """Middleware for logging request and response details"""

    def __init__(self, app):
        self.app = app
        self.register_middleware()

    def register_middleware(self):
        """Register the middleware functions"""

        @self.app.before_request
        def before_request():
            """Log request details before processing"""
            g.request_id = _request_id_from(request.headers.get('X-Request-ID'))
            g.start_time = time.time()

            logger.info(
                f"Request Started - ID: {g.request_id}",
                extra={
                    'request_id': g.request_id,
                    'event': 'request_started',
                    'request_data': self._get_request_data()
                }
            )

        @self.app.after_request
        def after_request(response):
            """Log response details after processing"""
            request_id = getattr(g, 'request_id', None) or str(uuid.uuid4())
            processing_time = time.time() - getattr(g, 'start_time', time.time())

            logger.log(
                self._get_log_level(response.status_code),
                f"Request Completed - ID: {request_id} - Status: {response.status_code} - Time: {processing_time:.3f}s",
                extra={
                    'request_id': request_id,
                    'event': 'request_completed',
                    'processing_time': processing_time,
                    'response_data': self._get_response_data(response)
                }
            )

            response.headers['X-Request-ID'] = request_id
            response.headers['X-Processing-Time'] = f"{processing_time:.3f}s"

            return response

    def _get_request_data(self):
        """Extract relevant request data for logging"""
        request_data = {
            'method': request.method,
            'url': request.url,
            'path': request.path,
            'endpoint': request.endpoint,
            'remote_addr': request.remote_addr,
            'user_agent': request.headers.get('User-Agent'),
            'timestamp': datetime.utcnow().isoformat()
        }

        if request.args:
            request_data['query_params'] = sanitize_data(dict(request.args))

        if request.is_json:
            body = request.get_json(silent=True)
            request_data['body'] = sanitize_data(body) if body is not None else 'Invalid JSON'

        request_data['headers'] = self._filter_sensitive_headers(dict(request.headers))
        return request_data

    def _get_response_data(self, response):
        """Extract relevant response data for logging"""
        response_data = {
            'status_code': response.status_code,
            'content_type': response.content_type,
            'content_length': response.content_length,
            'timestamp': datetime.utcnow().isoformat()
        }

        # Bodies are only kept for failures, or everything in debug mode
        if (response.status_code >= 400 or
                current_app.config.get('DEBUG', False)):
            if response.is_json:
                response_data['body'] = sanitize_data(response.get_json(silent=True))
            else:
                response_data['body'] = response.get_data(as_text=True)[:1000]

        return response_data

    def _filter_sensitive_headers(self, headers):
        return {
            key: '***REDACTED***' if key.lower() in SENSITIVE_HEADERS else value
            for key, value in headers.items()
        }

    def _get_log_level(self, status_code):
        """Determine log level based on status code"""
        if status_code >= 500:
            return logging.ERROR
        elif status_code >= 400:
            return logging.WARNING
        else:
            return logging.INFO


def init_request_logger(app):
    """Initialize request logger middleware"""
    return RequestLoggerMiddleware(app)
