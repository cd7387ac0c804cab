import traceback
import logging
from flask import jsonify, request, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from marshmallow import ValidationError
from flask_jwt_extended.exceptions import JWTExtendedException
from datetime import datetime

from restaurant_pos.errors import ServiceError, StorageFailure
from .utils import get_request_summary

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    """Global error handler middleware for consistent error responses"""

    def __init__(self, app):
        self.app = app
        self.register_error_handlers()

    def register_error_handlers(self):
        """Register all error handlers"""

        @self.app.errorhandler(Exception)
        def handle_generic_exception(e):
            """Handle all unhandled exceptions"""
            return self._handle_exception(
                e, 500, "Internal Server Error", "InternalError",
                message="An unexpected error occurred.")

        @self.app.errorhandler(ServiceError)
        def handle_service_error(e):
            """Handle failures reported by the service layer"""
            return self._handle_exception(e, e.status_code, e.category, e.kind)

        @self.app.errorhandler(HTTPException)
        def handle_http_exception(e):
            """Handle HTTP exceptions, including flask-smorest argument errors"""
            data = getattr(e, 'data', None) or {}
            if 'messages' in data:
                return self._handle_exception(
                    e, 400, "Validation", "ValidationError",
                    message="Invalid input. Please check your request.",
                    validation_errors=data['messages'])
            return self._handle_exception(
                e, e.code, e.name, e.name.replace(' ', ''), message=e.description)

        @self.app.errorhandler(SQLAlchemyError)
        def handle_sqlalchemy_error(e):
            """Handle database errors that escaped a transaction scope"""
            failure = StorageFailure()
            return self._handle_exception(
                e, failure.status_code, failure.category, failure.kind,
                message=failure.message)

        @self.app.errorhandler(ValidationError)
        def handle_validation_error(e):
            """Handle validation errors from marshmallow"""
            return self._handle_exception(
                e, 400, "Validation", "ValidationError",
                message="Invalid input. Please check your request.",
                validation_errors=e.messages)

        @self.app.errorhandler(JWTExtendedException)
        def handle_jwt_error(e):
            """Handle JWT errors without a dedicated loader"""
            return self._handle_exception(e, 401, "Unauthorized", "Unauthorized")

    def _handle_exception(self, exception, status_code, error_type, kind,
                          message=None, validation_errors=None):
        """Common exception handler"""

        error_response = {
            'error': {
                'kind': kind,
                'type': error_type,
                'message': message or str(exception),
                'status_code': status_code,
                'timestamp': datetime.utcnow().isoformat(),
                'path': request.path,
                'method': request.method
            }
        }

        if validation_errors is not None:
            error_response['error']['validation_errors'] = validation_errors

        # Log the error with different levels based on status code
        if status_code >= 500:
            logger.error(
                f"Server Error: {kind} - {str(exception)}",
                extra={
                    'request_info': get_request_summary(),
                    'exception': str(exception),
                    'traceback': traceback.format_exc()
                }
            )
        else:
            logger.warning(
                f"Client Error: {kind} - {str(exception)}",
                extra={
                    'request_info': get_request_summary(),
                    'exception': str(exception)
                }
            )

        # In development mode, include traceback
        if current_app.config.get('DEBUG', False) and status_code >= 500:
            error_response['error']['traceback'] = traceback.format_exc()

        return jsonify(error_response), status_code


def init_error_handler(app):
    """Initialize error handler middleware"""
    return ErrorHandlerMiddleware(app)
