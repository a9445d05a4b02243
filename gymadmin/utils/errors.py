import sqlite3
import traceback

from flask import jsonify, request
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base for errors that map straight onto an HTTP status."""
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(ApiError):
    status_code = 400
    default_message = 'Bad request'


class UnauthorizedError(ApiError):
    status_code = 401
    default_message = 'Unauthorized'


class ForbiddenError(ApiError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(ApiError):
    status_code = 404
    default_message = 'Resource not found'


class ConflictError(ApiError):
    status_code = 409
    default_message = 'Conflict'


class InternalServerError(ApiError):
    status_code = 500
    default_message = 'Internal server error'


def _integrity_status(error):
    """Map a sqlite IntegrityError onto (status, message)."""
    text = str(error).upper()
    if 'UNIQUE' in text:
        return 409, 'Resource already exists'
    if 'FOREIGN KEY' in text:
        return 400, 'Invalid foreign key reference'
    return 400, 'Database operation failed'


def register_error_handlers(app):
    """Funnel every error raised by a view into one JSON responder."""

    def _log(error, status):
        app.logger.error(
            "Error %s: %s | %s %s | ip=%s | ua=%s",
            status, error, request.method, request.url,
            request.remote_addr, request.headers.get('User-Agent'),
        )

    def _respond(status, message, error=None):
        body = {'success': False, 'message': message or 'Internal server error'}
        if error is not None and app.config.get('APP_ENV') != 'production':
            body['error'] = type(error).__name__
            body['stack'] = ''.join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        return jsonify(body), status

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        _log(error, error.status_code)
        if error.status_code >= 500:
            return _respond(error.status_code, error.message, error)
        return _respond(error.status_code, error.message)

    @app.errorhandler(sqlite3.IntegrityError)
    def handle_integrity_error(error):
        status, message = _integrity_status(error)
        _log(error, status)
        return _respond(status, message)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        _log(error, error.code)
        return _respond(error.code, error.description)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        app.logger.exception("Unhandled error on %s %s", request.method, request.url)
        return _respond(500, InternalServerError.default_message, error)
