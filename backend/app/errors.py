from flask import jsonify
from werkzeug.exceptions import HTTPException


class GameError(Exception):
    """Base class for failures surfaced to API callers as ``{"error": ...}``."""
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(GameError):
    status_code = 400


class AuthorizationError(GameError):
    status_code = 403


class NotFoundError(GameError):
    status_code = 404


class ConflictError(GameError):
    """Wrong status for the operation, or another action is still pending."""
    status_code = 409


class InternalError(GameError):
    status_code = 500


def register_error_handlers(flask_app):
    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code
