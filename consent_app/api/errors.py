"""Error handlers for the application."""
import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        return jsonify({"error": "Bad Request", "message": _description(error, "Invalid request")}), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        return jsonify({"error": "Not Found", "message": _description(error, "Resource not found")}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "Method Not Allowed", "message": "Method not allowed"}), 405

    @app.errorhandler(409)
    def conflict(error):
        """Handle 409 Conflict errors (duplicate consent submission)."""
        return jsonify({"error": "Conflict", "message": _description(error, "Conflict")}), 409

    @app.errorhandler(502)
    def bad_gateway(error):
        """Handle 502 Bad Gateway errors (consent service unavailable)."""
        return jsonify({"error": "Bad Gateway", "message": _description(error, "Consent service unavailable")}), 502

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        logger.error(f"Internal error: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        logger.error(f"Unhandled exception: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred"}), 500


def _description(error, default: str) -> str:
    description = getattr(error, "description", None)
    if not description or description == getattr(type(error), "description", None):
        return default
    return str(description)


def wants_json() -> bool:
    """Check if the client wants a JSON response."""
    if request.is_json:
        return True
    return request.accept_mimetypes.accept_json and \
           not request.accept_mimetypes.accept_html
