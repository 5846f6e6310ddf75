# khanya/utils/http.py
import logging

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

from ..errors import KhanyaError, ValidationError

logger = logging.getLogger(__name__)


def json_body() -> dict:
    """JSON body of the current request; anything that is not an object is rejected."""
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            raise ValidationError("Invalid JSON body")
        return {}
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object")
    return data


def register_error_handlers(app):
    @app.errorhandler(KhanyaError)
    def _khanya_error(exc: KhanyaError):
        if exc.status_code >= 500:
            logger.error(f"{request.path} failed: {exc.message}")
        else:
            logger.info(f"{request.path} rejected ({exc.status_code}): {exc.message}")
        return jsonify({"success": False, "error": exc.message}), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return jsonify({"success": False, "error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception(f"Unhandled error in {request.path}")
        return jsonify({"success": False, "error": "Internal server error"}), 500
