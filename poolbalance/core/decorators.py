from functools import wraps
from flask import jsonify
import logging
import traceback

logger = logging.getLogger(__name__)


class AppError(Exception):
    """
    Calculation could not proceed. Carries the HTTP status the API answers
    with and an optional payload (e.g. the offending fields).
    """
    def __init__(self, message, code=400, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload


class ConfigurationError(AppError):
    """No standards / golden numbers / product entry for the requested selection"""
    def __init__(self, message, payload=None):
        super().__init__(message, code=404, payload=payload)


class InvalidInputError(AppError):
    """Required reading missing or unusable. Always one aggregate message."""
    MESSAGE = "Please fill in all required fields."

    def __init__(self, payload=None):
        super().__init__(self.MESSAGE, code=400, payload=payload)


def api_safe(f):
    """
    Wraps a calculator endpoint so it always answers JSON.

    AppError subclasses become {"status": "error"} with their own code and
    payload; no partial report is ever returned. Anything else is logged
    with its traceback and answered as a 500 {"status": "fatal"}.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except AppError as e:
            # Rejected selection or reading
            logger.warning(f"{type(e).__name__} in {f.__name__} ({e.code}): {e.message} {e.payload or ''}".rstrip())
            return jsonify({
                "status": "error",
                "code": e.code,
                "message": e.message,
                "data": e.payload
            }), e.code
        except Exception as e:
            # Calculator bug
            trace = traceback.format_exc()
            logger.error(f"Calculation failed in {f.__name__}: {e}\n{trace}")
            return jsonify({
                "status": "fatal",
                "code": 500,
                "message": "Internal calculation error",
                "debug_error": str(e)
            }), 500
    return decorated_function
