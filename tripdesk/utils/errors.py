"""
API error taxonomy

Every error that reaches a client is rendered as `{"error": message}` with
the status code carried by the exception.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class APIError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(APIError):
    """No bearer token on the request."""
    status_code = 401
    default_message = "Unauthorized"


class InvalidToken(APIError):
    """Token present but the auth provider could not resolve it."""
    status_code = 401
    default_message = "Invalid token"


class Forbidden(APIError):
    status_code = 403
    default_message = "Forbidden"


class BadRequest(APIError):
    status_code = 400
    default_message = "Bad request"


class AlreadyRefunded(APIError):
    status_code = 400
    default_message = "Transaction already refunded"


class NotFound(APIError):
    status_code = 404
    default_message = "Not found"


class StoreError(APIError):
    """Data-layer failure; the store's message goes back to the caller as-is."""
    status_code = 500
    default_message = "Store error"


class InternalError(APIError):
    status_code = 500


@contextmanager
def handler_boundary(name: str):
    """
    Convert anything unexpected raised by a handler body into an APIError.

    APIErrors pass through untouched.
    """
    try:
        yield
    except APIError:
        raise
    except SQLAlchemyError as e:
        logger.error(f"{name} store error: {e}")
        raise StoreError(str(e)) from e
    except Exception as e:
        logger.exception(f"{name} error")
        raise InternalError(str(e)) from e


def format_validation_errors(errors) -> str:
    """pydantic error list -> "field: message; ..." with the `body` prefix dropped"""
    problems = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(problems) or "Invalid request"
