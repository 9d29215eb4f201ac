# core/errors.py

from fastapi import HTTPException

from core.logging_config import logger
from core.messages import msg


def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors (APIError carries .message)
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: Supabase Auth / PostgREST errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or error.__class__.__name__


# ============================================================
# Error taxonomy
# ============================================================
# Every class is an HTTPException so FastAPI renders it through
# the handler registered in main.py. `detail` is always the
# user-facing (Hebrew) message; internal detail is logged only.

class AppError(HTTPException):
    status_code = 500
    message_key = "internal_error"

    def __init__(self, message_key: str = None, detail: str = None):
        key = message_key or self.message_key
        super().__init__(status_code=self.status_code, detail=detail or msg(key))
        self.message_key = key


class AuthenticationRequired(AppError):
    status_code = 401
    message_key = "unauthorized"


class AuthorizationDenied(AppError):
    status_code = 403
    message_key = "forbidden"


class ValidationError(AppError):
    status_code = 400
    message_key = "invalid_request"


class ConflictError(AppError):
    status_code = 400
    message_key = "invalid_request"


class NotFoundError(AppError):
    status_code = 404
    message_key = "lookup_failed"


class UpstreamFailure(AppError):
    status_code = 500
    message_key = "lookup_failed"


class ConfigurationError(AppError):
    status_code = 500
    message_key = "config_missing"


def upstream_failure(error: Exception, operation: str, message_key: str = "lookup_failed") -> UpstreamFailure:
    """
    Log the Supabase error detail and return (not raise) an
    UpstreamFailure carrying only the user-facing message.
    """
    logger.error(f"{operation}: {extract_supabase_error(error)}")
    return UpstreamFailure(message_key)
