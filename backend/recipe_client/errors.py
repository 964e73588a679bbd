"""Error taxonomy for the recipe client and the status -> message tables."""
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NETWORK = "network"
    BAD_REQUEST = "bad_request"
    AUTH = "auth"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    SERVER = "server"
    UNKNOWN = "unknown"


class TransportError(Exception):
    """Raised by ApiClient. status is None when no response was received."""

    def __init__(self, status: Optional[int] = None, server_message: Optional[str] = None):
        super().__init__(server_message or (f"HTTP {status}" if status else "no response"))
        self.status = status
        self.server_message = server_message


class RecipeClientError(Exception):
    category = ErrorCategory.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class FormValidationError(RecipeClientError):
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, errors: Optional[dict] = None):
        super().__init__(message)
        self.errors = dict(errors or {})

class NetworkError(RecipeClientError):
    category = ErrorCategory.NETWORK

class BadRequestError(RecipeClientError):
    category = ErrorCategory.BAD_REQUEST

class AuthError(RecipeClientError):
    category = ErrorCategory.AUTH

class PayloadTooLargeError(RecipeClientError):
    category = ErrorCategory.PAYLOAD_TOO_LARGE

class ServerError(RecipeClientError):
    category = ErrorCategory.SERVER

class UnknownError(RecipeClientError):
    category = ErrorCategory.UNKNOWN


GENERATION_MESSAGES = {
    None: "Unable to connect to the recipe service. Please check your internet connection.",
    400: 'Please check your ingredients and try again. Try specific ingredients like "chicken, rice, tomatoes".',
    401: "Your session has expired. Please log in again to continue.",
    403: "This feature requires authentication. Please log in to generate recipes.",
    500: "The recipe service is temporarily unavailable. Please try again later.",
}
GENERATION_FALLBACK = "Error generating recipe. Please try again."

SUBMISSION_NETWORK = "Unable to connect to the server. Please check your internet connection."
SUBMISSION_AUTH = "Error saving recipe. This might be due to a permission issue."
SUBMISSION_TOO_LARGE = "The image you uploaded is too large. Please use an image smaller than 5MB."
SUBMISSION_FALLBACK = "An error occurred while saving the recipe"

DETAIL_LOAD_FAILED = "Failed to load recipe details. Please try again later."
DELETE_FAILED = "Failed to delete recipe. Please try again."


def _by_status(status: Optional[int]):
    if status is None:
        return NetworkError
    if status == 400:
        return BadRequestError
    if status in (401, 403):
        return AuthError
    if status == 413:
        return PayloadTooLargeError
    if status >= 500:
        return ServerError
    return UnknownError

def map_generation_error(e: TransportError) -> RecipeClientError:
    """One message per failed generate call; unlisted statuses pass the server message through."""
    cls = _by_status(e.status)
    message = GENERATION_MESSAGES.get(e.status) or e.server_message or GENERATION_FALLBACK
    return cls(message)

def map_submission_error(e: TransportError) -> RecipeClientError:
    cls = _by_status(e.status)
    if cls is AuthError:
        return cls(SUBMISSION_AUTH)
    if cls is NetworkError:
        return cls(SUBMISSION_NETWORK)
    if cls is PayloadTooLargeError:
        return cls(SUBMISSION_TOO_LARGE)
    return cls(e.server_message or SUBMISSION_FALLBACK)

def map_delete_error(e: TransportError) -> RecipeClientError:
    """Deleting shows one message whatever went wrong; the class still follows the status."""
    return _by_status(e.status)(DELETE_FAILED)
