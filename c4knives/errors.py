"""Expected API errors.

Each error carries the HTTP status it maps to and the short `msg` sent to the
client as `{"msg": ...}`. Anything that is not an `AppError` is an internal
failure and is rendered as a bare "Server Error" by the API layer.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 500
    default_msg: str = "Server Error"

    def __init__(self, msg: str | None = None):
        self.msg = msg or self.default_msg
        super().__init__(self.msg)


class ValidationError(AppError):
    """Missing or malformed required input."""

    status_code = 400
    default_msg = "Please enter all fields"


class InvalidCredentials(AppError):
    """Login failure. Unknown username and wrong password look the same."""

    status_code = 400
    default_msg = "Invalid credentials"


class Unauthenticated(AppError):
    """Missing, malformed, expired or wrongly signed token."""

    status_code = 401
    default_msg = "Token is not valid"


class NotFound(AppError):
    status_code = 404
    default_msg = "Not found"
