"""Admin authentication.

This project intentionally keeps auth minimal:

- One admin row (username/password hash), created on first boot
- Stateless JWT access tokens valid for 24 hours

Clients send the token in the `x-auth-token` header. `Authorization: Bearer`
is accepted too, which is handy for curl and scripts.
"""

from .deps import AUTH_HEADER, require_admin
from .crud import bootstrap_admin_if_needed, public_admin
from .tokens import issue_token, verify_token

__all__ = [
    "AUTH_HEADER",
    "require_admin",
    "bootstrap_admin_if_needed",
    "public_admin",
    "issue_token",
    "verify_token",
]
