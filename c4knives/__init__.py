"""C4 Knives storefront - Backend API.

The backend serves the public site (catalog, spotlight, testimonials, site
metadata, contact form) and a single-admin content-management API.

Core concepts:
- Exactly one administrator, created on first boot.
- Stateless JWT tokens sent in the `x-auth-token` header.
- Public reads, admin-only writes (contact messages are the inverse).
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
