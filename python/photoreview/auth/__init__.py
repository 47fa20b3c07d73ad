"""Authentication and authorization module.

This module provides:
- Token verification (HS256 JWT verifier)
- Auth middleware for FastAPI
- Request state with viewer identity
- Membership predicates (permissions)
"""

from photoreview.auth.middleware import AuthMiddleware, Viewer, get_viewer
from photoreview.auth.permissions import is_project_member, is_project_owner, membership_join
from photoreview.auth.verifier import JwtVerifier, TokenVerifier

__all__ = [
    "AuthMiddleware",
    "Viewer",
    "get_viewer",
    "JwtVerifier",
    "TokenVerifier",
    "is_project_member",
    "is_project_owner",
    "membership_join",
]
