"""
Actor resolution from proxy identity headers.

Authentication itself happens upstream (an OAuth2 proxy); the API only reads
the identity it forwards and exposes it as `request.state.user`.
"""
from typing import Any, Dict, Optional, Tuple


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if not email:
        return None
    return email.strip().lower() or None


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    user = x_auth_request_user or x_forwarded_user
    email = _normalize_email(x_auth_request_email or x_forwarded_email)
    return user, email


def resolve_actor(request) -> Optional[Dict[str, Any]]:
    """Attach the actor resolved from the request headers to `request.state.user`."""
    h = request.headers
    name, email = resolve_identity_from_headers(
        x_auth_request_user=h.get("x-auth-request-user"),
        x_auth_request_email=h.get("x-auth-request-email"),
        x_forwarded_user=h.get("x-forwarded-user"),
        x_forwarded_email=h.get("x-forwarded-email"),
    )
    actor = {"name": name or email.split("@")[0], "email": email} if email else None
    request.state.user = actor
    return actor
