"""Caller identity as asserted by the upstream gateway.

The gateway authenticates the request and forwards the caller in the
``X-User-Id`` and ``X-User-Role`` headers. Nothing here checks credentials.
"""

from dataclasses import dataclass

from fastapi import Depends, Header

from ordering.errors import Forbidden

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    role: str = "customer"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def auth_context(
    x_user_id: str = Header(default=""),
    x_user_role: str = Header(default="customer"),
) -> AuthContext:
    user_id = x_user_id.strip()
    if not user_id:
        raise Forbidden("Missing caller identity")
    return AuthContext(user_id=user_id, role=x_user_role.strip().lower() or "customer")


def admin_context(auth: AuthContext = Depends(auth_context)) -> AuthContext:
    if not auth.is_admin:
        raise Forbidden("Admin role required", user_id=auth.user_id, role=auth.role)
    return auth
