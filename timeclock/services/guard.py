from __future__ import annotations

from typing import Protocol

LOGIN_ROUTE = "/"
ADMIN_ROUTE = "/admin"
HOME_ROUTE = "/(tabs)"


class AuthState(Protocol):
    @property
    def is_authenticated(self) -> bool: ...

    @property
    def is_admin(self) -> bool: ...


def landing_route(auth: AuthState) -> str:
    """Where navigation should send the user for the current auth state."""
    if not auth.is_authenticated:
        return LOGIN_ROUTE
    return ADMIN_ROUTE if auth.is_admin else HOME_ROUTE


def needs_redirect(auth: AuthState, route: str) -> str | None:
    """Return the route to redirect to, or None when ``route`` is allowed."""
    target = landing_route(auth)
    if not auth.is_authenticated:
        return None if route == LOGIN_ROUTE else target
    if route == LOGIN_ROUTE:
        return target
    if route == ADMIN_ROUTE and not auth.is_admin:
        return target
    return None
