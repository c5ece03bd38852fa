"""Route gating by presence of the session credential.

The guard never validates the credential; it only checks that one was
sent. Validation belongs to the identity provider.
"""

from enum import Enum

PROTECTED_PREFIX = "/dashboard"
AUTH_PAGE_PREFIXES = ("/login", "/register")

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"


class GuardDecision(Enum):
    """What to do with a request before rendering."""

    PASS = "pass"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_DASHBOARD = "redirect_dashboard"


def is_guarded(path: str) -> bool:
    """True for /dashboard, anything below it, and the auth pages."""
    trimmed = path.rstrip("/") or "/"
    if trimmed == PROTECTED_PREFIX or path.startswith(PROTECTED_PREFIX + "/"):
        return True
    return trimmed in AUTH_PAGE_PREFIXES


def decide(path: str, has_credential: bool) -> GuardDecision:
    """Decide from the request path and whether a credential cookie is present."""
    if not is_guarded(path):
        return GuardDecision.PASS
    if path.startswith(AUTH_PAGE_PREFIXES) and has_credential:
        return GuardDecision.REDIRECT_DASHBOARD
    if path.startswith(PROTECTED_PREFIX) and not has_credential:
        return GuardDecision.REDIRECT_LOGIN
    return GuardDecision.PASS
