"""
Client route table and resolution.

Every known path except the public auth pages needs a session; anything
unknown lands on the dashboard (or the login page without one).
"""

from typing import Dict, List, Optional

DEFAULT_PATH = "/dashboard"
LOGIN_PATH = "/login"

PUBLIC_ROUTES = ("/login", "/signup")
PROTECTED_ROUTES = (
    "/dashboard",
    "/to-do",
    "/agents",
    "/goals",
    "/market",
    "/contacts",
    "/settings",
    "/goal-planner",
    "/content-studio",
    "/role-play",
    "/personaladvisor",
    "/onboarding",
)


def route_table() -> List[Dict[str, object]]:
    return [{"path": p, "requires_session": False} for p in PUBLIC_ROUTES] + \
        [{"path": p, "requires_session": True} for p in PROTECTED_ROUTES]


def normalize_path(path: Optional[str]) -> str:
    path = (path or "").split("?", 1)[0].split("#", 1)[0].strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path.lower()


def resolve_route(path: Optional[str], has_session: bool) -> Dict[str, Optional[str]]:
    """Where a navigation to `path` ends up: {"path": final path, "redirect": set when it moved}."""
    requested = normalize_path(path)
    if requested in PUBLIC_ROUTES:
        target = requested
    elif requested in PROTECTED_ROUTES:
        target = requested if has_session else LOGIN_PATH
    else:
        target = DEFAULT_PATH if has_session else LOGIN_PATH
    return {"path": target, "redirect": target if target != requested else None}
