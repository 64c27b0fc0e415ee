"""Admin gate — rejects unauthenticated requests to the admin API prefixes."""


from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from internhub.routers.v1.auth import ADMIN_ROLE

PROTECTED_PREFIXES: tuple[str, ...] = (
    "/api/v1/offers",
    "/api/v1/candidates",
    "/api/v1/interns",
    "/api/v1/audit-logs",
    "/api/v1/domain-preferences",
    "/api/v1/dashboard",
    "/api/v1/sync",
)


def is_protected(path: str) -> bool:
    return any(path == p or path.startswith(p + "/") for p in PROTECTED_PREFIXES)


class AdminSessionMiddleware(BaseHTTPMiddleware):
    """Requires ``session["role"] == "admin"`` on every protected path.

    Must sit inside Starlette's SessionMiddleware so ``request.session`` is
    already decoded from the signed cookie.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method != "OPTIONS" and is_protected(request.url.path):
            if request.session.get("role") != ADMIN_ROLE:
                return JSONResponse(
                    status_code=401,
                    content={"error": {"code": "UNAUTHORIZED", "message": "Authentication required"}},
                )
        return await call_next(request)
