# src/marketplace/middleware.py

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response


def _extract_bearer_token(request: Request) -> None:
    """Place a `Authorization: Bearer <jwt>` token in request.state. Never touches the database."""
    header = request.headers.get("Authorization")
    if not header:
        return
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        setattr(request.state, "token", token.strip())


class AuthenticationMiddleware(BaseHTTPMiddleware):
    AUTH_EXTRACTORS = [
        _extract_bearer_token,
    ]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # reset per request
        setattr(request.state, "token", None)

        for extractor in self.AUTH_EXTRACTORS:
            extractor(request)

        return await call_next(request)
