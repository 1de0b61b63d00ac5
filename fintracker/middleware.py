# fintracker/middleware.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .config import Settings
from .logging_utils import get_logger

LOGGER = get_logger(__name__)

HEALTH_PATH = "/health"


def https_url(request: Request) -> str:
    host = request.headers.get("host") or request.url.netloc
    # raw_path keeps percent-encoding (%2F stays %2F)
    raw_path = request.scope.get("raw_path")
    path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else request.url.path
    url = f"https://{host}{path}"
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


class ForwardedHttpsRedirectMiddleware(BaseHTTPMiddleware):
    """Redirect to https when the proxy says the client came in over plain http.

    Trusts ``X-Forwarded-Proto`` as set by the platform's load balancer; a
    request without the header counts as plain http.
    """

    def __init__(self, app, exempt_paths=(HEALTH_PATH,)):
        super().__init__(app)
        self.exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next):
        proto = request.headers.get("x-forwarded-proto", "")
        if proto.lower() != "https" and request.url.path not in self.exempt_paths:
            target = https_url(request)
            LOGGER.debug("Redirecting %s -> %s", request.url, target)
            return RedirectResponse(url=target, status_code=302)
        return await call_next(request)


def install_middleware(app: FastAPI, settings: Settings) -> None:
    # added last runs first: CORS wraps the redirect, so preflights are answered directly
    if settings.is_production:
        app.add_middleware(ForwardedHttpsRedirectMiddleware)
        LOGGER.info("HTTPS redirect enabled")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
