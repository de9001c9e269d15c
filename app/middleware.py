"""
Middlewares HTTP: headers de seguridad, límite de tasa y límite de tamaño del cuerpo
"""
import logging

from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

BODY_TOO_LARGE_MESSAGE = "Corpo da requisição muito grande."
RATE_LIMIT_MESSAGE = "Muitas requisições, tente novamente em 15 minutos."

DEFAULT_CSP = (
    "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
    "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
    "object-src 'none';script-src 'self';script-src-attr 'none';"
    "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
)

SECURITY_HEADERS = {
    "Content-Security-Policy": DEFAULT_CSP,
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Agrega los headers de seguridad sin pisar los que ya puso la ruta"""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            if name not in response.headers:
                response.headers[name] = value
        return response


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, max_body_bytes: int):
        super().__init__(app)
        self.max_body_bytes = max_body_bytes

    async def dispatch(self, request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_body_bytes:
            logger.warning(f"Cuerpo rechazado: {content_length} bytes (máximo {self.max_body_bytes})")
            return JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE_MESSAGE})
        return await call_next(request)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Cuenta todos los requests por IP (API, index, estáticos y 404) antes de
    resolver la ruta, usando el almacenamiento del Limiter de slowapi.
    """

    def __init__(self, app, limiter: Limiter, limit_value: str):
        super().__init__(app)
        self.limiter = limiter
        self.limit = parse(limit_value)

    async def dispatch(self, request, call_next):
        client_ip = get_remote_address(request)
        if not self.limiter.limiter.hit(self.limit, "global", client_ip):
            logger.warning(f"Límite de requests excedido para {client_ip}: {self.limit}")
            return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})
        return await call_next(request)
