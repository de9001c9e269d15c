# app/main.py
# Archivo principal para iniciar la aplicación FastAPI
# Uso:  python3 -m uvicorn app.main:create_app --factory --reload
#   o:  gemini-relay  (usa PORT, por defecto 3000)
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import router as api_router
from app.chat import INVALID_QUESTION_MESSAGE, ChatHandler
from app.config import Settings, get_settings
from app.middleware import BodySizeLimitMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware
from app.services.gemini import GeminiClient

logger = logging.getLogger(__name__)

INDEX_CSP = "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'"


def setup_logging(settings: Settings):
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


# ---- MANEJADORES DE ERRORES ----
async def http_exception_handler(request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request, exc: RequestValidationError):
    logger.warning(f"Request inválido en {request.url.path}: {[e.get('type') for e in exc.errors()]}")
    return JSONResponse(status_code=400, content={"error": INVALID_QUESTION_MESSAGE})


def create_app(settings: Optional[Settings] = None, client: Optional[GeminiClient] = None) -> FastAPI:
    """
    Arma la aplicación: middlewares, rutas de la API y archivos estáticos.

    Args:
        settings (Settings, optional): Configuración; por defecto se lee del entorno
        client (GeminiClient, optional): Cliente de Gemini (se reemplaza en tests)
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Gemini Chat Relay",
        description="Chat web que reenvía preguntas a la API de Gemini",
        version="1.0.0",
    )
    app.state.settings = settings
    app.state.chat_handler = ChatHandler(settings, client)

    # Limitador de tasa por IP; RateLimitMiddleware usa su almacenamiento
    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # El último middleware agregado es el más externo
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Cuenta todo request, incluidos estáticos y preflight, antes de CORS
    app.add_middleware(RateLimitMiddleware, limiter=limiter, limit_value=settings.rate_limit)
    app.add_middleware(SecurityHeadersMiddleware)

    # Montar las rutas de la API
    app.include_router(api_router, prefix="/api")
    logger.info("Rutas del chat cargadas")

    index_path = settings.public_dir / "index.html"

    @app.get("/", include_in_schema=False)
    def index():
        return FileResponse(index_path, headers={"Content-Security-Policy": INDEX_CSP})

    app.mount("/", StaticFiles(directory=settings.public_dir), name="public")

    if not settings.is_configured:
        logger.warning("GEMINI_API_KEY o GEMINI_API_URL no configurados; /api/ask responderá 500")

    return app


def run():
    settings = get_settings()
    logger.info(f"Servidor corriendo en el puerto {settings.port}")
    # La app se arma al arrancar, no al importar el módulo
    uvicorn.run("app.main:create_app", factory=True, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
