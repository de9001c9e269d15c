# app/config.py
# Configuración del relay leída desde variables de entorno (.env)
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

PRODUCTION_ORIGINS = ["https://yourdomain.com"]
DEVELOPMENT_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def is_https_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme == "https" and bool(parsed.hostname)


@dataclass
class Settings:
    """
    Configuración del proceso. Se construye una sola vez al arrancar y se
    inyecta en la app; ningún handler lee el entorno directamente.
    """
    gemini_api_key: Optional[str] = None
    gemini_api_url: Optional[str] = None
    port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = "app.log"
    public_dir: Path = BASE_DIR / "public"
    rate_limit: str = "100 per 15 minutes"
    max_body_bytes: int = 10 * 1024 * 1024
    cors_origins: List[str] = field(default_factory=list)

    def __post_init__(self):
        # Una URL inválida impide arrancar el servidor
        if self.gemini_api_url and not is_https_url(self.gemini_api_url):
            raise ValueError("GEMINI_API_URL deve ser uma URL HTTPS válida")
        if not self.cors_origins:
            self.cors_origins = list(
                PRODUCTION_ORIGINS if self.is_production else DEVELOPMENT_ORIGINS
            )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def is_configured(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_api_url)


def load_settings() -> Settings:
    """Construye Settings a partir del entorno actual."""
    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_api_url=os.getenv("GEMINI_API_URL") or None,
        port=int(os.getenv("PORT", "3000")),
        app_env=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE", "app.log") or None,
        public_dir=Path(os.getenv("PUBLIC_DIR", str(BASE_DIR / "public"))),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
