"""
Configuración de dealdrop.

Todo sale de variables de entorno (o del .env en la raíz del proyecto);
los defaults alcanzan para formatear mensajes sin base de datos.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py -> dealdrop/ -> src/ -> raíz del proyecto (donde está el .env)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Settings de marca, sitio, Supabase y render."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Sitio público
    site_url: str = Field(
        "https://norkwholesale.com",
        description="Origen público usado en los links de propiedades",
    )
    spa_origin: str = Field(
        "https://norkwholesale.netlify.app",
        description="Origen que sirve la SPA a visitantes humanos del preview server",
    )

    # Marca
    brand_name: str = Field("Nork Group", description="Nombre comercial")
    brand_slug: str = Field("nork", description="Prefijo de los archivos generados")
    brand_phone: str = Field("786-369-6335", description="Teléfono de contacto")
    brand_website: str = Field("NorkGroupLLC.com", description="Sitio de contacto")
    logo_path: Optional[Path] = Field(
        _PROJECT_ROOT / "assets" / "nork-logo.png",
        description="Logo usado en el header del flyer (opcional)",
    )

    # Supabase
    supabase_url: Optional[str] = Field(None, description="URL del proyecto Supabase")
    supabase_key: Optional[str] = Field(None, description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key (lee también propiedades inactivas)"
    )

    # Mensajería
    message_soft_limit: int = Field(
        4096, gt=0, description="Límite blando de caracteres de WhatsApp"
    )
    truncate_max_chars: int = Field(
        4000, gt=0, description="Corte por defecto al truncar mensajes"
    )

    # Render
    collage_quality: float = Field(
        0.9, gt=0.0, le=1.0, description="Calidad JPEG del collage (0-1)"
    )
    image_timeout_seconds: float = Field(
        10.0, gt=0.0, description="Timeout por imagen descargada (segundos)"
    )
    flyer_output_dir: Path = Field(
        Path("."), description="Directorio donde se guardan los flyers"
    )

    # Preview server (Open Graph para crawlers)
    og_listen: str = Field("0.0.0.0", description="Host de escucha del preview server")
    og_port: int = Field(8080, description="Puerto del preview server")

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Settings del proceso (se leen una sola vez)."""
    return Settings()


# Constantes del sistema
WHATSAPP_BASE_URL = "https://wa.me"

BRAND_GREEN = "#7CB342"
DARK_BG = "#1a1a1a"
DARK_TEXT = "#1a1a1a"
LIGHT_TEXT = "#666666"

STATUS_COLORS = {
    "available": "#22c55e",
    "pending": "#f59e0b",
    "under contract": "#f59e0b",
}
STATUS_FALLBACK_COLOR = "#ef4444"
