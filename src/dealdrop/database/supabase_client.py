"""
Acceso a Supabase para lectura de propiedades.

Se usa un único cliente por proceso. Con la service key se leen también
propiedades inactivas; con la anon key aplican las políticas RLS.
"""

from functools import lru_cache

import structlog
from supabase import create_client, Client

from dealdrop.config import Settings, get_settings

logger = structlog.get_logger()


class SupabaseClient:
    """Cliente de solo lectura."""

    def __init__(self, client: Client, role: str = "anon"):
        self._client = client
        self.role = role

    @property
    def client(self) -> Client:
        return self._client

    def select(self, table: str, columns: str = "*"):
        """Query builder de `SELECT columns FROM table`, listo para encadenar filtros."""
        return self._client.table(table).select(columns)


def _resolve_key(settings: Settings) -> tuple[str, str]:
    if settings.supabase_service_key:
        return settings.supabase_service_key, "service"
    return settings.supabase_key, "anon"


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """
    Cliente compartido del proceso.

    Raises:
        ValueError: Si falta SUPABASE_URL o no hay ninguna key
    """
    settings = get_settings()

    if not settings.supabase_url or not (settings.supabase_key or settings.supabase_service_key):
        raise ValueError(
            "SUPABASE_URL y SUPABASE_KEY (o SUPABASE_SERVICE_KEY) son requeridos. "
            "Configura las variables de entorno."
        )

    key, role = _resolve_key(settings)
    client = SupabaseClient(create_client(settings.supabase_url, key), role=role)
    logger.info("Cliente de Supabase inicializado", url=settings.supabase_url, role=role)
    return client
