"""
Repositorios de solo lectura sobre Supabase.

La difusión nunca consulta la base directamente: los scripts y el
preview server cargan las propiedades acá y se las pasan a los renderers.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from dealdrop.database.supabase_client import get_supabase_client, SupabaseClient
from dealdrop.models import PropertyRecord

logger = structlog.get_logger()


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client


class PropertyRepository(BaseRepository):
    """Repositorio para la tabla 'properties'."""

    TABLE = "properties"

    def _to_records(self, rows: list[dict]) -> list[PropertyRecord]:
        """Convierte filas a PropertyRecord descartando las inválidas."""
        records = []
        for row in rows:
            try:
                records.append(PropertyRecord.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "Propiedad inválida descartada",
                    property_id=row.get("id"),
                    error=str(e),
                )
        return records

    def get_by_id(self, property_id: str) -> Optional[PropertyRecord]:
        """Obtiene una propiedad por su UUID."""
        response = (
            self.client.select(self.TABLE)
            .eq("id", property_id)
            .limit(1)
            .execute()
        )
        records = self._to_records(response.data or [])
        return records[0] if records else None

    def get_many(self, property_ids: list[str]) -> list[PropertyRecord]:
        """
        Obtiene varias propiedades respetando el orden de los IDs pedidos.

        Los IDs inexistentes se omiten.
        """
        if not property_ids:
            return []

        response = (
            self.client.select(self.TABLE)
            .in_("id", property_ids)
            .execute()
        )
        by_id = {r.id: r for r in self._to_records(response.data or [])}

        missing = [pid for pid in property_ids if pid not in by_id]
        if missing:
            logger.warning("Propiedades no encontradas", ids=missing)

        return [by_id[pid] for pid in property_ids if pid in by_id]

    def list_active(self, limit: int = 500) -> list[PropertyRecord]:
        """Propiedades activas, más recientes primero."""
        response = (
            self.client.select(self.TABLE)
            .eq("is_active", True)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        records = self._to_records(response.data or [])
        logger.info("Propiedades activas cargadas", count=len(records))
        return records
