"""
Módulo de base de datos.

Provee acceso de solo lectura a las propiedades en Supabase.
"""

from dealdrop.database.supabase_client import get_supabase_client, SupabaseClient
from dealdrop.database.repositories import PropertyRepository

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "PropertyRepository",
]
