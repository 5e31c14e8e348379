"""
Filtros y selección de propiedades para una difusión.

La selección vive solo en memoria: se crea cuando el operador elige
propiedades y se descarta al limpiarla.
"""

from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from dealdrop.models import PropertyRecord, PropertyType

# Rangos de precio rápidos del panel de difusión
PRICE_RANGES = [
    ("Any", None, None),
    ("Under $100K", None, 100_000),
    ("$100K - $200K", 100_000, 200_000),
    ("$200K - $300K", 200_000, 300_000),
    ("$300K+", 300_000, None),
]


def price_range(label: str) -> tuple[Optional[float], Optional[float]]:
    """Límites (mínimo, máximo) de un rango rápido por su etiqueta."""
    for name, low, high in PRICE_RANGES:
        if name == label:
            return low, high
    raise ValueError(f"Unknown price range: {label}")


class BroadcastFilters(BaseModel):
    """Filtros del panel de difusión. Un campo vacío no filtra."""

    min_price: Optional[float] = Field(None, ge=0, description="Precio mínimo")
    max_price: Optional[float] = Field(None, ge=0, description="Precio máximo")
    city: str = Field(default="", description="Ciudad exacta")
    county: str = Field(default="", description="Condado exacto")
    property_types: list[PropertyType] = Field(default_factory=list)
    status: str = Field(default="", description="Estado exacto")
    address_search: str = Field(default="", description="Texto libre sobre la dirección")

    def matches(self, prop: PropertyRecord) -> bool:
        """True si la propiedad pasa todos los filtros activos."""
        if self.min_price is not None and prop.asking_price < self.min_price:
            return False
        if self.max_price is not None and prop.asking_price > self.max_price:
            return False
        if self.city and prop.city != self.city:
            return False
        if self.county and prop.county != self.county:
            return False
        if self.property_types:
            wanted = {PropertyType(t).value for t in self.property_types}
            if prop.property_type not in wanted:
                return False
        if self.status and (prop.status or "").lower() != self.status.lower():
            return False
        if self.address_search:
            haystack = f"{prop.full_address} {prop.county}".lower()
            if self.address_search.strip().lower() not in haystack:
                return False
        return True

    def apply(self, properties: Iterable[PropertyRecord]) -> list[PropertyRecord]:
        return [p for p in properties if self.matches(p)]


def available_cities(properties: Iterable[PropertyRecord]) -> list[str]:
    """Ciudades únicas ordenadas, sin vacíos."""
    return sorted({p.city for p in properties if p.city})


def available_counties(properties: Iterable[PropertyRecord]) -> list[str]:
    """Condados únicos ordenados, sin vacíos."""
    return sorted({p.county for p in properties if p.county})


class BroadcastSelection:
    """Conjunto ordenado de IDs elegidos por el operador."""

    def __init__(self, ids: Optional[Iterable[str]] = None):
        self._ids: list[str] = []
        for property_id in ids or []:
            self.add(property_id)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, property_id: str) -> bool:
        return property_id in self._ids

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def add(self, property_id: str):
        if property_id not in self._ids:
            self._ids.append(property_id)

    def toggle(self, property_id: str) -> bool:
        """Agrega o quita un ID. Devuelve True si quedó seleccionado."""
        if property_id in self._ids:
            self._ids.remove(property_id)
            return False
        self._ids.append(property_id)
        return True

    def select_all(self, properties: Iterable[PropertyRecord]):
        """Reemplaza la selección por todas las propiedades visibles."""
        self._ids = []
        for prop in properties:
            self.add(prop.id)

    def clear(self):
        self._ids = []

    def resolve(self, visible: Sequence[PropertyRecord]) -> list[PropertyRecord]:
        """
        Propiedades seleccionadas entre las visibles, en el orden del listado.

        Un ID seleccionado que quedó oculto por los filtros no se incluye.
        """
        return [p for p in visible if p.id in self._ids]
