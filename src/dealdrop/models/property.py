"""
Modelo de propiedad.

Representa una fila de la tabla 'properties' tal como la expone Supabase.
Este subsistema solo la lee: nunca la modifica ni la persiste.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PropertyType(str, Enum):
    """Tipos de propiedad publicables."""

    SFR = "SFR"
    DUPLEX = "Duplex"
    TRIPLEX = "Triplex"
    QUAD = "Quad"
    MULTI_FAMILY = "Multi-Family"
    COMMERCIAL = "Commercial"


class PropertyStatus(str, Enum):
    """Estado comercial de la propiedad."""

    AVAILABLE = "Available"
    PENDING = "Pending"
    UNDER_CONTRACT = "Under Contract"
    SOLD = "Sold"


def _match_enum(enum_cls: type[Enum], value):
    """Resuelve un valor de enum ignorando mayúsculas y espacios."""
    if value is None or isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    if not text:
        return None
    for member in enum_cls:
        if member.value.lower() == text.lower():
            return member
    return value  # pydantic reporta el error


class PropertyRecord(BaseModel):
    """
    Propiedad mayorista lista para difusión.

    Solo `asking_price` es obligatorio entre los campos numéricos;
    el resto puede venir en cero o nulo y se omite al renderizar.
    """

    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        extra="ignore",
    )

    # Identificación
    id: str = Field(..., description="UUID generado por Supabase")

    # Ubicación
    street_address: str = Field(..., description="Calle y número")
    city: str = Field(default="", description="Ciudad")
    state: str = Field(default="", description="Estado (ej: FL)")
    zip_code: str = Field(default="", description="Código postal")
    county: str = Field(default="", description="Condado")

    # Economía
    asking_price: float = Field(..., ge=0, description="Precio pedido en USD")
    arv: Optional[float] = Field(None, ge=0, description="After-repair value en USD")

    # Características físicas
    bedrooms: int = Field(default=0, ge=0, description="Dormitorios")
    bathrooms: float = Field(default=0, ge=0, description="Baños (admite medios)")
    square_footage: Optional[int] = Field(None, ge=0, description="Superficie en sqft")
    property_type: Optional[PropertyType] = Field(None, description="Tipo de propiedad")
    status: Optional[PropertyStatus] = Field(None, description="Estado comercial")

    # Media
    image_url: Optional[str] = Field(None, description="URL de la imagen principal")

    # Metadatos de la tabla
    comments: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("city", "state", "zip_code", "county", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else str(value).strip()

    @field_validator("bedrooms", "bathrooms", mode="before")
    @classmethod
    def _none_to_zero(cls, value):
        return 0 if value is None else value

    @field_validator("image_url", mode="before")
    @classmethod
    def _blank_image(cls, value):
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @field_validator("property_type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        return _match_enum(PropertyType, value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return _match_enum(PropertyStatus, value)

    @property
    def street_city(self) -> str:
        """'Calle, Ciudad' sin separadores colgando."""
        return ", ".join(p for p in (self.street_address, self.city) if p)

    @property
    def full_address(self) -> str:
        """Dirección completa: 'Calle, Ciudad, ST 12345'."""
        region = " ".join(p for p in (self.state, self.zip_code) if p)
        return ", ".join(p for p in (self.street_address, self.city, region) if p)
