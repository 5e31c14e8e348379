"""
Excepciones del módulo de difusión.

Solo las violaciones de precondición y los fallos de exportación llegan
al caller; los fallos de imagen se absorben y se reflejan como placeholder.
"""


class BroadcastError(Exception):
    """Error base de difusión."""


class EmptySelectionError(BroadcastError, ValueError):
    """Se pidió un mensaje o flyer sin propiedades seleccionadas."""

    def __init__(self, message: str = "Select at least one property"):
        super().__init__(message)


class InvalidSelectionError(BroadcastError, ValueError):
    """La cantidad de propiedades no es válida para el render pedido."""


class ExportError(BroadcastError):
    """No se pudo escribir el archivo generado (collage o flyer)."""
