"""
DealDrop - Difusión de propiedades mayoristas.

Convierte selecciones de propiedades en mensajes de WhatsApp,
collages de imágenes y flyers PDF listos para compartir.
"""

__version__ = "0.1.0"
