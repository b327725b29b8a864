# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio como dataclasses, independientes del almacenamiento.
# ==============================================================================

from .entities import (
    # Catálogo
    Product,

    # Ventas
    Sale,
    SaleItem,
    PaymentMethod,

    # Usuarios
    User,
    UserRole,
)

__all__ = [
    'Product',
    'Sale',
    'SaleItem',
    'PaymentMethod',
    'User',
    'UserRole',
]
