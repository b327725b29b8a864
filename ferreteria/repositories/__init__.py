# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso al almacén clave-valor.
# Para usar un almacén hospedado solo hay que escribir otra implementación
# de IKeyValueStore; repositorios y servicios no cambian.
#
# ESTRUCTURA:
# ├── interfaces.py          → Protocolos (contratos)
# ├── base.py                → Almacenes clave-valor (memoria, archivo JSON)
# ├── product_repository.py  → product:<id>
# ├── sale_repository.py     → sale:<id>
# └── user_repository.py     → user:<id>, user-email:<email>, session:<token>
# ==============================================================================

from .interfaces import (
    IKeyValueStore,
    IProductRepository,
    ISaleRepository,
    IUserRepository,
)

from .base import BaseKeyValueStore, MemoryKeyValueStore, JSONFileKeyValueStore
from .product_repository import ProductRepository
from .sale_repository import SaleRepository
from .user_repository import UserRepository

__all__ = [
    # Interfaces
    'IKeyValueStore',
    'IProductRepository',
    'ISaleRepository',
    'IUserRepository',

    # Almacenes
    'BaseKeyValueStore',
    'MemoryKeyValueStore',
    'JSONFileKeyValueStore',

    # Repositorios
    'ProductRepository',
    'SaleRepository',
    'UserRepository',
]
