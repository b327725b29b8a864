# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las rutas (main.py) solo llaman a servicios
# 4. Los servicios NO conocen el tipo de almacenamiento
#
# ESTRUCTURA:
# ├── product_service.py → Catálogo, búsqueda, reinicialización
# ├── sales_service.py   → Checkout y libro de ventas
# ├── user_service.py    → Registro, sesiones, roles
# └── catalog_seed.py    → Catálogo inicial
# ==============================================================================

from ferreteria.services.product_service import ProductService
from ferreteria.services.sales_service import SalesService
from ferreteria.services.user_service import UserService

__all__ = [
    'ProductService',
    'SalesService',
    'UserService',
]
