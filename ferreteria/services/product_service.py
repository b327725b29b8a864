# ==============================================================================
# SERVICIO DE CATÁLOGO
# ==============================================================================
# Centraliza la lógica de negocio del catálogo de productos: búsqueda,
# filtros por categoría, CRUD del administrador y carga del catálogo inicial.
# ==============================================================================

import logging
from typing import Any, Dict, List, Optional

from ferreteria.models import Product
from ferreteria.performance_logger import profile_function
from ferreteria.repositories.product_repository import ProductRepository
from ferreteria.services.catalog_seed import SEED_PRODUCTS

logger = logging.getLogger(__name__)


class ProductService:
    """
    Servicio para gestión del catálogo.

    Responsabilidades:
    - Consulta del catálogo con búsqueda y filtro por categoría
    - CRUD de productos (solo administrador, lo controla la ruta)
    - Reinicialización del catálogo
    """

    def __init__(self, product_repo: ProductRepository, seed_products: List[Dict[str, Any]] = None):
        """
        Args:
            product_repo: Repositorio de productos
            seed_products: Catálogo inicial (por defecto SEED_PRODUCTS)
        """
        self.product_repo = product_repo
        self.seed_products = seed_products if seed_products is not None else SEED_PRODUCTS

    # =========================================================================
    # CONSULTA
    # =========================================================================

    def list_products(self, query: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
        """
        Lista el catálogo aplicando filtros opcionales.

        Args:
            query: Texto a buscar en nombre o descripción (sin distinguir mayúsculas)
            category: Categoría exacta

        Returns:
            Productos que coinciden, ordenados por nombre
        """
        products = self.product_repo.list()

        if query:
            q = query.strip().lower()
            products = [
                p for p in products
                if q in p.name.lower() or q in p.description.lower()
            ]

        if category:
            products = [p for p in products if p.category == category]

        return products

    def list_categories(self) -> List[str]:
        """Categorías únicas del catálogo, ordenadas alfabéticamente."""
        return sorted({p.category for p in self.product_repo.list() if p.category})

    def get_product(self, product_id: str) -> Product:
        return self.product_repo.get(product_id)

    # =========================================================================
    # ADMINISTRACIÓN
    # =========================================================================

    def create_product(self, fields: Dict[str, Any], user: str = None) -> Product:
        product = self.product_repo.create(fields)
        logger.info("Producto %s (%s) creado por %s", product.id, product.name, user or 'sistema')
        return product

    def update_product(self, product_id: str, fields: Dict[str, Any], user: str = None) -> Product:
        product = self.product_repo.update(product_id, fields)
        logger.info("Producto %s actualizado por %s", product_id, user or 'sistema')
        return product

    def delete_product(self, product_id: str, user: str = None) -> None:
        self.product_repo.delete(product_id)
        logger.info("Producto %s eliminado por %s", product_id, user or 'sistema')

    @profile_function(name="Reinicializar catálogo")
    def reset_catalog(self, user: str = None) -> int:
        """
        Borra todos los productos y carga el catálogo inicial.
        No es atómico (ver ProductRepository.bulk_replace).

        Returns:
            Cantidad de productos cargados
        """
        logger.warning("Reinicialización del catálogo solicitada por %s", user or 'sistema')
        return self.product_repo.bulk_replace(self.seed_products)

    def init_sample_data(self) -> Dict[str, Any]:
        """
        Carga el catálogo inicial solo si no hay productos.

        Returns:
            Dict con message y count
        """
        existing = self.product_repo.list()
        if existing:
            return {'message': 'Los datos ya existen', 'count': len(existing)}

        for fields in self.seed_products:
            self.product_repo.create(fields)
        logger.info("Datos de ejemplo cargados: %d productos", len(self.seed_products))
        return {'message': 'Datos de ejemplo cargados', 'count': len(self.seed_products)}
