# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================
# Encapsula todo el acceso a los productos del almacén clave-valor.
# Esquema de claves: product:<id>  ->  {id, name, price, stock, ...}
# ==============================================================================

import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ferreteria.exceptions import (
    InsufficientStockError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ferreteria.models import Product
from ferreteria.repositories.interfaces import IKeyValueStore

logger = logging.getLogger(__name__)

# Campos que el administrador puede modificar con update()
EDITABLE_FIELDS = ('name', 'description', 'unit', 'category', 'price', 'stock', 'imageUrl')

# Reintentos de compare-and-swap antes de rendirse ante la contención
MAX_CAS_RETRIES = 25


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_price(value: Any) -> float:
    """
    Convierte un precio a float redondeado a 2 decimales.

    Raises:
        ValidationError: Si no es numérico, no es finito o es negativo
    """
    try:
        price = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Precio inválido: {value!r}")
    if not math.isfinite(price):
        raise ValidationError(f"Precio inválido: {value!r}")
    if price < 0:
        raise ValidationError(f"El precio no puede ser negativo: {value!r}")
    return round(price, 2)


def to_stock(value: Any) -> int:
    """
    Convierte un stock a entero no negativo.

    Raises:
        ValidationError: Si no es un entero o es negativo
    """
    if isinstance(value, bool):
        raise ValidationError(f"Stock inválido: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"El stock debe ser un número entero: {value!r}")
        value = int(value)
    try:
        stock = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Stock inválido: {value!r}")
    if stock < 0:
        raise ValidationError(f"El stock no puede ser negativo: {value!r}")
    return stock


class ProductRepository:
    """
    Repositorio de productos.

    Es dueño exclusivo de las claves product:*. Las escrituras sobre un
    producto existente (edición y movimientos de stock) usan compare-and-swap,
    así una edición del administrador no pisa un descuento de stock
    concurrente.
    """

    KEY_PREFIX = 'product:'

    def __init__(self, store: IKeyValueStore, clock: Callable[[], datetime] = _utc_now):
        """
        Args:
            store: Almacén clave-valor
            clock: Fuente de tiempo (inyectable para tests)
        """
        self.store = store
        self.clock = clock

    def _key(self, product_id: str) -> str:
        return f"{self.KEY_PREFIX}{product_id}"

    def _now(self) -> str:
        return self.clock().isoformat()

    # =========================================================================
    # CONSTRUCCIÓN
    # =========================================================================

    def build(self, fields: Dict[str, Any]) -> Product:
        """
        Construye un producto nuevo a partir de los campos recibidos.
        Asigna id y timestamps; aplica valores por defecto.

        Raises:
            ValidationError: Si faltan name, price o unit o son inválidos
        """
        name = str(fields.get('name') or '').strip()
        unit = str(fields.get('unit') or '').strip()
        price = fields.get('price')
        if not name or not unit or price is None or price == '':
            raise ValidationError('Faltan campos obligatorios: name, price, unit')

        stock = fields.get('stock')
        return Product(
            id=str(uuid.uuid4()),
            name=name,
            description=str(fields.get('description') or ''),
            price=to_price(price),
            unit=unit,
            category=str(fields.get('category') or 'General'),
            stock=to_stock(stock) if stock not in (None, '') else 0,
            image_url=str(fields.get('imageUrl') or ''),
            created_at=self._now(),
        )

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, fields: Dict[str, Any]) -> Product:
        """
        Crea un producto nuevo.

        Args:
            fields: Campos del producto (name, price, unit obligatorios)

        Returns:
            Producto creado
        """
        product = self.build(fields)
        self.store.set(self._key(product.id), product.to_dict())
        return product

    def find(self, product_id: str) -> Optional[Product]:
        """Obtiene un producto o None si no existe."""
        data = self.store.get(self._key(product_id))
        return Product.from_dict(data) if data else None

    def get(self, product_id: str) -> Product:
        """
        Obtiene un producto por su ID.

        Raises:
            NotFoundError: Si el producto no existe
        """
        product = self.find(product_id)
        if product is None:
            raise NotFoundError('Producto no encontrado', {'productId': product_id})
        return product

    def list(self) -> List[Product]:
        """Lista todos los productos ordenados por nombre."""
        products = [Product.from_dict(d) for d in self.store.get_by_prefix(self.KEY_PREFIX)]
        products.sort(key=lambda p: p.name.lower())
        return products

    def update(self, product_id: str, fields: Dict[str, Any]) -> Product:
        """
        Mezcla los campos recibidos sobre el producto existente.
        price y stock solo se convierten si vienen en la petición; si no,
        se conserva el valor anterior. id y createdAt nunca cambian.

        Raises:
            NotFoundError: Si el producto no existe
            ValidationError: Si algún campo numérico es inválido
        """
        changes = {k: fields[k] for k in EDITABLE_FIELDS if k in fields}
        if 'price' in changes:
            changes['price'] = to_price(changes['price'])
        if 'stock' in changes:
            changes['stock'] = to_stock(changes['stock'])
        for text_field in ('name', 'unit'):
            if text_field in changes:
                changes[text_field] = str(changes[text_field] or '').strip()
                if not changes[text_field]:
                    raise ValidationError(f"El campo {text_field} no puede quedar vacío")

        def apply(current: Dict[str, Any]) -> Dict[str, Any]:
            updated = dict(current)
            updated.update(changes)
            updated['id'] = current['id']
            updated['updatedAt'] = self._now()
            return updated

        return self._cas_update(product_id, apply)

    def delete(self, product_id: str) -> None:
        """
        Elimina un producto (borrado definitivo).

        Raises:
            NotFoundError: Si el producto no existe
        """
        if not self.store.delete(self._key(product_id)):
            raise NotFoundError('Producto no encontrado', {'productId': product_id})

    def bulk_replace(self, products: List[Dict[str, Any]]) -> int:
        """
        Reemplaza el catálogo completo en dos fases: borra todo y luego
        inserta los productos recibidos.

        NO es transaccional: si el almacén falla entre las dos fases el
        catálogo queda vacío o parcial.

        Returns:
            Cantidad de productos insertados
        """
        built = [self.build(p) for p in products]

        # Fase 1: borrar catálogo actual
        removed = self.store.mdel(self.store.keys(self.KEY_PREFIX))
        logger.info("Catálogo vaciado: %d productos eliminados", removed)

        # Fase 2: insertar catálogo nuevo en un solo lote
        self.store.mset({self._key(p.id): p.to_dict() for p in built})
        logger.info("Catálogo cargado: %d productos", len(built))
        return len(built)

    # =========================================================================
    # MOVIMIENTOS DE STOCK
    # =========================================================================

    def decrement_stock(self, product_id: str, quantity: int) -> Product:
        """
        Descuenta stock solo si alcanza (stock >= quantity), como una única
        escritura condicional.

        Raises:
            NotFoundError: Si el producto no existe
            InsufficientStockError: Si el stock actual no alcanza
        """
        def apply(current: Dict[str, Any]) -> Dict[str, Any]:
            stock = int(current.get('stock', 0) or 0)
            if stock < quantity:
                raise InsufficientStockError(
                    product_id, current.get('name', product_id), stock, quantity
                )
            return dict(current, stock=stock - quantity, updatedAt=self._now())

        return self._cas_update(product_id, apply)

    def increment_stock(self, product_id: str, quantity: int) -> Product:
        """
        Devuelve stock a un producto (compensación de un descuento).

        Raises:
            NotFoundError: Si el producto ya no existe
        """
        def apply(current: Dict[str, Any]) -> Dict[str, Any]:
            stock = int(current.get('stock', 0) or 0)
            return dict(current, stock=stock + quantity, updatedAt=self._now())

        return self._cas_update(product_id, apply)

    def _cas_update(
        self,
        product_id: str,
        apply: Callable[[Dict[str, Any]], Dict[str, Any]]
    ) -> Product:
        """
        Lee, transforma y escribe un producto con compare-and-swap.
        Si otro escritor se adelantó, vuelve a leer y reintenta; apply se
        re-evalúa sobre el valor fresco (y puede rechazar la operación).
        """
        key = self._key(product_id)
        for _ in range(MAX_CAS_RETRIES):
            current = self.store.get(key)
            if current is None:
                raise NotFoundError('Producto no encontrado', {'productId': product_id})
            updated = apply(current)
            if self.store.compare_and_swap(key, current, updated):
                return Product.from_dict(updated)
            logger.debug("Conflicto de escritura en %s, reintentando", key)
        raise UpstreamError(
            f"No se pudo actualizar el producto {product_id}: demasiada contención"
        )
