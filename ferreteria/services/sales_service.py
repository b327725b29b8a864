# ==============================================================================
# SERVICIO DE VENTAS
# ==============================================================================
# Centraliza toda la lógica de negocio relacionada con ventas.
# checkout() es la ÚNICA función que crea ventas:
#
#   1. Valida el pedido (items, cliente, líneas, pago)
#   2. Verifica que cada producto exista
#   3. Verifica stock suficiente (sumando líneas repetidas del mismo producto)
#   4. Descuenta stock con escrituras condicionales por producto
#   5. Calcula el total con los precios enviados por el cliente
#   6. Registra la venta inmutable con su número de operación
#
# Cualquier rechazo en los pasos 1-3 no deja efectos. Si el paso 4 o 6
# falla, los descuentos ya aplicados se compensan devolviendo el stock.
# ==============================================================================

import logging
import re
import secrets
import string
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ferreteria.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from ferreteria.models import PaymentMethod, Product, Sale, SaleItem
from ferreteria.performance_logger import profile_function
from ferreteria.repositories.product_repository import ProductRepository, to_price
from ferreteria.repositories.sale_repository import SaleRepository

logger = logging.getLogger(__name__)

# Número de operación: OP-<AAAAMMDDhhmmss>-<sufijo>
OPERATION_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
OPERATION_SUFFIX_LENGTH = 6

_LAST_FOUR_RE = re.compile(r'^\d{4}$')


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def random_suffix(length: int = OPERATION_SUFFIX_LENGTH) -> str:
    return ''.join(secrets.choice(OPERATION_SUFFIX_ALPHABET) for _ in range(length))


class SalesService:
    """
    Servicio para gestión de ventas.

    Responsabilidades:
    - Procesar el checkout (validación, descuento de stock, registro)
    - Consultar el libro de ventas

    No guarda estado propio: el almacén es la única fuente de verdad.
    """

    def __init__(
        self,
        product_repo: ProductRepository,
        sale_repo: SaleRepository,
        clock: Callable[[], datetime] = _utc_now,
        suffix_generator: Callable[[], str] = random_suffix
    ):
        """
        Args:
            product_repo: Repositorio de productos
            sale_repo: Libro de ventas
            clock: Fuente de tiempo (inyectable para tests)
            suffix_generator: Generador del sufijo aleatorio del número de operación
        """
        self.product_repo = product_repo
        self.sale_repo = sale_repo
        self.clock = clock
        self.suffix_generator = suffix_generator

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    @profile_function(name="Procesar checkout")
    def checkout(self, order: Dict[str, Any]) -> Sale:
        """
        Procesa un pedido completo y registra la venta.

        Args:
            order: {
                items: [{id, name, price, unit, quantity}, ...],
                paymentMethod: 'cash' | 'card',
                customerName: str,
                lastFourDigits: str (solo tarjeta)
            }

        Returns:
            Venta creada

        Raises:
            ValidationError: Pedido vacío, cliente vacío, línea o pago inválido
            NotFoundError: Algún producto no existe
            InsufficientStockError: Algún producto no tiene stock suficiente
            UpstreamError: Falla del almacenamiento
        """
        items = order.get('items')
        if not isinstance(items, list) or not items:
            raise ValidationError('El pedido no tiene productos')

        customer_name = order.get('customerName')
        if not isinstance(customer_name, str) or not customer_name.strip():
            raise ValidationError('El nombre del cliente es obligatorio')
        customer_name = customer_name.strip()

        lines = [self._parse_line(item, position) for position, item in enumerate(items, 1)]
        payment_method, last_four = self._parse_payment(order)

        # Existencia: el primer producto inexistente aborta todo el pedido
        products: Dict[str, Product] = {}
        for line in lines:
            if line['id'] in products:
                continue
            product = self.product_repo.find(line['id'])
            if product is None:
                label = line['name'] or line['id']
                raise NotFoundError(
                    f"Producto no encontrado: {label}",
                    {'productId': line['id']}
                )
            products[line['id']] = product

        # Stock: se compara contra la suma pedida por producto
        requested: 'OrderedDict[str, int]' = OrderedDict()
        for line in lines:
            requested[line['id']] = requested.get(line['id'], 0) + line['quantity']

        for product_id, quantity in requested.items():
            product = products[product_id]
            if not product.has_stock_for(quantity):
                raise InsufficientStockError(product_id, product.name, product.stock, quantity)

        # A partir de aquí hay efectos: descontar y registrar
        applied = self._apply_decrements(requested)

        sale_items = tuple(
            SaleItem(
                product_id=line['id'],
                product_name=line['name'] or products[line['id']].name,
                quantity=line['quantity'],
                price=line['price'],
                unit=line['unit'] or products[line['id']].unit,
            )
            for line in lines
        )
        total = round(sum(item.price * item.quantity for item in sale_items), 2)

        now = self.clock()
        sale = Sale(
            id=str(uuid.uuid4()),
            operation_number=self.generate_operation_number(now),
            date=now.isoformat(),
            customer_name=customer_name,
            items=sale_items,
            total=total,
            payment_method=payment_method.value,
            last_four_digits=last_four,
        )

        try:
            self.sale_repo.append(sale)
        except Exception:
            logger.error("No se pudo registrar la venta %s, devolviendo stock", sale.operation_number)
            self._compensate(applied)
            raise

        logger.info(
            "Venta %s registrada - Cliente: %s - Total: S/ %.2f - %d items - Pago: %s",
            sale.operation_number, customer_name, total, len(sale_items), payment_method.value
        )
        return sale

    def generate_operation_number(self, when: Optional[datetime] = None) -> str:
        """
        Genera el número de operación visible para el cliente.
        No se verifica unicidad: el sufijo aleatorio hace la colisión
        despreciable.
        """
        when = when or self.clock()
        return f"OP-{when:%Y%m%d%H%M%S}-{self.suffix_generator()}"

    def _parse_line(self, item: Any, position: int) -> Dict[str, Any]:
        """
        Valida y normaliza una línea del pedido.

        Returns:
            Dict {id, name, unit, quantity, price}
        """
        if not isinstance(item, dict):
            raise ValidationError(f"Línea {position} inválida")

        product_id = item.get('id')
        if not isinstance(product_id, str) or not product_id.strip():
            raise ValidationError(f"Línea {position}: falta el id del producto")

        quantity = item.get('quantity')
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(f"Línea {position}: cantidad inválida ({quantity!r})")

        if item.get('price') is None:
            raise ValidationError(f"Línea {position}: falta el precio")
        try:
            price = to_price(item['price'])
        except ValidationError as e:
            raise ValidationError(f"Línea {position}: {e.message}")

        return {
            'id': product_id.strip(),
            'name': str(item.get('name') or ''),
            'unit': str(item.get('unit') or ''),
            'quantity': quantity,
            'price': price,
        }

    def _parse_payment(self, order: Dict[str, Any]) -> Tuple[PaymentMethod, Optional[str]]:
        """
        Valida el método de pago. Los últimos 4 dígitos solo se conservan
        para pagos con tarjeta.
        """
        try:
            method = PaymentMethod(order.get('paymentMethod'))
        except ValueError:
            raise ValidationError('Método de pago inválido: use cash o card')

        if method is PaymentMethod.CASH:
            return method, None

        last_four = str(order.get('lastFourDigits') or '').strip()
        if not _LAST_FOUR_RE.match(last_four):
            raise ValidationError('Para pagos con tarjeta se requieren los últimos 4 dígitos')
        return method, last_four

    def _apply_decrements(self, requested: 'OrderedDict[str, int]') -> List[Tuple[str, int]]:
        """
        Descuenta stock producto por producto con escrituras condicionales.
        Si un descuento falla (otro pedido se llevó el stock entre la
        validación y la escritura, o el almacén falla), devuelve lo ya
        descontado y re-lanza el error.
        """
        applied: List[Tuple[str, int]] = []
        try:
            for product_id, quantity in requested.items():
                self.product_repo.decrement_stock(product_id, quantity)
                applied.append((product_id, quantity))
        except Exception as e:
            if isinstance(e, InsufficientStockError):
                logger.warning("Stock consumido por otro pedido durante el checkout: %s", e.message)
            self._compensate(applied)
            raise
        return applied

    def _compensate(self, applied: List[Tuple[str, int]]) -> None:
        """Devuelve el stock descontado, en orden inverso."""
        for product_id, quantity in reversed(applied):
            try:
                self.product_repo.increment_stock(product_id, quantity)
            except Exception:
                logger.exception(
                    "No se pudo devolver %d unidades al producto %s; revisar stock manualmente",
                    quantity, product_id
                )

    # =========================================================================
    # CONSULTA DE VENTAS
    # =========================================================================

    def get_sale(self, sale_id: str) -> Sale:
        """
        Obtiene una venta por su id.

        Raises:
            NotFoundError: Si no existe
        """
        return self.sale_repo.get(sale_id)

    def list_sales(self) -> List[Sale]:
        """Todas las ventas, la más reciente primero."""
        return self.sale_repo.list()
