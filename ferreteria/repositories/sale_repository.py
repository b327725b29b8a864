# ==============================================================================
# REPOSITORIO DE VENTAS (LIBRO DE VENTAS)
# ==============================================================================
# Encapsula todo el acceso a las ventas del almacén clave-valor.
# Esquema de claves: sale:<id>  ->  {id, operationNumber, items, total, ...}
#
# Solo se agrega: no existe update ni delete. Una venta es un registro de
# auditoría permanente.
# ==============================================================================

from datetime import datetime, timezone
from typing import List

from ferreteria.exceptions import NotFoundError, UpstreamError
from ferreteria.models import Sale
from ferreteria.repositories.interfaces import IKeyValueStore


def _parse_date(value: str) -> datetime:
    """Parsea timestamp ISO (acepta sufijo Z)."""
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (AttributeError, ValueError):
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SaleRepository:
    """
    Libro de ventas.

    Formato almacenado:
    {
        "id": "9b1d...",
        "operationNumber": "OP-20241019153000-X7K2QA",
        "date": "2024-10-19T15:30:00.123456+00:00",
        "customerName": "Juan Pérez",
        "items": [{"productId": ..., "productName": ..., "quantity": 3, ...}],
        "total": 77.97,
        "paymentMethod": "card",
        "lastFourDigits": "4242"
    }
    """

    KEY_PREFIX = 'sale:'

    def __init__(self, store: IKeyValueStore):
        self.store = store

    def _key(self, sale_id: str) -> str:
        return f"{self.KEY_PREFIX}{sale_id}"

    def append(self, sale: Sale) -> Sale:
        """
        Registra una venta nueva. Nunca sobrescribe una venta existente.

        Raises:
            UpstreamError: Si ya existe una venta con el mismo id
        """
        if not self.store.compare_and_swap(self._key(sale.id), None, sale.to_dict()):
            raise UpstreamError(f"Ya existe una venta con id {sale.id}")
        return sale

    def list(self) -> List[Sale]:
        """
        Lista todas las ventas, la más reciente primero.
        Recorre todo el libro (sin paginación).
        """
        sales = [Sale.from_dict(d) for d in self.store.get_by_prefix(self.KEY_PREFIX)]
        sales.sort(key=lambda s: _parse_date(s.date), reverse=True)
        return sales

    def get(self, sale_id: str) -> Sale:
        """
        Obtiene una venta por su id.

        Raises:
            NotFoundError: Si la venta no existe
        """
        data = self.store.get(self._key(sale_id))
        if not data:
            raise NotFoundError('Venta no encontrada', {'saleId': sale_id})
        return Sale.from_dict(data)
