# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Contratos (protocolos) que cumplen el almacén clave-valor y los
# repositorios. Los servicios dependen de estas interfaces, no de las
# implementaciones concretas, así que cambiar el archivo JSON por un
# almacén hospedado solo requiere una nueva clase que cumpla IKeyValueStore.
#
# ==============================================================================

from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from ferreteria.models import Product, Sale, User


@runtime_checkable
class IKeyValueStore(Protocol):
    """
    Almacén clave-valor durable con búsqueda por prefijo.
    Los valores son blobs JSON. No hay transacciones entre claves; la única
    operación condicional es compare_and_swap sobre una clave.
    """

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def keys(self, prefix: str = '') -> List[str]:
        ...

    def get_by_prefix(self, prefix: str) -> List[Any]:
        ...

    def mget(self, keys: Iterable[str]) -> List[Optional[Any]]:
        ...

    def mset(self, items: Dict[str, Any]) -> None:
        ...

    def mdel(self, keys: Iterable[str]) -> int:
        ...

    def compare_and_swap(self, key: str, expected: Optional[Any], new: Any) -> bool:
        """Reemplaza el valor solo si el actual es igual a expected (None = ausente)."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class IProductRepository(Protocol):
    """Interfaz del repositorio de productos (claves product:<id>)."""

    def create(self, fields: Dict[str, Any]) -> Product:
        ...

    def get(self, product_id: str) -> Product:
        ...

    def find(self, product_id: str) -> Optional[Product]:
        ...

    def list(self) -> List[Product]:
        ...

    def update(self, product_id: str, fields: Dict[str, Any]) -> Product:
        ...

    def delete(self, product_id: str) -> None:
        ...

    def bulk_replace(self, products: List[Dict[str, Any]]) -> int:
        ...

    def decrement_stock(self, product_id: str, quantity: int) -> Product:
        ...

    def increment_stock(self, product_id: str, quantity: int) -> Product:
        ...


@runtime_checkable
class ISaleRepository(Protocol):
    """Interfaz del libro de ventas (claves sale:<id>), solo agregar."""

    def append(self, sale: Sale) -> Sale:
        ...

    def list(self) -> List[Sale]:
        ...

    def get(self, sale_id: str) -> Sale:
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Interfaz del repositorio de usuarios y sesiones."""

    def create_user(self, user: User) -> bool:
        ...

    def get_user(self, user_id: str) -> Optional[User]:
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def update_user(self, user: User) -> None:
        ...

    def save_session(self, token: str, user_id: str, expires_at: str) -> None:
        ...

    def get_session(self, token: str) -> Optional[Dict[str, Any]]:
        ...

    def delete_session(self, token: str) -> bool:
        ...
