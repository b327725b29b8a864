# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio.
# Los atributos en Python van en snake_case; el formato de almacenamiento y
# de la API (to_dict/from_dict) usa las claves camelCase que consume el
# cliente web (imageUrl, operationNumber, customerName, ...).
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple
from enum import Enum


# ==============================================================================
# ENUMERACIONES - Valores válidos
# ==============================================================================

class UserRole(str, Enum):
    """Roles de usuario disponibles en el sistema."""
    USER = "user"
    ADMIN = "admin"


class PaymentMethod(str, Enum):
    """Métodos de pago aceptados en el checkout (el cobro es simulado)."""
    CASH = "cash"
    CARD = "card"


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Product:
    """
    Producto del catálogo.

    Attributes:
        id: Identificador opaco, inmutable
        name: Nombre visible
        description: Descripción
        price: Precio en soles (>= 0)
        unit: Unidad de venta (unidad, set, galón, ...)
        category: Categoría para filtrar el catálogo
        stock: Unidades disponibles (>= 0)
        image_url: URL de la imagen (opcional)
        created_at: Timestamp de creación (ISO 8601)
        updated_at: Timestamp de la última modificación
    """
    id: str
    name: str
    price: float
    unit: str
    description: str = ''
    category: str = 'General'
    stock: int = 0
    image_url: str = ''
    created_at: str = ''
    updated_at: Optional[str] = None

    def has_stock_for(self, quantity: int) -> bool:
        """Verifica si hay stock suficiente para la cantidad pedida."""
        return self.stock >= quantity

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia y respuesta JSON."""
        d = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'unit': self.unit,
            'category': self.category,
            'stock': self.stock,
            'imageUrl': self.image_url,
            'createdAt': self.created_at,
        }
        if self.updated_at:
            d['updatedAt'] = self.updated_at
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario almacenado."""
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            description=data.get('description', ''),
            price=float(data.get('price', 0) or 0),
            unit=data.get('unit', ''),
            category=data.get('category', 'General'),
            stock=int(data.get('stock', 0) or 0),
            image_url=data.get('imageUrl', ''),
            created_at=data.get('createdAt', ''),
            updated_at=data.get('updatedAt'),
        )


# ==============================================================================
# ENTIDADES DE VENTA
# ==============================================================================

@dataclass(frozen=True)
class SaleItem:
    """
    Línea de una venta: copia congelada de los datos del producto al momento
    de la compra. Editar o borrar el producto después no la altera.
    """
    product_id: str
    product_name: str
    quantity: int
    price: float
    unit: str = ''

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'productId': self.product_id,
            'productName': self.product_name,
            'quantity': self.quantity,
            'price': self.price,
            'unit': self.unit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SaleItem':
        return cls(
            product_id=data.get('productId', ''),
            product_name=data.get('productName', ''),
            quantity=int(data.get('quantity', 0)),
            price=float(data.get('price', 0.0)),
            unit=data.get('unit', ''),
        )


@dataclass(frozen=True)
class Sale:
    """
    Venta completada. Registro de auditoría permanente: no existe operación
    de actualización ni de borrado.

    Attributes:
        id: Identificador interno (UUID)
        operation_number: Referencia legible para el cliente
        date: Timestamp de creación (ISO 8601, UTC)
        customer_name: Nombre del cliente capturado en el checkout
        items: Líneas vendidas (tupla, orden del pedido)
        total: Suma de price * quantity, calculada al crear
        payment_method: cash o card
        last_four_digits: Solo presente si el pago fue con tarjeta
    """
    id: str
    operation_number: str
    date: str
    customer_name: str
    items: Tuple[SaleItem, ...]
    total: float
    payment_method: str
    last_four_digits: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia JSON."""
        d = {
            'id': self.id,
            'operationNumber': self.operation_number,
            'date': self.date,
            'customerName': self.customer_name,
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'paymentMethod': self.payment_method,
        }
        if self.last_four_digits is not None:
            d['lastFourDigits'] = self.last_four_digits
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        """Crea instancia desde diccionario almacenado."""
        return cls(
            id=data['id'],
            operation_number=data.get('operationNumber', ''),
            date=data.get('date', ''),
            customer_name=data.get('customerName', ''),
            items=tuple(SaleItem.from_dict(i) for i in data.get('items', [])),
            total=float(data.get('total', 0.0)),
            payment_method=data.get('paymentMethod', PaymentMethod.CASH.value),
            last_four_digits=data.get('lastFourDigits'),
        )


# ==============================================================================
# ENTIDADES DE USUARIO
# ==============================================================================

@dataclass
class User:
    """
    Usuario registrado en el servicio de identidad.

    Attributes:
        id: Identificador opaco
        email: Correo (único, en minúsculas)
        name: Nombre visible
        role: Rol que define permisos
        password_hash: Hash de la contraseña (nunca texto plano)
        created_at: Timestamp de registro
    """
    id: str
    email: str
    name: str
    role: UserRole = UserRole.USER
    password_hash: str = field(default='', repr=False)
    created_at: str = ''

    def is_admin(self) -> bool:
        """Verifica si el usuario tiene permisos de administrador."""
        return self.role == UserRole.ADMIN

    def to_public_dict(self) -> Dict[str, Any]:
        """Datos seguros para devolver al cliente (sin hash)."""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role.value,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        d = self.to_public_dict()
        d['password'] = self.password_hash
        d['createdAt'] = self.created_at
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        """Crea instancia desde diccionario."""
        try:
            role = UserRole(data.get('role', 'user'))
        except ValueError:
            role = UserRole.USER
        return cls(
            id=data['id'],
            email=data.get('email', ''),
            name=data.get('name', ''),
            role=role,
            password_hash=data.get('password', ''),
            created_at=data.get('createdAt', ''),
        )
