# ==============================================================================
# EXCEPCIONES DEL DOMINIO
# ==============================================================================
# Taxonomía de errores de la tienda. Cada excepción conoce su código HTTP,
# así las rutas solo tienen que dejarlas propagar y el manejador de errores
# de main.py arma el sobre {success: false, error}.
# ==============================================================================

from typing import Any, Dict, Optional


class FerreteriaError(Exception):
    """Excepción base de la aplicación."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convierte el error al sobre de respuesta JSON."""
        payload = {'success': False, 'error': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(FerreteriaError):
    """Campos faltantes o mal formados en la petición."""

    status_code = 400


class InsufficientStockError(ValidationError):
    """El stock disponible no alcanza para la cantidad solicitada."""

    def __init__(self, product_id: str, product_name: str, available: int, requested: int):
        message = (
            f"Stock insuficiente para {product_name}. "
            f"Disponible: {available}, Solicitado: {requested}"
        )
        super().__init__(message, {
            'productId': product_id,
            'productName': product_name,
            'available': available,
            'requested': requested,
        })
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested


class NotFoundError(FerreteriaError):
    """Producto o venta inexistente."""

    status_code = 404


class AuthenticationError(FerreteriaError):
    """Credencial ausente, inválida o vencida."""

    status_code = 401


class AuthorizationError(FerreteriaError):
    """Identidad válida pero sin el rol requerido."""

    status_code = 403


class UpstreamError(FerreteriaError):
    """Falla del almacenamiento o del servicio de identidad."""

    status_code = 500
